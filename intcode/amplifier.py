"""
Amplifier chains — several VMs wired output-to-input.

Each amplifier is an independent emulator running the same program. It
first reads its phase setting, then a stream of input signals. There is
no shared state between amplifiers: the caller hands every value from
one VM to the next.

Two topologies:

    series      A -> B -> C -> D -> E
                each amplifier runs to completion once; its last output
                is the next amplifier's signal

    feedback    A -> B -> C -> D -> E
                ^                   |
                +-------------------+
                round-robin run_to_output() calls until an amplifier
                halts; the answer is the last signal E produced
"""

import logging
from itertools import permutations
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import AMPLIFIER_PROFILES, INITIAL_SIGNAL
from .emu import IntcodeEmulator
from .errors import NoOutputError
from .periph.channels import OutputBuffer
from .program import Program

log = logging.getLogger(__name__)


def run_series(program: Program, phases: Sequence[int],
               signal: int = INITIAL_SIGNAL) -> int:
    """Run one amplifier per phase in a single pass."""
    for phase in phases:
        signal = (program.start()
                  .read_values([phase, signal])
                  .write_to(OutputBuffer())
                  .run_return())
    return signal


def run_feedback(program: Program, phases: Sequence[int],
                 signal: int = INITIAL_SIGNAL) -> int:
    """Run amplifiers in a loop until one of them halts.

    Every amplifier is pre-fed its phase. Each round feeds the current
    signal to the next amplifier and runs it to its next output.
    """
    amps = build_chain(program, phases)
    if not amps:
        return signal

    last_signal: Optional[int] = None
    rounds = 0
    while True:
        for idx, amp in enumerate(amps):
            amp.feed_input([signal])
            out = amp.run_to_output()
            if out is None:
                log.debug("Amplifier %d halted after %d round(s)", idx, rounds)
                if last_signal is None:
                    raise NoOutputError("Feedback loop halted before a full round")
                return last_signal
            signal = out
        last_signal = signal
        rounds += 1


def thruster_signal(program: Program, phases: Sequence[int],
                    feedback: bool = False) -> int:
    """Signal for one fixed phase order."""
    if feedback:
        return run_feedback(program, phases)
    return run_series(program, phases)


def max_thruster_signal(program: Program, phases: Optional[Iterable[int]] = None,
                        feedback: bool = False) -> Tuple[int, Tuple[int, ...]]:
    """Best signal over every ordering of the phase settings.

    Returns (signal, phase_order). Defaults to the profile matching
    ``feedback`` in config.AMPLIFIER_PROFILES.
    """
    if phases is None:
        profile = AMPLIFIER_PROFILES["feedback" if feedback else "series"]
        phases = profile["phases"]
    phases = tuple(phases)

    best: Optional[Tuple[int, Tuple[int, ...]]] = None
    for order in permutations(phases):
        signal = thruster_signal(program, order, feedback)
        if best is None or signal > best[0]:
            best = (signal, order)
    log.info("Best thruster signal %d with phases %s", best[0], best[1])
    return best


def build_chain(program: Program, phases: Sequence[int]) -> List[IntcodeEmulator]:
    """Fresh amplifiers pre-fed with their phases, for manual stepping."""
    return [program.start().read_values([phase]).write_to(OutputBuffer())
            for phase in phases]
