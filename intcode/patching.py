"""
Noun/verb patching — configure a program by overwriting cells before it runs.

Programs of the "gravity assist" style take their parameters in cells 1
(noun) and 2 (verb) and leave their result in cell 0. Patching is a plain
memory overwrite on the emulator that then executes, so

    prog.start().run_with([(1, n), (2, v)])

is the same as editing the program text and running it unpatched.
"""

import logging
from typing import Iterable, Optional, Tuple

from .config import NOUN_ADDRESS, NOUN_VERB_RANGE, RESULT_ADDRESS, VERB_ADDRESS
from .emu import IntcodeEmulator
from .errors import IntcodeError, SearchError
from .program import Program

log = logging.getLogger(__name__)


def run_patched(program: Program, patches: Iterable[Tuple[int, int]]) -> IntcodeEmulator:
    """Run a fresh VM with patches applied; return it for inspection."""
    emu = program.start()
    emu.run_with(patches)
    return emu


def run_noun_verb(program: Program, noun: int, verb: int) -> int:
    """Result cell after running with the given noun and verb."""
    emu = run_patched(program, [(NOUN_ADDRESS, noun), (VERB_ADDRESS, verb)])
    return emu[RESULT_ADDRESS]


def find_noun_verb(program: Program, target: int,
                   nouns: Optional[Iterable[int]] = None,
                   verbs: Optional[Iterable[int]] = None) -> Tuple[int, int]:
    """Search noun/verb pairs until the result cell equals target.

    Candidates whose run faults are skipped. Raises SearchError if no
    pair produces the target.
    """
    nouns = list(NOUN_VERB_RANGE if nouns is None else nouns)
    verbs = list(NOUN_VERB_RANGE if verbs is None else verbs)

    for noun in nouns:
        for verb in verbs:
            try:
                result = run_noun_verb(program, noun, verb)
            except IntcodeError as e:
                log.debug("noun=%d verb=%d faulted: %s", noun, verb, e)
                continue
            if result == target:
                log.info("Found noun=%d verb=%d for target %d", noun, verb, target)
                return noun, verb
    raise SearchError(f"No noun/verb pair produces {target}")
