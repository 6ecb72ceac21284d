"""
Intcode VM — Main Emulator Class

Integrates:
  - Memory (mem/memory.py) — sparse cells, ptr, relative base
  - Decoder (cpu/decoder.py) — op-code table, addressing modes
  - ALU (cpu/alu.py) — signed 64-bit arithmetic
  - I/O channels (periph/channels.py) — 8-byte little-endian records

Execution model (one step):
  1. Decode the instruction at ptr (operands resolved against ptr/base)
  2. Apply it: write memory, read input, write output, move base
  3. Advance ptr by the instruction length unless a jump was taken
  4. Report what happened: nothing visible, an output, or halt

Machine states:
  RUNNING        — executing instructions
  WAITING_INPUT  — blocked inside the input channel's read()
  SUSPENDED      — paused right after producing an output
  HALTED         — HLT executed; stepping again is a no-op
  FAULTED        — a decode/read/write error occurred; stepping again
                   re-raises it

Driving modes:
  run()            — until halt, returns every output
  run_to_output()  — until the next output (returned) or halt (None)
  run_with(p)      — apply (address, value) patches, then run()
  run_return()     — run(), return the last output
  outputs()        — generator over outputs until halt
  iter(emu)        — one step per next(): output value or None
"""

import logging
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

from .cpu import alu
from .cpu.decoder import (
    ADD, ARB, EQ, HLT, INP, JNZ, JZ, LT, MUL, OUTP,
    Instruction, decode_at,
)
from .disasm import disassemble_at
from .errors import IntcodeError, NoOutputError
from .mem.memory import Memory
from .periph.channels import (
    EmptyInput, InputChannel, InputQueue, NullOutput, OutputChannel,
    append_words, read_word, write_word,
)

log = logging.getLogger(__name__)


class MachineState(Enum):
    RUNNING = 'RUNNING'
    WAITING_INPUT = 'WAITING_INPUT'
    SUSPENDED = 'SUSPENDED'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


class StopReason(Enum):
    OUTPUT = 'OUTPUT'
    HALT = 'HALT'


class IntcodeEmulator:
    """Intcode virtual machine bound to one input and one output channel.

    Usage:
        emu = IntcodeEmulator([3, 0, 4, 0, 99]).read_values([7])
        emu.run()          # [7]
        emu[0]             # 7
    """

    def __init__(self, code: Iterable[int] = (),
                 stdin: Optional[InputChannel] = None,
                 stdout: Optional[OutputChannel] = None):
        self.mem = Memory(code)
        self.stdin = stdin if stdin is not None else EmptyInput()
        self.stdout = stdout if stdout is not None else NullOutput()

        self.state = MachineState.RUNNING
        self.fault: Optional[IntcodeError] = None
        self.last_output: Optional[int] = None
        self.steps = 0

        self._next_ptr = 0
        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Channel binding
    # ══════════════════════════════════════════════

    def read_from(self, stream: InputChannel) -> 'IntcodeEmulator':
        """Rebind the input channel. Returns self for chaining."""
        self.stdin = stream
        return self

    def write_to(self, stream: OutputChannel) -> 'IntcodeEmulator':
        """Rebind the output channel. Returns self for chaining."""
        self.stdout = stream
        return self

    def read_values(self, values: Iterable[int]) -> 'IntcodeEmulator':
        """Bind a fresh InputQueue pre-filled with values."""
        return self.read_from(InputQueue(values))

    def feed_input(self, values: Iterable[int]):
        """Append values behind whatever input is still unread.

        The input channel must be seekable (InputQueue, BytesIO, files).
        """
        values = list(values)
        append_words(self.stdin, values)
        log.debug("Fed %d value(s) at ptr=%d", len(values), self.mem.ptr)

    @property
    def output_values(self) -> List[int]:
        """Every value written so far, read back from an OutputBuffer."""
        if not hasattr(self.stdout, 'values'):
            raise TypeError(
                f"{type(self.stdout).__name__} does not keep written values")
        return self.stdout.values

    # ══════════════════════════════════════════════
    # Inspection
    # ══════════════════════════════════════════════

    def __getitem__(self, addr: int) -> int:
        return self.mem.read(addr)

    @property
    def ptr(self) -> int:
        return self.mem.ptr

    @property
    def base(self) -> int:
        return self.mem.base

    @property
    def halted(self) -> bool:
        return self.state == MachineState.HALTED

    @property
    def faulted(self) -> bool:
        return self.state == MachineState.FAULTED

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction.

        Returns None if it produced nothing visible, StopReason.OUTPUT if it
        produced a value (see last_output), StopReason.HALT on halt.
        Decode, read and write failures raise IntcodeError and leave the
        machine FAULTED.
        """
        if self.state == MachineState.HALTED:
            return StopReason.HALT
        if self.state == MachineState.FAULTED:
            raise self.fault

        self.state = MachineState.RUNNING
        try:
            instr = decode_at(self.mem)
            if self._trace:
                self._record_trace()
            self._next_ptr = instr.address + instr.length
            reason = self._dispatch[instr.mnemonic](instr)
        except IntcodeError as e:
            self._fail(e)
            raise

        self.mem.ptr = self._next_ptr
        self.steps += 1
        return reason

    def __iter__(self) -> 'IntcodeEmulator':
        return self

    def __next__(self) -> Optional[int]:
        reason = self.step()
        if reason == StopReason.HALT:
            raise StopIteration
        if reason == StopReason.OUTPUT:
            return self.last_output
        return None

    def run_to_output(self) -> Optional[int]:
        """Run until the next output (returned) or halt (None).

        Execution pauses right after the output instruction, so the caller
        can feed more input and call this again.
        """
        while True:
            reason = self.step()
            if reason == StopReason.OUTPUT:
                return self.last_output
            if reason == StopReason.HALT:
                return None

    def outputs(self) -> Iterator[int]:
        """Yield each output as it is produced, until halt."""
        while True:
            value = self.run_to_output()
            if value is None:
                return
            yield value

    def run(self) -> List[int]:
        """Run to completion and return every output in order."""
        return list(self.outputs())

    def run_with(self, patches: Iterable[Tuple[int, int]]) -> List[int]:
        """Overwrite memory cells, then run to completion."""
        patches = list(patches)
        self.mem.patch(patches)
        log.debug("Applied %d patch(es): %s", len(patches), patches)
        return self.run()

    def run_return(self) -> int:
        """Run to completion and return the last output."""
        outs = self.run()
        if not outs:
            raise NoOutputError()
        return outs[-1]

    def _fail(self, error: IntcodeError):
        self.state = MachineState.FAULTED
        self.fault = error
        log.warning("Faulted at ptr=%d after %d steps: %s",
                    self.mem.ptr, self.steps, error)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr) -> Optional[StopReason]
    # Jumps overwrite self._next_ptr.

    def _build_dispatch(self) -> dict:
        return {
            ADD:  self._op_add,
            MUL:  self._op_mul,
            INP:  self._op_in,
            OUTP: self._op_out,
            JNZ:  self._op_jnz,
            JZ:   self._op_jz,
            LT:   self._op_lt,
            EQ:   self._op_eq,
            ARB:  self._op_arb,
            HLT:  self._op_hlt,
        }

    def _op_add(self, instr: Instruction):
        a, b = instr.values
        self.mem.write(instr.target, alu.add(a, b))

    def _op_mul(self, instr: Instruction):
        a, b = instr.values
        self.mem.write(instr.target, alu.mul(a, b))

    def _op_in(self, instr: Instruction):
        self.state = MachineState.WAITING_INPUT
        value = read_word(self.stdin)
        self.state = MachineState.RUNNING
        self.mem.write(instr.target, value)

    def _op_out(self, instr: Instruction):
        (value,) = instr.values
        write_word(self.stdout, value)
        self.last_output = value
        self.state = MachineState.SUSPENDED
        return StopReason.OUTPUT

    def _op_jnz(self, instr: Instruction):
        value, target = instr.values
        if value != 0:
            self._next_ptr = target

    def _op_jz(self, instr: Instruction):
        value, target = instr.values
        if value == 0:
            self._next_ptr = target

    def _op_lt(self, instr: Instruction):
        a, b = instr.values
        self.mem.write(instr.target, alu.less_than(a, b))

    def _op_eq(self, instr: Instruction):
        a, b = instr.values
        self.mem.write(instr.target, alu.equals(a, b))

    def _op_arb(self, instr: Instruction):
        (value,) = instr.values
        self.mem.base = alu.add(self.mem.base, value)

    def _op_hlt(self, instr: Instruction):
        self.state = MachineState.HALTED
        log.debug("Halted at ptr=%d after %d steps", instr.address, self.steps + 1)
        return StopReason.HALT

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def _record_trace(self):
        line = disassemble_at(self.mem, self.mem.ptr)
        entry = f"{line.address:>6}: {line.text:<32} base={self.mem.base}"
        self._trace_output.append(entry)
        log.debug(entry)

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()
