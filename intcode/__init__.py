"""
Intcode Virtual Machine
=======================
An interpreter for the Intcode instruction set: a self-modifying,
variable-length instruction stream over sparse signed 64-bit memory,
with blocking input and suspendable output.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────────┐
    │ Program  │───>│  Memory  │───>│ Decoder  │───>│   Emulator   │
    │ (text)   │    │ (sparse) │    │ (modes)  │    │ (step/run)   │
    └──────────┘    └──────────┘    └──────────┘    └──────┬───────┘
                                                           │
                                          ┌────────────────┴──────────┐
                                          │ I/O channels (8-byte LE)  │
                                          └───────────────────────────┘

    - program.py:          text parsing, fresh executions
    - mem/memory.py:       cells, ptr, relative base, watchpoints
    - cpu/decoder.py:      op-code table, addressing modes, Instruction
    - cpu/alu.py:          signed 64-bit arithmetic
    - emu.py:              state machine and driving modes
    - periph/channels.py:  record codec and channel types
    - amplifier.py:        series / feedback chains of VMs
    - patching.py:         noun/verb configuration search
    - disasm.py:           instruction listing and trace text
"""

__version__ = "0.1.0"

from .emu import IntcodeEmulator, MachineState, StopReason
from .errors import (
    DecodeError, IntcodeError, InvalidAddress, InvalidDestinationMode,
    InvalidOpcode, InvalidParameterMode, InvalidRead, InvalidWrite,
    NoOutputError, ProgramParseError, SearchError,
)
from .mem.memory import Memory
from .periph.channels import EmptyInput, InputQueue, NullOutput, OutputBuffer
from .program import Program


def run_source(source: str, inputs=()) -> list:
    """Parse program text, run it with the given inputs, return its outputs."""
    return Program.parse(source).start().read_values(inputs).write_to(OutputBuffer()).run()
