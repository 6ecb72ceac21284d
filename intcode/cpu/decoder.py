"""
Intcode VM — Opcode Decoder

An instruction cell packs the op-code and the addressing mode of every
parameter as decimal digits:

    ABCDE
     1002
    DE — two-digit op-code       (cell mod 100)
     C — mode of parameter 1     (cell / 100 mod 10)
     B — mode of parameter 2     (cell / 1000 mod 10)
     A — mode of parameter 3     (cell / 10000 mod 10)

Addressing modes:
  POSITION   0  operand is an address, dereference once
  IMMEDIATE  1  operand is the value itself (never a write target)
  RELATIVE   2  operand is an offset from the relative base

Decoding resolves everything the instruction needs up front: input
operands are dereferenced to values, output operands are reduced to the
destination address. The engine then only applies the operation.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .alu import trunc_div, trunc_mod
from ..errors import InvalidDestinationMode, InvalidOpcode, InvalidParameterMode


class ParamMode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


# Operand roles
IN = 'in'      # value operand, dereferenced per mode
OUT = 'out'    # destination address, Position/Relative only


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, operand roles, length in cells)

ADD = 'ADD'
MUL = 'MUL'
INP = 'IN'
OUTP = 'OUT'
JNZ = 'JNZ'
JZ = 'JZ'
LT = 'LT'
EQ = 'EQ'
ARB = 'ARB'
HLT = 'HLT'

OPCODES = {
    1:  (ADD,  (IN, IN, OUT), 4),
    2:  (MUL,  (IN, IN, OUT), 4),
    3:  (INP,  (OUT,),        2),
    4:  (OUTP, (IN,),         2),
    5:  (JNZ,  (IN, IN),      3),   # jump-if-true, second operand is the target
    6:  (JZ,   (IN, IN),      3),   # jump-if-false
    7:  (LT,   (IN, IN, OUT), 4),
    8:  (EQ,   (IN, IN, OUT), 4),
    9:  (ARB,  (IN,),         2),   # adjust relative base
    99: (HLT,  (),            1),
}


@dataclass(frozen=True)
class Instruction:
    """A fully resolved instruction.

    ``values`` holds the dereferenced input operands in order and
    ``target`` the destination address for writing instructions.
    """
    address: int
    opcode: int
    mnemonic: str
    values: Tuple[int, ...]
    target: Optional[int]
    length: int

    @property
    def jumps(self) -> bool:
        return self.mnemonic in (JNZ, JZ)


def split_cell(cell: int) -> Tuple[int, int]:
    """Split an instruction cell into (op-code, packed mode digits)."""
    return trunc_mod(cell, 100), trunc_div(cell, 100)


def param_mode(cell: int, param: int) -> int:
    """Raw mode digit of a 1-based parameter (may be outside 0-2)."""
    return trunc_mod(trunc_div(cell, 10 ** (param + 1)), 10)


def lookup(cell: int, address: Optional[int] = None):
    """Return (opcode, mnemonic, roles, length) for an instruction cell."""
    opcode, _ = split_cell(cell)
    if opcode not in OPCODES:
        raise InvalidOpcode(opcode, address)
    mnem, roles, length = OPCODES[opcode]
    return opcode, mnem, roles, length


def decode_at(memory, address: Optional[int] = None) -> Instruction:
    """Decode the instruction at address (default: memory.ptr).

    Pure with respect to memory: decoding the same unmodified cells twice
    yields equal Instructions.
    """
    if address is None:
        address = memory.ptr
    cell = memory.read(address)
    opcode, mnem, roles, length = lookup(cell, address)

    values = []
    target = None
    for param, role in enumerate(roles, start=1):
        raw = memory.read(address + param)
        digit = param_mode(cell, param)
        if digit not in (0, 1, 2):
            raise InvalidParameterMode(digit, param, address)
        mode = ParamMode(digit)

        if role == OUT:
            if mode == ParamMode.IMMEDIATE:
                raise InvalidDestinationMode(param, address)
            target = raw if mode == ParamMode.POSITION else memory.base + raw
        elif mode == ParamMode.IMMEDIATE:
            values.append(raw)
        elif mode == ParamMode.POSITION:
            values.append(memory.read(raw))
        else:
            values.append(memory.read(memory.base + raw))

    return Instruction(address, opcode, mnem, tuple(values), target, length)
