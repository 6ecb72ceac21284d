"""
Intcode Disassembler
====================

Renders instruction cells as text for execution traces and the CLI
``disasm`` command.

Operand notation:
    [12]      position mode      (cell 12)
    #-4       immediate mode     (the value -4)
    [rb+3]    relative mode      (cell base+3)

Cells that do not decode (unknown op-code, bad mode digit, immediate
destination) are shown as ``DATA n`` and the sweep moves on by one cell.
So is an instruction whose operands would run past the end of the image.
Code and data share memory, so a linear sweep will print some data as
instructions; that is expected.

Usage:
    from intcode.disasm import disassemble

    for line in disassemble([1101, 100, -1, 4, 0]):
        print(line.text)     # "ADD #100, #-1, [4]", then "DATA 0"
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from .cpu.decoder import OUT, ParamMode, lookup, param_mode
from .errors import InvalidOpcode
from .mem.memory import Memory


@dataclass(frozen=True)
class Line:
    """One disassembled instruction (or data cell)."""
    address: int
    cells: Tuple[int, ...]
    text: str

    def format(self) -> str:
        raw = ' '.join(str(c) for c in self.cells)
        return f"{self.address:>6}: {raw:<24} {self.text}"


def format_operand(raw: int, mode: ParamMode) -> str:
    if mode == ParamMode.IMMEDIATE:
        return f"#{raw}"
    if mode == ParamMode.RELATIVE:
        return f"[rb{raw:+d}]"
    return f"[{raw}]"


def disassemble_at(memory: Memory, address: int) -> Line:
    """Disassemble the single instruction starting at address."""
    cell = memory.read(address)
    data = Line(address, (cell,), f"DATA {cell}")
    try:
        _, mnem, roles, length = lookup(cell, address)
    except InvalidOpcode:
        return data

    operands = []
    for param, role in enumerate(roles, start=1):
        digit = param_mode(cell, param)
        if digit not in (0, 1, 2):
            return data
        mode = ParamMode(digit)
        if role == OUT and mode == ParamMode.IMMEDIATE:
            return data
        operands.append(format_operand(memory.read(address + param), mode))

    cells = tuple(memory.read(address + i) for i in range(length))
    text = mnem if not operands else f"{mnem} {', '.join(operands)}"
    return Line(address, cells, text)


def disassemble(code: Union[Memory, Iterable[int]]) -> List[Line]:
    """Linear-sweep disassembly of a program or memory image."""
    memory = code if isinstance(code, Memory) else Memory(code)
    lines = []
    addr = 0
    end = len(memory)
    while addr < end:
        line = disassemble_at(memory, addr)
        if addr + len(line.cells) > end:
            # operands would run past the image
            cell = memory.read(addr)
            line = Line(addr, (cell,), f"DATA {cell}")
        lines.append(line)
        addr += len(line.cells)
    return lines
