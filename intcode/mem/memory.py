"""
Intcode VM — Sparse Word Memory

The address space is conceptually infinite: any non-negative integer is
a valid address and any cell never written reads as 0. Physically it is
a dict, so a program can write far past its own end without cost.

Code and data share the same cells. A running program may overwrite
instructions it has not executed yet; the decoder reads from here on
every step, so nothing is cached.

Besides the cells, Memory owns the two registers of the machine:
  ptr   — instruction pointer (starts at 0)
  base  — relative base (starts at 0, changed only by ARB)

Operand resolution against ptr/base lives in cpu/decoder.py.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import WORD_MAX, WORD_MIN
from ..errors import InvalidAddress


class Memory:
    """Sparse signed 64-bit word memory with instruction pointer and base."""

    def __init__(self, code: Iterable[int] = ()):
        self._cells: Dict[int, int] = {}
        for addr, value in enumerate(code):
            self._cells[addr] = _check_word(value)
        self.ptr: int = 0
        self.base: int = 0

        # Watchpoints: addr -> [callback(addr, old_val, new_val)]
        self._watchpoints: Dict[int, List[Callable]] = {}

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read the word at addr. Never-written cells read as 0."""
        return self._cells.get(addr, 0)

    def write(self, addr: int, value: int):
        """Write a word. Negative addresses are rejected."""
        if addr < 0:
            raise InvalidAddress(addr)
        value = _check_word(value)
        old = self._cells.get(addr, 0)
        self._cells[addr] = value

        if addr in self._watchpoints:
            for cb in self._watchpoints[addr]:
                cb(addr, old, value)

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, value: int):
        self.write(addr, value)

    def __len__(self) -> int:
        """One past the highest address ever written."""
        return max(self._cells) + 1 if self._cells else 0

    def __contains__(self, addr: int) -> bool:
        return addr in self._cells

    # --- Bulk load ---

    def patch(self, patches: Iterable[Tuple[int, int]]):
        """Apply (address, value) overrides before execution starts."""
        for addr, value in patches:
            self.write(addr, value)

    # --- Watchpoints (observe self-modification) ---

    def add_watchpoint(self, addr: int, callback: Callable):
        """Call callback(addr, old_val, new_val) on every write to addr."""
        if addr not in self._watchpoints:
            self._watchpoints[addr] = []
        self._watchpoints[addr].append(callback)

    def remove_watchpoint(self, addr: int, callback: Optional[Callable] = None):
        """Remove a watchpoint. If callback is None, removes all on that addr."""
        if addr in self._watchpoints:
            if callback is None:
                del self._watchpoints[addr]
            else:
                self._watchpoints[addr] = [
                    cb for cb in self._watchpoints[addr] if cb != callback
                ]

    # --- Snapshots ---

    def snapshot(self) -> List[int]:
        """Dense copy of cells 0 .. len(self)-1, unwritten cells as 0."""
        return [self.read(addr) for addr in range(len(self))]

    def cells(self) -> Dict[int, int]:
        """Copy of every written cell."""
        return dict(self._cells)

    @staticmethod
    def diff_snapshots(snap_a: List[int], snap_b: List[int]) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changes."""
        changes = {}
        for addr in range(max(len(snap_a), len(snap_b))):
            old = snap_a[addr] if addr < len(snap_a) else 0
            new = snap_b[addr] if addr < len(snap_b) else 0
            if old != new:
                changes[addr] = (old, new)
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: Optional[int] = None, width: int = 8) -> str:
        """Produce a decimal dump of memory for debugging."""
        if length is None:
            length = max(len(self) - start, 0)
        lines = []
        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            words = ' '.join(f'{self.read(addr + i):>6}' for i in range(count))
            lines.append(f'{addr:>6}: {words}')
        return '\n'.join(lines)


def _check_word(value: int) -> int:
    value = int(value)
    if not WORD_MIN <= value <= WORD_MAX:
        raise OverflowError(f"Value {value} does not fit in a signed 64-bit word")
    return value
