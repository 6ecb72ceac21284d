"""
Intcode VM — ALU Operations

Memory cells are signed 64-bit words. Python integers are unbounded, so
every arithmetic result is folded back into the word range with
two's-complement wrap-around before it is written to memory.

Comparisons return the integer 1/0 the instruction set stores, not bool.
"""

from ..config import WORD_BITS

_MASK = (1 << WORD_BITS) - 1
_SIGN = 1 << (WORD_BITS - 1)


def wrap(value: int) -> int:
    """Fold an arbitrary integer into the signed 64-bit range."""
    value &= _MASK
    if value & _SIGN:
        return value - (1 << WORD_BITS)
    return value


def add(a: int, b: int) -> int:
    return wrap(a + b)


def mul(a: int, b: int) -> int:
    return wrap(a * b)


def less_than(a: int, b: int) -> int:
    return 1 if a < b else 0


def equals(a: int, b: int) -> int:
    return 1 if a == b else 0


def trunc_mod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend (C-style, not Python floor).

    The opcode of a negative cell keeps its sign: -1 decodes to op -1,
    not to 99.
    """
    r = abs(a) % b
    return -r if a < 0 else r


def trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // b
    return -q if a < 0 else q
