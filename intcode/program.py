"""
Intcode Program — parsed, immutable program text.

Text format: comma-separated decimal integers, optionally signed, e.g.

    1,9,10,3,2,3,11,0,99,30,40,50

Whitespace around the whole text (a trailing newline from a file) is
ignored; whitespace inside a token is not. Every token must fit in a
signed 64-bit word.

A Program is never executed in place. start() clones the code into a
fresh emulator each time, so one parsed Program can drive any number of
independent runs (amplifier chains, noun/verb searches).
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

from .config import WORD_MAX, WORD_MIN
from .emu import IntcodeEmulator
from .errors import ProgramParseError

_TOKEN = re.compile(r'[+-]?[0-9]+')


@dataclass(frozen=True)
class Program:
    code: Tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> 'Program':
        """Parse comma-separated program text."""
        code = []
        for index, token in enumerate(text.strip().split(',')):
            if not _TOKEN.fullmatch(token):
                raise ProgramParseError(token=token, index=index)
            value = int(token)
            if not WORD_MIN <= value <= WORD_MAX:
                raise ProgramParseError(token=token, index=index)
            code.append(value)
        return cls(tuple(code))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'Program':
        return cls.parse(Path(path).read_text(encoding='utf-8'))

    @classmethod
    def from_values(cls, values: Iterable[int]) -> 'Program':
        return cls(tuple(int(v) for v in values))

    def start(self) -> IntcodeEmulator:
        """Fresh execution with empty input and a discarding output."""
        return IntcodeEmulator(self.code)

    def __len__(self) -> int:
        return len(self.code)

    def __iter__(self) -> Iterator[int]:
        return iter(self.code)

    def __getitem__(self, index):
        return self.code[index]

    def __str__(self) -> str:
        return ','.join(str(v) for v in self.code)
