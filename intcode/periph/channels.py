"""
Intcode VM — I/O Channels

The VM talks to the outside world through byte streams. Every value
crossing a channel is one record: a signed 64-bit integer packed as
8 little-endian bytes.

Any binary file-like object works as a channel:
  input   — needs read(n); IN blocks inside read() until a full record
            arrives or the stream ends (short read = InvalidRead)
  output  — needs write(b); a raised error or short write = InvalidWrite
  feed    — appending to an input while it is being consumed also needs
            seek()/tell() (InputQueue, BytesIO, regular files)

Channel types provided here:
  EmptyInput    — always at end of stream
  NullOutput    — swallows every record
  InputQueue    — growable, seekable buffer; feed() appends at the tail
                  without moving the read position
  OutputBuffer  — collects records; .values reads them back at any time
"""

import io
import struct
from typing import Iterable, List, Protocol

from ..config import WORD_FORMAT, WORD_SIZE
from ..errors import InvalidRead, InvalidWrite

_WORD = struct.Struct(WORD_FORMAT)


class InputChannel(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class OutputChannel(Protocol):
    def write(self, data: bytes) -> int: ...


# ──────────────────────────────────────────────
# Word codec
# ──────────────────────────────────────────────

def pack_word(value: int) -> bytes:
    """Encode one signed 64-bit value as 8 little-endian bytes."""
    return _WORD.pack(value)


def unpack_word(data: bytes) -> int:
    """Decode exactly 8 little-endian bytes into a signed 64-bit value."""
    return _WORD.unpack(data)[0]


def encode_words(values: Iterable[int]) -> bytes:
    return b''.join(_WORD.pack(v) for v in values)


def decode_words(data: bytes) -> List[int]:
    """Decode a whole number of records. Trailing partial records are an error."""
    if len(data) % WORD_SIZE:
        raise ValueError(
            f"{len(data)} bytes is not a whole number of {WORD_SIZE}-byte records")
    return [v for (v,) in _WORD.iter_unpack(data)]


# ──────────────────────────────────────────────
# Record transfer used by the engine
# ──────────────────────────────────────────────

def read_word(stream) -> int:
    """Read one record, blocking inside stream.read() until it is complete."""
    buf = bytearray()
    while len(buf) < WORD_SIZE:
        try:
            chunk = stream.read(WORD_SIZE - len(buf))
            if not chunk:
                break
            buf += chunk
        except (OSError, ValueError, TypeError) as e:
            raise InvalidRead(f"Invalid read: {e}") from e
    if len(buf) != WORD_SIZE:
        raise InvalidRead(f"Invalid read: got {len(buf)} of {WORD_SIZE} bytes")
    return unpack_word(bytes(buf))


def write_word(stream, value: int):
    """Write one record; the sink must accept all 8 bytes."""
    data = pack_word(value)
    try:
        written = stream.write(data)
    except (OSError, ValueError, TypeError) as e:
        raise InvalidWrite(f"Invalid write: {e}") from e
    # None from a non-blocking raw stream means nothing was taken
    if written is None or written != len(data):
        raise InvalidWrite(f"Invalid write: sink took {written} of {len(data)} bytes")


def append_words(stream, values: Iterable[int]):
    """Append records at the tail of a seekable stream, keeping its read position."""
    if not stream.seekable():
        raise io.UnsupportedOperation("input channel does not support appending")
    pos = stream.tell()
    stream.seek(0, io.SEEK_END)
    stream.write(encode_words(values))
    stream.seek(pos)


# ──────────────────────────────────────────────
# Channel types
# ──────────────────────────────────────────────

class EmptyInput(io.RawIOBase):
    """Input that is always exhausted."""

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        return 0


class NullOutput(io.RawIOBase):
    """Output sink that accepts and discards everything."""

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        return len(b)


class InputQueue(io.BytesIO):
    """Pre-filled, growable input queue of records."""

    def __init__(self, values: Iterable[int] = ()):
        super().__init__(encode_words(values))

    def feed(self, values: Iterable[int]):
        """Append records for the VM to read after the ones already queued."""
        append_words(self, values)

    @property
    def pending(self) -> int:
        """Number of whole records not yet consumed."""
        return (len(self.getvalue()) - self.tell()) // WORD_SIZE


class OutputBuffer(io.BytesIO):
    """Append-only record sink."""

    @property
    def values(self) -> List[int]:
        return decode_words(self.getvalue())
