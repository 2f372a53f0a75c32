"""Assorted helpers: error types, timing, randomness, Internet checksum, hexdump."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import Optional, Union

from spongetcp.buffer import Buffer

_MASK32 = (1 << 32) - 1
_PROGRAM_START_NS = time.monotonic_ns()


class TaggedError(OSError):
    """An OSError that also records what was being attempted."""

    def __init__(self, attempt: str, error_code: int, message: Optional[str] = None) -> None:
        if message is None:
            message = os.strerror(error_code)
        super().__init__(error_code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A TaggedError for a failed system call."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error)


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started."""
    return (time.monotonic_ns() - _PROGRAM_START_NS) // 1_000_000


def get_random_generator() -> random.Random:
    """A Mersenne Twister generator seeded with plenty of OS entropy."""
    seed = int.from_bytes(os.urandom(624 * 4), "big")
    return random.Random(seed)


class InternetChecksum:
    """The Internet checksum (ones' complement sum of 16-bit words)."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & _MASK32
        self._parity = False

    def add(self, data: Union[bytes, bytearray, memoryview, Buffer]) -> None:
        """Feed more bytes into the sum; odd lengths carry over between calls."""
        view = data.str() if isinstance(data, Buffer) else bytes(data)
        if not view:
            return
        if self._parity:
            self._sum = (self._sum + view[0]) & _MASK32
            view = view[1:]
            self._parity = False
        total = (sum(view[0::2]) << 8) + sum(view[1::2])
        self._sum = (self._sum + total) & _MASK32
        self._parity = len(view) % 2 == 1

    def value(self) -> int:
        """The checksum of everything added so far, in host byte order."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def _printable(row: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in row)


def hexdump(data: Union[bytes, bytearray, memoryview, str], indent: int = 0) -> None:
    """Print a hex and character dump of ``data`` to standard output."""
    if isinstance(data, str):
        data = data.encode("latin-1")
    raw = bytes(data)
    pad = " " * indent
    rows = [raw[start:start + 16] for start in range(0, len(raw), 16)]

    parts = []
    for number, row in enumerate(rows):
        if number:
            parts.append("    " + _printable(rows[number - 1]) + "\n")
        words = " ".join(row[pos:pos + 2].hex() for pos in range(0, len(row), 2))
        parts.append(f"{pad}{number * 16:08x}:    {words}")

    remainder = (16 - (len(raw) & 0xF)) % 16
    last_chars = _printable(rows[-1]) if rows else " "
    parts.append(" " * (2 * remainder + remainder // 2 + 4) + last_chars)
    parts.append("\n\n")

    sys.stdout.write("".join(parts))
    sys.stdout.flush()