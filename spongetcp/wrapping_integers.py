"""32-bit wrapping sequence numbers and conversion to absolute 64-bit numbers."""

from __future__ import annotations

from dataclasses import dataclass

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1
_HALF32 = 1 << 31


@dataclass(frozen=True)
class WrappingInt32:
    """A 32-bit integer expressed relative to an arbitrary initial sequence number."""

    raw_value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value & _MASK32)

    def __add__(self, other: int) -> WrappingInt32:
        if isinstance(other, WrappingInt32) or not isinstance(other, int):
            return NotImplemented
        return WrappingInt32(self.raw_value + other)

    def __sub__(self, other):
        """Signed offset to another WrappingInt32, or a step back by an int."""
        if isinstance(other, WrappingInt32):
            diff = (self.raw_value - other.raw_value) & _MASK32
            return diff - (1 << 32) if diff >= _HALF32 else diff
        if isinstance(other, int):
            return WrappingInt32(self.raw_value - other)
        return NotImplemented

    def __lt__(self, other: WrappingInt32) -> bool:
        if not isinstance(other, WrappingInt32):
            return NotImplemented
        return self.raw_value < other.raw_value

    def __str__(self) -> str:
        return str(self.raw_value)


def wrap(n: int, isn: WrappingInt32) -> WrappingInt32:
    """Turn an absolute sequence number into a relative 32-bit one."""
    return isn + (n & _MASK64)


def unwrap(n: WrappingInt32, isn: WrappingInt32, checkpoint: int) -> int:
    """Return the absolute sequence number that wraps to ``n`` closest to ``checkpoint``."""
    offset = (n.raw_value - isn.raw_value) & _MASK32
    if checkpoint < offset:
        return offset
    k = (checkpoint - offset) >> 32
    lower = offset + (k << 32)
    upper = offset + ((k + 1) << 32)
    if checkpoint - lower < upper - checkpoint:
        return lower
    return upper & _MASK64