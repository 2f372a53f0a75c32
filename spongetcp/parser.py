"""Network-byte-order parsing and unparsing of integers."""

from __future__ import annotations

from enum import Enum
from typing import Union

from spongetcp.buffer import Buffer


class ParseResult(Enum):
    """Outcome of parsing a datagram, segment, frame or message."""

    NoError = 0
    BadChecksum = 1
    PacketTooShort = 2
    WrongIPVersion = 3
    HeaderTooShort = 4
    TruncatedPacket = 5
    Unsupported = 6


def as_string(result: ParseResult) -> str:
    """The name of a ParseResult."""
    return result.name


class ParseError(Exception):
    """Raised when parsing fails; ``result`` says why."""

    def __init__(self, result: ParseResult) -> None:
        super().__init__(as_string(result))
        self.result = result


class NetParser:
    """Reads big-endian integers from the front of a buffer, tracking errors."""

    def __init__(self, buffer: Union[Buffer, bytes, bytearray, memoryview]) -> None:
        data = buffer.str() if isinstance(buffer, Buffer) else buffer
        self._buffer = Buffer(data)
        self._error = ParseResult.NoError

    def buffer(self) -> Buffer:
        """The unparsed remainder."""
        return Buffer(self._buffer.str())

    def get_error(self) -> ParseResult:
        return self._error

    def set_error(self, result: ParseResult) -> None:
        self._error = result

    def error(self) -> bool:
        return self._error is not ParseResult.NoError

    def _check_size(self, size: int) -> None:
        if size > self._buffer.size():
            self.set_error(ParseResult.PacketTooShort)

    def _parse_int(self, length: int) -> int:
        self._check_size(length)
        if self.error():
            return 0
        value = int.from_bytes(bytes(self._buffer.at(i) for i in range(length)), "big")
        self._buffer.remove_prefix(length)
        return value

    def u32(self) -> int:
        return self._parse_int(4)

    def u16(self) -> int:
        return self._parse_int(2)

    def u8(self) -> int:
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, or record an error if there are not enough."""
        self._check_size(n)
        if self.error():
            return
        self._buffer.remove_prefix(n)


class NetUnparser:
    """Encodes integers in network byte order."""

    @staticmethod
    def u32(val: int) -> bytes:
        return (val & 0xFFFFFFFF).to_bytes(4, "big")

    @staticmethod
    def u16(val: int) -> bytes:
        return (val & 0xFFFF).to_bytes(2, "big")

    @staticmethod
    def u8(val: int) -> bytes:
        return (val & 0xFF).to_bytes(1, "big")