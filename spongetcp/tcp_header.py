"""The TCP segment header (options are not supported)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from spongetcp.parser import NetParser, NetUnparser, ParseError, ParseResult
from spongetcp.wrapping_integers import WrappingInt32

_URG = 0b0010_0000
_ACK = 0b0001_0000
_PSH = 0b0000_1000
_RST = 0b0000_0100
_SYN = 0b0000_0010
_FIN = 0b0000_0001


@dataclass(eq=False)
class TCPHeader:
    """Fields of a TCP header."""

    LENGTH: ClassVar[int] = 20

    sport: int = 0
    dport: int = 0
    seqno: WrappingInt32 = field(default_factory=WrappingInt32)
    ackno: WrappingInt32 = field(default_factory=WrappingInt32)
    doff: int = 20 // 4
    urg: bool = False
    ack: bool = False
    psh: bool = False
    rst: bool = False
    syn: bool = False
    fin: bool = False
    win: int = 0
    cksum: int = 0
    uptr: int = 0

    def parse(self, parser: NetParser) -> None:
        """Read the header fields from ``parser``; raise ParseError on failure."""
        self.sport = parser.u16()
        self.dport = parser.u16()
        self.seqno = WrappingInt32(parser.u32())
        self.ackno = WrappingInt32(parser.u32())
        self.doff = parser.u8() >> 4

        flags = parser.u8()
        self.urg = bool(flags & _URG)
        self.ack = bool(flags & _ACK)
        self.psh = bool(flags & _PSH)
        self.rst = bool(flags & _RST)
        self.syn = bool(flags & _SYN)
        self.fin = bool(flags & _FIN)

        self.win = parser.u16()
        self.cksum = parser.u16()
        self.uptr = parser.u16()

        if self.doff < 5:
            raise ParseError(ParseResult.HeaderTooShort)

        parser.remove_prefix(self.doff * 4 - self.LENGTH)
        if parser.error():
            raise ParseError(parser.get_error())

    def _flags(self) -> int:
        return (
            (_URG if self.urg else 0)
            | (_ACK if self.ack else 0)
            | (_PSH if self.psh else 0)
            | (_RST if self.rst else 0)
            | (_SYN if self.syn else 0)
            | (_FIN if self.fin else 0)
        )

    def _flags_line(self) -> str:
        flags = (
            ("urg", self.urg),
            ("ack", self.ack),
            ("psh", self.psh),
            ("rst", self.rst),
            ("syn", self.syn),
            ("fin", self.fin),
        )
        parts = " ".join(
            f"{name}: {'true' if value else 'false'}" for name, value in flags
        )
        return f"Flags: {parts}\n"

    def serialize(self) -> bytes:
        """The header in wire format, padded to ``4 * doff`` (checksum as stored)."""
        if self.doff < 5:
            raise ValueError("TCP header too short")
        raw = b"".join(
            (
                NetUnparser.u16(self.sport),
                NetUnparser.u16(self.dport),
                NetUnparser.u32(self.seqno.raw_value),
                NetUnparser.u32(self.ackno.raw_value),
                NetUnparser.u8(self.doff << 4),
                NetUnparser.u8(self._flags()),
                NetUnparser.u16(self.win),
                NetUnparser.u16(self.cksum),
                NetUnparser.u16(self.uptr),
            )
        )
        return raw.ljust(4 * self.doff, b"\x00")

    def to_string(self) -> str:
        """A multi-line, human-readable dump of the header (numbers in hex)."""
        return (
            f"TCP source port: {self.sport:x}\n"
            f"TCP dest port: {self.dport:x}\n"
            f"TCP seqno: {self.seqno.raw_value:x}\n"
            f"TCP ackno: {self.ackno.raw_value:x}\n"
            f"TCP doff: {self.doff:x}\n"
            + self._flags_line()
            + f"TCP winsize: {self.win:x}\n"
            f"TCP cksum: {self.cksum:x}\n"
            f"TCP uptr: {self.uptr:x}\n"
        )

    def summary(self) -> str:
        """A one-line summary of flags, sequence numbers and window."""
        flags = (
            ("S" if self.syn else "")
            + ("A" if self.ack else "")
            + ("R" if self.rst else "")
            + ("F" if self.fin else "")
        )
        return (
            f"Header(flags={flags},seqno={self.seqno},"
            f"ack={self.ackno},win={self.win})"
        )

    def __eq__(self, other: object) -> bool:
        # Ports and checksum are deliberately left out of the comparison.
        if not isinstance(other, TCPHeader):
            return NotImplemented
        return (
            self.seqno == other.seqno
            and self.ackno == other.ackno
            and self.doff == other.doff
            and self.urg == other.urg
            and self.ack == other.ack
            and self.psh == other.psh
            and self.rst == other.rst
            and self.syn == other.syn
            and self.fin == other.fin
            and self.win == other.win
            and self.uptr == other.uptr
        )

    __hash__ = None  # type: ignore[assignment]