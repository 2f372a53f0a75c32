"""A TCP segment: header plus payload."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Union

from spongetcp.buffer import Buffer, BufferList
from spongetcp.parser import NetParser, ParseError, ParseResult
from spongetcp.tcp_header import TCPHeader
from spongetcp.util import InternetChecksum

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(eq=False)
class TCPSegment:
    """A TCP header and its payload."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: Buffer = field(default_factory=Buffer)

    def __post_init__(self) -> None:
        if not isinstance(self.payload, Buffer):
            self.payload = Buffer(self.payload)

    def parse(
        self, buffer: Union[Buffer, BytesLike], datagram_layer_checksum: int = 0
    ) -> None:
        """Parse a segment from wire bytes; raise ParseError on failure.

        ``datagram_layer_checksum`` is the pseudo-header sum from the layer below.
        """
        check = InternetChecksum(datagram_layer_checksum)
        check.add(buffer)
        if check.value():
            raise ParseError(ParseResult.BadChecksum)

        parser = NetParser(buffer)
        try:
            self.header.parse(parser)
        except ParseError:
            # Only a packet that runs out of bytes is rejected here; a short
            # data offset alone is tolerated.
            if parser.error():
                raise ParseError(parser.get_error()) from None
        self.payload = parser.buffer()

    def serialize(self, datagram_layer_checksum: int = 0) -> BufferList:
        """The segment in wire format, with a freshly computed checksum."""
        header_out = dataclasses.replace(self.header, cksum=0)
        check = InternetChecksum(datagram_layer_checksum)
        check.add(header_out.serialize())
        check.add(self.payload)
        header_out.cksum = check.value()

        wire = BufferList(header_out.serialize())
        wire.append(self.payload)
        return wire

    def length_in_sequence_space(self) -> int:
        """Payload length plus one for SYN and one for FIN."""
        return self.payload.size() + int(self.header.syn) + int(self.header.fin)