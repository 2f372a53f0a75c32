"""The receiving half of a TCP endpoint."""

from __future__ import annotations

from typing import Optional

from spongetcp.byte_stream import ByteStream
from spongetcp.stream_reassembler import StreamReassembler
from spongetcp.tcp_segment import TCPSegment
from spongetcp.wrapping_integers import WrappingInt32, unwrap, wrap


class TCPReceiver:
    """Reassembles incoming segments and computes the ackno and window to advertise."""

    def __init__(self, capacity: int) -> None:
        self._reassembler = StreamReassembler(capacity)
        self._isn: Optional[WrappingInt32] = None
        self._capacity = capacity

    def segment_received(self, seg: TCPSegment) -> None:
        """Handle an inbound segment."""
        header = seg.header
        if header.syn:
            if self._isn is not None and self._isn != header.seqno:
                return
            self._isn = header.seqno
            stream_index = 0
        else:
            if self._isn is None:
                return
            abs_seqno = unwrap(
                header.seqno, self._isn, self._reassembler.first_unassembled()
            )
            stream_index = abs_seqno - 1

        self._reassembler.push_substring(seg.payload.copy(), stream_index, header.fin)

    def ackno(self) -> Optional[WrappingInt32]:
        """The first sequence number not yet received, or None before the SYN."""
        if self._isn is None:
            return None
        fin = 1 if self._reassembler.end_input() else 0
        return wrap(self._reassembler.first_unassembled(), self._isn) + 1 + fin

    def window_size(self) -> int:
        """Room left in the receive buffer."""
        return self._reassembler.window_size()

    def unassembled_bytes(self) -> int:
        """Bytes stored but not yet reassembled."""
        return self._reassembler.unassembled_bytes()

    def stream_out(self) -> ByteStream:
        """The reassembled inbound byte stream."""
        return self._reassembler.stream_out()