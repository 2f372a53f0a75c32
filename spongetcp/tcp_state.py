"""Summaries of the sender's and receiver's state as the TCP specification names them."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

from spongetcp.byte_stream import ByteStream
from spongetcp.wrapping_integers import WrappingInt32


class TCPReceiverStateSummary(str, Enum):
    """Descriptions of the receiver's states."""

    ERROR = "error (connection was reset)"
    LISTEN = "waiting for SYN: ackno is empty"
    SYN_RECV = "SYN received (ackno exists), and input to stream hasn't ended"
    FIN_RECV = "input to stream has ended"


class TCPSenderStateSummary(str, Enum):
    """Descriptions of the sender's states."""

    ERROR = "error (connection was reset)"
    CLOSED = "waiting for stream to begin (no SYN sent)"
    SYN_SENT = "stream started but nothing acknowledged"
    SYN_ACKED = "stream ongoing"
    FIN_SENT = "stream finished (FIN sent) but not fully acknowledged"
    FIN_ACKED = "stream finished and fully acknowledged"


class _Receiver(Protocol):
    def stream_out(self) -> ByteStream: ...

    def ackno(self) -> Optional[WrappingInt32]: ...


class _Sender(Protocol):
    def stream_in(self) -> ByteStream: ...

    def next_seqno_absolute(self) -> int: ...

    def bytes_in_flight(self) -> int: ...


def receiver_state_summary(receiver: _Receiver) -> TCPReceiverStateSummary:
    """Name the state a receiver is in."""
    if receiver.stream_out().error():
        return TCPReceiverStateSummary.ERROR
    if receiver.ackno() is None:
        return TCPReceiverStateSummary.LISTEN
    if receiver.stream_out().input_ended():
        return TCPReceiverStateSummary.FIN_RECV
    return TCPReceiverStateSummary.SYN_RECV


def sender_state_summary(sender: _Sender) -> TCPSenderStateSummary:
    """Name the state a sender is in."""
    stream = sender.stream_in()
    next_seqno = sender.next_seqno_absolute()
    if stream.error():
        return TCPSenderStateSummary.ERROR
    if next_seqno == 0:
        return TCPSenderStateSummary.CLOSED
    if next_seqno == sender.bytes_in_flight():
        return TCPSenderStateSummary.SYN_SENT
    if not stream.eof():
        return TCPSenderStateSummary.SYN_ACKED
    if next_seqno < stream.bytes_written() + 2:
        return TCPSenderStateSummary.SYN_ACKED
    if sender.bytes_in_flight():
        return TCPSenderStateSummary.FIN_SENT
    return TCPSenderStateSummary.FIN_ACKED