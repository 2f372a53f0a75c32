import pytest

from spongetcp.buffer import Buffer
from spongetcp.byte_stream import ByteStream
from spongetcp.tcp_header import TCPHeader
from spongetcp.tcp_receiver import TCPReceiver
from spongetcp.tcp_segment import TCPSegment
from spongetcp.tcp_state import (
    TCPReceiverStateSummary,
    TCPSenderStateSummary,
    receiver_state_summary,
    sender_state_summary,
)
from spongetcp.wrapping_integers import WrappingInt32


class _Sender:
    def __init__(self, next_seqno, in_flight, written=b"", ended=False, error=False):
        self._stream = ByteStream(100)
        self._stream.write(written)
        self._stream.read(len(written))
        if ended:
            self._stream.end_input()
        if error:
            self._stream.set_error()
        self._next_seqno = next_seqno
        self._in_flight = in_flight

    def stream_in(self):
        return self._stream

    def next_seqno_absolute(self):
        return self._next_seqno

    def bytes_in_flight(self):
        return self._in_flight


def _segment(seqno, data=b"", *, syn=False, fin=False):
    return TCPSegment(TCPHeader(seqno=WrappingInt32(seqno), syn=syn, fin=fin), Buffer(data))


def test_receiver_listen_text():
    r = TCPReceiver(100)
    assert receiver_state_summary(r) == "waiting for SYN: ackno is empty"


def test_receiver_lifecycle():
    r = TCPReceiver(100)
    assert receiver_state_summary(r) is TCPReceiverStateSummary.LISTEN
    r.segment_received(_segment(42, syn=True))
    assert receiver_state_summary(r) is TCPReceiverStateSummary.SYN_RECV
    r.segment_received(_segment(43, b"hi", fin=True))
    assert receiver_state_summary(r) is TCPReceiverStateSummary.FIN_RECV


def test_receiver_error_wins():
    r = TCPReceiver(100)
    r.segment_received(_segment(42, syn=True))
    r.stream_out().set_error()
    assert receiver_state_summary(r) is TCPReceiverStateSummary.ERROR
    assert receiver_state_summary(r) == "error (connection was reset)"


@pytest.mark.parametrize(
    "sender, expected",
    [
        (_Sender(0, 0), TCPSenderStateSummary.CLOSED),
        (_Sender(1, 1), TCPSenderStateSummary.SYN_SENT),
        (_Sender(1, 0), TCPSenderStateSummary.SYN_ACKED),
        (_Sender(4, 0, b"abc", ended=True), TCPSenderStateSummary.SYN_ACKED),
        (_Sender(5, 1, b"abc", ended=True), TCPSenderStateSummary.FIN_SENT),
        (_Sender(5, 0, b"abc", ended=True), TCPSenderStateSummary.FIN_ACKED),
        (_Sender(5, 0, b"abc", ended=True, error=True), TCPSenderStateSummary.ERROR),
    ],
)
def test_sender_states(sender, expected):
    assert sender_state_summary(sender) is expected


def test_sender_state_texts():
    assert sender_state_summary(_Sender(0, 0)) == "waiting for stream to begin (no SYN sent)"
    assert sender_state_summary(_Sender(1, 0)) == "stream ongoing"