import random

import pytest

from spongetcp.buffer import Buffer
from spongetcp.tcp_header import TCPHeader
from spongetcp.tcp_receiver import TCPReceiver
from spongetcp.tcp_segment import TCPSegment
from spongetcp.wrapping_integers import WrappingInt32

ISNS = [0, 5, 238, 384678, 893472, 2**32 - 1, 2**32 - 3, 0x9ABCDEF0]


def _segment(seqno, data=b"", *, syn=False, fin=False):
    header = TCPHeader(seqno=WrappingInt32(seqno), syn=syn, fin=fin)
    return TCPSegment(header, Buffer(data))


def _read_all(receiver):
    stream = receiver.stream_out()
    return stream.read(stream.buffer_size())


def _check(receiver, *, ackno=None, data=None, unassembled=None, assembled=None):
    if ackno is not None:
        assert receiver.ackno() == WrappingInt32(ackno)
    if data is not None:
        assert _read_all(receiver) == data
    if unassembled is not None:
        assert receiver.unassembled_bytes() == unassembled
    if assembled is not None:
        assert receiver.stream_out().bytes_written() == assembled


def _synced(isn, capacity=2358):
    receiver = TCPReceiver(capacity)
    receiver.segment_received(_segment(isn, syn=True))
    return receiver


# Reordering


@pytest.mark.parametrize("isn", ISNS)
def test_later_segment_in_window(isn):
    r = _synced(isn)
    _check(r, ackno=isn + 1)
    r.segment_received(_segment(isn + 10, b"abcd"))
    _check(r, ackno=isn + 1, data=b"", unassembled=4, assembled=0)


@pytest.mark.parametrize("isn", ISNS)
def test_later_segment_then_hole_filled(isn):
    r = _synced(isn)
    _check(r, ackno=isn + 1)
    r.segment_received(_segment(isn + 5, b"efgh"))
    _check(r, ackno=isn + 1, data=b"", unassembled=4, assembled=0)
    r.segment_received(_segment(isn + 1, b"abcd"))
    _check(r, ackno=isn + 9, data=b"abcdefgh", unassembled=0, assembled=8)


@pytest.mark.parametrize("isn", ISNS)
def test_hole_filled_bit_by_bit(isn):
    r = _synced(isn)
    _check(r, ackno=isn + 1)
    r.segment_received(_segment(isn + 5, b"efgh"))
    _check(r, ackno=isn + 1, data=b"", unassembled=4, assembled=0)
    r.segment_received(_segment(isn + 1, b"ab"))
    _check(r, ackno=isn + 3, data=b"ab", unassembled=4, assembled=2)
    r.segment_received(_segment(isn + 3, b"cd"))
    _check(r, ackno=isn + 9, data=b"cdefgh", unassembled=0, assembled=8)


@pytest.mark.parametrize("isn", ISNS)
def test_many_gaps_filled_bit_by_bit(isn):
    r = _synced(isn)
    _check(r, ackno=isn + 1)
    r.segment_received(_segment(isn + 5, b"e"))
    _check(r, ackno=isn + 1, data=b"", unassembled=1, assembled=0)
    r.segment_received(_segment(isn + 7, b"g"))
    _check(r, ackno=isn + 1, data=b"", unassembled=2, assembled=0)
    r.segment_received(_segment(isn + 3, b"c"))
    _check(r, ackno=isn + 1, data=b"", unassembled=3, assembled=0)
    r.segment_received(_segment(isn + 1, b"ab"))
    _check(r, ackno=isn + 4, data=b"abc", unassembled=2, assembled=3)
    r.segment_received(_segment(isn + 6, b"f"))
    _check(r, unassembled=3, assembled=3, data=b"")
    r.segment_received(_segment(isn + 4, b"d"))
    _check(r, unassembled=0, assembled=7, data=b"defg")


@pytest.mark.parametrize("isn", ISNS)
def test_many_gaps_then_subsumed(isn):
    r = _synced(isn)
    _check(r, ackno=isn + 1)
    r.segment_received(_segment(isn + 5, b"e"))
    _check(r, ackno=isn + 1, data=b"", unassembled=1, assembled=0)
    r.segment_received(_segment(isn + 7, b"g"))
    _check(r, ackno=isn + 1, data=b"", unassembled=2, assembled=0)
    r.segment_received(_segment(isn + 3, b"c"))
    _check(r, ackno=isn + 1, data=b"", unassembled=3, assembled=0)
    r.segment_received(_segment(isn + 1, b"abcdefgh"))
    _check(r, ackno=isn + 9, data=b"abcdefgh", unassembled=0, assembled=8)


# In-order transmission


def test_transmit_from_zero_isn():
    r = TCPReceiver(4000)
    r.segment_received(_segment(0, syn=True))
    r.segment_received(_segment(1, b"abcd"))
    _check(r, ackno=5, data=b"abcd", unassembled=0, assembled=4)


def test_transmit_two_segments_read_each():
    isn = 384678
    r = TCPReceiver(4000)
    r.segment_received(_segment(isn, syn=True))
    r.segment_received(_segment(isn + 1, b"abcd"))
    _check(r, ackno=isn + 5, unassembled=0, assembled=4, data=b"abcd")
    r.segment_received(_segment(isn + 5, b"efgh"))
    _check(r, ackno=isn + 9, unassembled=0, assembled=8, data=b"efgh")


def test_transmit_two_segments_read_once():
    isn = 5
    r = TCPReceiver(4000)
    r.segment_received(_segment(isn, syn=True))
    r.segment_received(_segment(isn + 1, b"abcd"))
    _check(r, ackno=isn + 5, unassembled=0, assembled=4)
    r.segment_received(_segment(isn + 5, b"efgh"))
    _check(r, ackno=isn + 9, unassembled=0, assembled=8, data=b"abcdefgh")


def _block(i, size):
    return bytes(ord("a") + (i + j) % 26 for j in range(size))


def test_many_arrive_and_read():
    rng = random.Random(7)
    isn = 893472
    r = TCPReceiver(4000)
    r.segment_received(_segment(isn, syn=True))
    bytes_sent = 0
    for i in range(10000):
        data = _block(i, rng.randint(1, 10))
        _check(r, ackno=isn + bytes_sent + 1, assembled=bytes_sent)
        r.segment_received(_segment(isn + bytes_sent + 1, data))
        bytes_sent += len(data)
        _check(r, data=data)


def test_many_arrive_one_read():
    rng = random.Random(11)
    isn = 238
    r = TCPReceiver(10 * 100)
    r.segment_received(_segment(isn, syn=True))
    bytes_sent = 0
    all_data = bytearray()
    for i in range(100):
        data = _block(i, rng.randint(1, 10))
        all_data += data
        _check(r, ackno=isn + bytes_sent + 1, assembled=bytes_sent)
        r.segment_received(_segment(isn + bytes_sent + 1, data))
        bytes_sent += len(data)
    _check(r, data=bytes(all_data))


# Other behaviour


def test_no_ackno_before_syn():
    r = TCPReceiver(100)
    assert r.ackno() is None
    r.segment_received(_segment(17, b"abc"))
    assert r.ackno() is None
    assert r.stream_out().bytes_written() == 0


def test_syn_with_different_isn_ignored():
    r = _synced(100)
    r.segment_received(_segment(500, b"xyz", syn=True))
    assert r.ackno() == WrappingInt32(101)
    assert r.stream_out().bytes_written() == 0


def test_syn_with_data_and_fin():
    isn = 2**32 - 2
    r = TCPReceiver(100)
    r.segment_received(_segment(isn, b"abc", syn=True, fin=True))
    assert _read_all(r) == b"abc"
    assert r.stream_out().input_ended()
    assert r.ackno() == WrappingInt32(isn) + len(b"abc") + 2


def test_fin_advances_ackno():
    isn = 1000
    r = _synced(isn)
    r.segment_received(_segment(isn + 1, b"ab", fin=True))
    assert r.stream_out().input_ended()
    assert r.ackno() == WrappingInt32(isn + 4)


def test_window_size_tracks_unread_bytes():
    r = _synced(0, capacity=4000)
    assert r.window_size() == 4000
    r.segment_received(_segment(1, b"abcd"))
    assert r.window_size() == 4000 - len(b"abcd")
    _read_all(r)
    assert r.window_size() == 4000