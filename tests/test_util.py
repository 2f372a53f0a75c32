import errno
import os

from hypothesis import given, strategies as st

from spongetcp.buffer import Buffer
from spongetcp.util import (
    InternetChecksum,
    TaggedError,
    UnixError,
    get_random_generator,
    hexdump,
    timestamp_ms,
)


def _checksum(data, initial=0):
    check = InternetChecksum(initial)
    check.add(data)
    return check.value()


def test_checksum_of_nothing_is_all_ones():
    assert InternetChecksum().value() == 0xFFFF


def test_checksum_worked_example():
    assert _checksum(bytes([0x00, 0x01, 0xF2, 0x03, 0xF4, 0xF5, 0xF6, 0xF7])) == 0x220D


@given(st.binary(min_size=0, max_size=200))
def test_inserting_checksum_verifies_to_zero(payload):
    data = bytearray(payload)
    if len(data) % 2:
        data.append(0)
    data += b"\x00\x00"
    cksum = _checksum(data)
    data[-2] = cksum >> 8
    data[-1] = cksum & 0xFF
    assert _checksum(data) == 0


@given(st.binary(max_size=100), st.binary(max_size=100))
def test_split_adds_match_single_add(first, second):
    check = InternetChecksum()
    check.add(first)
    check.add(second)
    assert check.value() == _checksum(first + second)


@given(st.binary(max_size=100))
def test_odd_length_is_padded_with_zero(data):
    if len(data) % 2:
        assert _checksum(data) == _checksum(data + b"\x00")
    else:
        assert _checksum(data) == _checksum(data + b"\x00\x00")


def test_checksum_accepts_buffer():
    buf = Buffer(b"xxhello")
    buf.remove_prefix(2)
    assert _checksum(buf) == _checksum(b"hello")


def test_initial_sum_is_included():
    data = b"\x12\x34\x56\x78"
    assert _checksum(data, 0x1234) == _checksum(b"\x12\x34" + data)


def test_unix_error_message_and_errno():
    err = UnixError("read", errno.ENOENT)
    assert err.errno == errno.ENOENT
    assert err.attempt == "read"
    assert str(err) == "read: " + os.strerror(errno.ENOENT)
    assert isinstance(err, OSError)


def test_tagged_error_custom_message():
    err = TaggedError("getaddrinfo(host, 80)", 2, "lookup failed")
    assert str(err) == "getaddrinfo(host, 80): lookup failed"
    assert err.errno == 2


def test_timestamp_is_monotonic():
    first = timestamp_ms()
    second = timestamp_ms()
    assert 0 <= first <= second


def test_random_generators_are_independent():
    a = get_random_generator()
    b = get_random_generator()
    seq_a = [a.getrandbits(32) for _ in range(8)]
    seq_b = [b.getrandbits(32) for _ in range(8)]
    assert seq_a != seq_b
    assert all(0 <= v < 2**32 for v in seq_a + seq_b)


def test_hexdump_short(capsys):
    hexdump(b"AB")
    out = capsys.readouterr().out
    assert out == "00000000:    4142" + " " * 39 + "AB\n\n"


def test_hexdump_rows_and_indent(capsys):
    data = bytes(range(0x41, 0x41 + 17))
    hexdump(data, 2)
    out = capsys.readouterr().out
    lines = out.split("\n")
    assert lines[0].startswith("  00000000:    ")
    assert lines[0].endswith("    " + data[:16].decode())
    assert lines[1].startswith("  00000010:    ")
    assert lines[1].endswith(chr(data[16]))
    assert out.endswith("\n\n")


def test_hexdump_nonprintable_shown_as_dot(capsys):
    hexdump(b"\x00a\xff")
    out = capsys.readouterr().out
    assert out.rstrip("\n").endswith(".a.")