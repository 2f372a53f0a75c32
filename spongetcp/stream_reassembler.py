"""Reassembly of possibly out-of-order, overlapping substrings into a byte stream."""

from __future__ import annotations

from bisect import bisect_left
from typing import Union

from spongetcp.byte_stream import ByteStream

BytesLike = Union[bytes, bytearray, memoryview]


def _merge(
    data: bytes, index: int, other_index: int, other_data: bytes
) -> tuple[bytes, int, int]:
    """Join two overlapping or touching pieces.

    Returns the joined data, its start index and the length of ``other_data``.
    Disjoint pieces come back unchanged with a length of 0.
    """
    end = index + len(data)
    other_end = other_index + len(other_data)
    if index > other_end or other_index > end:
        return data, index, 0
    removed = len(other_data)
    if index <= other_index:
        if other_end > end:
            data = data + other_data[end - other_index:]
        return data, index, removed
    if end > other_end:
        other_data = other_data + data[other_end - index:]
    return other_data, other_index, removed


class StreamReassembler:
    """Assembles excerpts of a byte stream into an in-order ByteStream.

    The capacity limits both the reassembled bytes waiting in the output
    stream and the window in which new bytes are accepted.
    """

    def __init__(self, capacity: int) -> None:
        self._output = ByteStream(capacity)
        self._capacity = capacity
        self._unassembled_count = 0
        self._first_unassembled = 0
        self._pending: list[tuple[int, bytes]] = []
        self._eof = False

    def _absorb_following(self, piece: bytes, start: int) -> tuple[bytes, int]:
        pos = bisect_left(self._pending, (start,))
        while pos < len(self._pending):
            other_index, other_data = self._pending[pos]
            piece, start, removed = _merge(piece, start, other_index, other_data)
            if not removed:
                break
            del self._pending[pos]
            self._unassembled_count -= removed
        return piece, start

    def _absorb_preceding(self, piece: bytes, start: int) -> tuple[bytes, int]:
        pos = bisect_left(self._pending, (start,))
        while pos > 0:
            if pos == len(self._pending):
                pos -= 1
            other_index, other_data = self._pending[pos]
            piece, start, removed = _merge(piece, start, other_index, other_data)
            if not removed:
                break
            self._unassembled_count -= removed
            del self._pending[pos]
            if pos == 0:
                break
            pos -= 1
        return piece, start

    def push_substring(self, data: BytesLike, index: int, eof: bool = False) -> None:
        """Accept a substring starting at stream position ``index``.

        Newly contiguous bytes are written to the output stream; bytes beyond
        the capacity are discarded. ``eof`` marks ``data`` as ending the stream.
        """
        data = bytes(data)
        self._eof = self._eof or eof

        if not data or index + len(data) <= self._first_unassembled:
            if self._eof:
                self._output.end_input()
            return

        first_unacceptable = self._first_unassembled + self.window_size()

        piece, start = data, index
        if start < self._first_unassembled:
            piece = piece[self._first_unassembled - start:]
            start = self._first_unassembled
        if start <= first_unacceptable < start + len(piece):
            piece = piece[: first_unacceptable - start]

        if index + len(data) > first_unacceptable:
            self._eof = False

        piece, start = self._absorb_following(piece, start)
        piece, start = self._absorb_preceding(piece, start)

        if start <= self._first_unassembled:
            written = self._output.write(piece[self._first_unassembled - start:])
            self._first_unassembled += written
            if written == len(piece) and eof:
                self._output.end_input()
        else:
            pos = bisect_left(self._pending, (start,))
            if pos == len(self._pending) or self._pending[pos][0] != start:
                self._pending.insert(pos, (start, piece))
            self._unassembled_count += len(piece)

        if self.empty() and self._eof:
            self._output.end_input()

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def unassembled_bytes(self) -> int:
        """Bytes stored but not yet written to the output stream."""
        return self._unassembled_count

    def empty(self) -> bool:
        """True when no substrings are waiting to be assembled."""
        return self._unassembled_count == 0

    def end_input(self) -> bool:
        """True once the output stream's input has ended."""
        return self._output.input_ended()

    def first_unassembled(self) -> int:
        """Stream index of the first byte not yet assembled."""
        return self._first_unassembled

    def window_size(self) -> int:
        """How many more bytes the output stream has room for."""
        return self._capacity - self._output.buffer_size()