"""Read-only byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A shared read-only byte string with a movable start offset."""

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _clone(self) -> Buffer:
        twin = Buffer()
        twin._storage = self._storage
        twin._offset = self._offset
        return twin

    def _view(self) -> memoryview:
        return memoryview(self._storage)[self._offset:]

    def str(self) -> bytes:
        """The remaining contents."""
        return self._storage[self._offset:]

    def at(self, n: int) -> int:
        """The byte at position ``n``."""
        if not 0 <= n < self.size():
            raise IndexError(f"Buffer.at: index {n} out of range")
        return self._storage[self._offset + n]

    def size(self) -> int:
        return len(self._storage) - self._offset

    def copy(self) -> bytes:
        return self.str()

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > self.size():
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __len__(self) -> int:
        return self.size()


def _as_buffer(item: Union[Buffer, BytesLike]) -> Buffer:
    return item._clone() if isinstance(item, Buffer) else Buffer(item)


class BufferList:
    """A discontiguous byte string made of several Buffers."""

    def __init__(self, data: Union[Buffer, BytesLike, None] = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is not None:
            self._buffers.append(_as_buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        return tuple(buf._clone() for buf in self._buffers)

    def append(self, other: Union[BufferList, Buffer, BytesLike]) -> None:
        """Append the contents of another BufferList, Buffer or bytes."""
        if isinstance(other, BufferList):
            self._buffers.extend(buf._clone() for buf in other._buffers)
        else:
            self._buffers.append(_as_buffer(other))

    def to_buffer(self) -> Buffer:
        """Return the single contiguous Buffer; fails if there is more than one."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise ValueError(
            "BufferList: use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < front.size():
                front.remove_prefix(n)
                n = 0
            else:
                n -= front.size()
                self._buffers.popleft()

    def size(self) -> int:
        return sum(buf.size() for buf in self._buffers)

    def concatenate(self) -> bytes:
        return b"".join(buf.str() for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data: Union[BufferList, Buffer, BytesLike]) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            sources: Iterable[memoryview] = (buf._view() for buf in data._buffers)
        elif isinstance(data, Buffer):
            sources = (data._view(),)
        else:
            sources = (memoryview(bytes(data)),)
        self._views.extend(sources)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes of the view."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def size(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """The views as a list suitable for scatter/gather writes."""
        return list(self._views)