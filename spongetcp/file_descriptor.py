"""A reference-counted handle to an operating-system file descriptor."""

from __future__ import annotations

import os
import sys
from typing import Optional, Union

from spongetcp.buffer import Buffer, BufferList, BufferViewList
from spongetcp.util import UnixError

_MAX_READ = 1024 * 1024

Writable = Union[str, bytes, bytearray, memoryview, Buffer, BufferList, BufferViewList]


class _FDWrapper:
    """The shared state behind one kernel file descriptor."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _as_view_list(data: Writable) -> BufferViewList:
    if isinstance(data, str):
        return BufferViewList(data.encode())
    if isinstance(data, BufferViewList):
        return BufferViewList(b"".join(data.as_iovecs()))
    return BufferViewList(data)


class FileDescriptor:
    """A file descriptor that tracks EOF, closure and how often it was read or written.

    Duplicates share that state; the descriptor is closed when the last one goes away.
    """

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @staticmethod
    def _sharing(wrapper: _FDWrapper) -> FileDescriptor:
        handle = FileDescriptor.__new__(FileDescriptor)
        handle._internal = wrapper
        return handle

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); an empty result marks EOF."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        if size < 0:
            raise ValueError(f"negative read limit: {limit}")
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            raise UnixError("read", exc.errno) from exc
        if (limit is None or limit > 0) and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``, looping until all is written if ``write_all``; return the count."""
        pending = _as_view_list(data)
        total = 0
        while True:
            iovecs = pending.as_iovecs()
            try:
                written = os.writev(self.fd_num(), iovecs) if iovecs else 0
            except OSError as exc:
                raise UnixError("writev", exc.errno) from exc
            remaining = pending.size()
            if written == 0 and remaining:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            pending.remove_prefix(written)
            total += written
            if not (write_all and pending.size()):
                return total

    def close(self) -> None:
        """Close the underlying descriptor for every duplicate."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle on the same descriptor and its shared state."""
        return FileDescriptor._sharing(self._internal)

    def set_blocking(self, blocking_state: bool) -> None:
        """Switch between blocking and non-blocking mode."""
        try:
            os.set_blocking(self.fd_num(), blocking_state)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc

    def fd_num(self) -> int:
        return self._internal.fd

    def fileno(self) -> int:
        return self._internal.fd

    def eof(self) -> bool:
        return self._internal.eof

    def closed(self) -> bool:
        return self._internal.closed

    def read_count(self) -> int:
        return self._internal.read_count

    def write_count(self) -> int:
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *exc_info) -> None:
        if not self.closed():
            self.close()