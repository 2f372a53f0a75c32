"""A flow-controlled, in-memory, finite byte stream."""

from __future__ import annotations


class ByteStream:
    """Bytes are written on the input side and read from the output side."""

    def __init__(self, capacity: int) -> None:
        self._buffer = bytearray()
        self._capacity = capacity
        self._bytes_read = 0
        self._bytes_written = 0
        self._input_ended = False
        self._error = False

    # Writer interface

    def write(self, data: bytes) -> int:
        """Accept as many bytes as fit and return how many were accepted."""
        accepted = data[: self.remaining_capacity()]
        self._buffer += accepted
        self._bytes_written += len(accepted)
        return len(accepted)

    def remaining_capacity(self) -> int:
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        self._input_ended = True

    def set_error(self) -> None:
        self._error = True

    # Reader interface

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[:length])

    def pop_output(self, length: int) -> None:
        """Remove ``length`` bytes from the front of the buffer."""
        if length > len(self._buffer):
            raise ValueError(
                f"cannot pop {length} bytes from a buffer of {len(self._buffer)}"
            )
        del self._buffer[:length]
        self._bytes_read += length

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes."""
        data = self.peek_output(length)
        self.pop_output(len(data))
        return data

    def input_ended(self) -> bool:
        return self._input_ended

    def error(self) -> bool:
        return self._error

    def buffer_size(self) -> int:
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        return not self._buffer

    def eof(self) -> bool:
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        return self._bytes_written

    def bytes_read(self) -> int:
        return self._bytes_read