"""Thin socket wrappers built on FileDescriptor."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from spongetcp.address import Address
from spongetcp.buffer import Buffer, BufferList, BufferViewList
from spongetcp.file_descriptor import FileDescriptor
from spongetcp.util import UnixError

Payload = Union[str, bytes, bytearray, memoryview, Buffer, BufferList, BufferViewList]

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


def _as_views(payload: Payload) -> BufferViewList:
    if isinstance(payload, BufferViewList):
        return payload
    if isinstance(payload, str):
        return BufferViewList(payload.encode())
    return BufferViewList(payload)


class Socket(FileDescriptor):
    """A network socket; normally used through one of its subclasses."""

    def __init__(
        self, domain: int, sock_type: int, fd: Optional[FileDescriptor] = None
    ) -> None:
        """Create a new socket, or take over ``fd`` after checking its domain and type."""
        if fd is None:
            try:
                raw = socket.socket(domain, sock_type)
            except OSError as exc:
                raise UnixError("socket", exc.errno) from exc
            super().__init__(raw.detach())
            return

        self._internal = fd._internal
        with self._syscall("getsockopt") as sock:
            actual_domain = int(sock.family)
            actual_type = sock.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
        if actual_domain != int(domain):
            raise RuntimeError("socket domain mismatch")
        if actual_type != int(sock_type):
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _syscall(self, name: str) -> Iterator[socket.socket]:
        """Borrow a socket object for this descriptor; OSErrors become UnixErrors."""
        sock = socket.socket(fileno=self.fd_num())
        try:
            yield sock
        except UnixError:
            raise
        except OSError as exc:
            raise UnixError(name, exc.errno) from exc
        finally:
            sock.detach()

    def _setsockopt(self, level: int, option: int, value: int) -> None:
        with self._syscall("setsockopt") as sock:
            sock.setsockopt(level, option, value)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._syscall("bind") as sock:
            sock.bind(address.sockaddr())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._syscall("connect") as sock:
            sock.connect(address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._syscall("shutdown") as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._syscall("getsockname") as sock:
            return Address.from_sockaddr(sock.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._syscall("getpeername") as sock:
            return Address.from_sockaddr(sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A datagram payload and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """A UDP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise RuntimeError if it is larger than ``mtu``."""
        buffer = bytearray(mtu)
        with self._syscall("recvfrom") as sock:
            length, source = sock.recvfrom_into(buffer, mtu, _MSG_TRUNC)
        if length > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), bytes(buffer[:length]))

    def _sendmsg(self, payload: Payload, destination: Optional[Address]) -> None:
        views = _as_views(payload)
        iovecs = views.as_iovecs()
        with self._syscall("sendmsg") as sock:
            if destination is None:
                sent = sock.sendmsg(iovecs)
            else:
                sent = sock.sendmsg(iovecs, (), 0, destination.sockaddr())
        if sent != views.size():
            raise RuntimeError("datagram payload too big for sendmsg()")

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)
        self._register_write()

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected address."""
        self._sendmsg(payload, None)
        self._register_write()


class TCPSocket(Socket):
    """A TCP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        with self._syscall("listen") as sock:
            sock.listen(backlog)

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()
        with self._syscall("accept") as sock:
            connection, _peer = sock.accept()
        return TCPSocket(FileDescriptor(connection.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)