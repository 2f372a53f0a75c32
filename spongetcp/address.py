"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Tuple, Union

from spongetcp.util import TaggedError

SockAddr = Union[Tuple, str, bytes]

_NUMERIC_FLAGS = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV


def _family_of(sockaddr: SockAddr) -> int:
    if isinstance(sockaddr, (str, bytes)):
        return socket.AF_UNIX
    if isinstance(sockaddr, tuple):
        if len(sockaddr) == 2:
            return socket.AF_INET
        if len(sockaddr) == 4:
            return socket.AF_INET6
    raise ValueError(f"unrecognised socket address: {sockaddr!r}")


def _resolve(node: str, service: str, flags: int) -> Tuple[int, SockAddr]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno, exc.strerror
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address, normally IPv4, with DNS helpers."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port, without DNS."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _resolve(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def _make(cls, family: int, sockaddr: SockAddr) -> Address:
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = sockaddr
        return address

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Look up a hostname and a service name (or numeric port)."""
        family, sockaddr = _resolve(hostname, service, socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, sockaddr: SockAddr) -> Address:
        """Wrap an address as returned by the socket module (e.g. getsockname)."""
        return cls._make(_family_of(sockaddr), sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"not a 32-bit IPv4 address: {ip_address}")
        ip = socket.inet_ntoa(ip_address.to_bytes(4, "big"))
        return cls._make(socket.AF_INET, (ip, 0))

    def ip_port(self) -> Tuple[str, int]:
        """The numeric host string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError(
                "getnameinfo", socket.EAI_FAMILY, "address family not supported"
            )
        try:
            host, port = socket.getnameinfo(self._sockaddr, _NUMERIC_FLAGS)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(port)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host byte order."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def sockaddr(self) -> SockAddr:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address({self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))