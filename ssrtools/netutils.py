"""Socket address helpers: resolution, binding, ordering and host-name checks."""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

__all__ = [
    "INET_SIZE",
    "INET6_SIZE",
    "SockAddr",
    "get_sockaddr_len",
    "set_reuseport",
    "bind_to_address",
    "get_sockaddr",
    "sockaddr_cmp",
    "sockaddr_cmp_addr",
    "validate_hostname",
]

logger = logging.getLogger(__name__)

INET_SIZE = 4
"""Byte size of an IPv4 address."""
INET6_SIZE = 16
"""Byte size of an IPv6 address."""

_SOCKADDR_IN_LEN = 16
_SOCKADDR_IN6_LEN = 28
_SO_REUSEPORT = getattr(socket, "SO_REUSEPORT", 15)
_RESOLVE_ATTEMPTS = 7
_VALID_LABEL_CHARS = frozenset(
    "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
)
_ADDRESS_SIZES = {socket.AF_INET: INET_SIZE, socket.AF_INET6: INET6_SIZE}


@dataclass(frozen=True)
class SockAddr:
    """An IPv4 or IPv6 socket address: family, packed address and port."""

    family: int
    address: bytes
    port: int = 0

    def __post_init__(self) -> None:
        size = _ADDRESS_SIZES.get(self.family)
        if size is not None and len(self.address) != size:
            raise ValueError(
                f"address of family {self.family} must be {size} bytes, "
                f"got {len(self.address)}"
            )
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def from_host(cls, host: str, port: int = 0) -> "SockAddr":
        """Build from a textual IP address; raise ValueError if it is not one."""
        ip = ipaddress.ip_address(host)
        family = socket.AF_INET if ip.version == 4 else socket.AF_INET6
        return cls(family, ip.packed, port)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Sequence) -> "SockAddr":
        """Build from a family and a tuple as returned by the socket module."""
        host = str(sockaddr[0]).split("%", 1)[0]
        return cls(family, socket.inet_pton(family, host), int(sockaddr[1]))

    @property
    def host(self) -> str:
        """The address in text form."""
        return socket.inet_ntop(self.family, self.address)

    def to_tuple(self) -> Tuple:
        """The address as a tuple suitable for ``socket.connect`` and friends."""
        if self.family == socket.AF_INET6:
            return (self.host, self.port, 0, 0)
        return (self.host, self.port)


def get_sockaddr_len(family: int) -> int:
    """Size of the C socket address structure for ``family``, or 0."""
    if family == socket.AF_INET:
        return _SOCKADDR_IN_LEN
    if family == socket.AF_INET6:
        return _SOCKADDR_IN6_LEN
    return 0


def set_reuseport(sock: socket.socket) -> None:
    """Enable port reuse on ``sock``; raise OSError if unsupported."""
    sock.setsockopt(socket.SOL_SOCKET, _SO_REUSEPORT, 1)


def bind_to_address(sock: socket.socket, host: Optional[str]) -> None:
    """Bind ``sock`` to the IP address ``host`` with any port.

    Raise ValueError if ``host`` is missing or not an IP address, and
    OSError if binding fails.
    """
    if host is None:
        raise ValueError("no address to bind to")
    addr = SockAddr.from_host(host)
    sock.bind(addr.to_tuple())


def _atoi(text: str) -> int:
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for char in text:
        if not char.isdigit() or not char.isascii():
            break
        digits += char
    return sign * int(digits) if digits else 0


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def get_sockaddr(host: str, port: Union[str, int, None] = None,
                 block: bool = False, ipv6first: bool = False) -> SockAddr:
    """Turn ``host`` and ``port`` into a :class:`SockAddr`.

    An IP address is used directly. A name is resolved, preferring IPv6
    when ``ipv6first`` is set and IPv4 otherwise; with ``block`` a failed
    lookup is retried after waiting 2, 4, ... seconds. Raise OSError if
    the name cannot be resolved.
    """
    if _is_ip(host):
        number = 0 if port is None else _atoi(str(port)) & 0xFFFF
        return SockAddr.from_host(host, number)

    service = None if port is None else str(port)
    results = None
    error: Optional[OSError] = None
    for attempt in range(1, _RESOLVE_ATTEMPTS + 1):
        try:
            results = socket.getaddrinfo(host, service, socket.AF_UNSPEC,
                                         socket.SOCK_STREAM)
            error = None
        except OSError as exc:
            error = exc
        if not block or error is None:
            break
        delay = 2 ** attempt
        time.sleep(delay)
        logger.error("failed to resolve server name, wait %d seconds", delay)

    if error is not None:
        logger.error("getaddrinfo: %s", error)
        raise error

    preferred = socket.AF_INET6 if ipv6first else socket.AF_INET
    candidates = [entry for entry in results or ()
                  if entry[0] in (socket.AF_INET, socket.AF_INET6)]
    chosen = next((entry for entry in candidates if entry[0] == preferred),
                  candidates[0] if candidates else None)
    if chosen is None:
        logger.error("failed to resolve remote addr")
        raise OSError(f"failed to resolve remote addr: {host}")
    return SockAddr.from_sockaddr(chosen[0], chosen[4])


def _sign(left, right) -> int:
    return (left > right) - (left < right)


def sockaddr_cmp(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family, port and address: -1, 0 or 1."""
    family = _sign(addr1.family, addr2.family)
    if family:
        return family
    port = _sign(addr1.port, addr2.port)
    if port:
        return port
    return _sign(addr1.address, addr2.address)


def sockaddr_cmp_addr(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family and address, ignoring the port."""
    family = _sign(addr1.family, addr2.family)
    if family:
        return family
    if addr1.family in _ADDRESS_SIZES:
        return _sign(addr1.address, addr2.address)
    return _sign((addr1.address, addr1.port), (addr2.address, addr2.port))


def validate_hostname(hostname: Union[str, bytes, None]) -> bool:
    """Whether ``hostname`` is a well-formed DNS name.

    The name is 1 to 255 characters of labels separated by dots, with an
    optional final dot; each label is 1 to 63 letters, digits, hyphens or
    underscores and neither starts nor ends with a hyphen.
    """
    if hostname is None:
        return False
    if isinstance(hostname, (bytes, bytearray)):
        hostname = bytes(hostname).decode("latin-1")
    if not 1 <= len(hostname) <= 255:
        return False
    if hostname.startswith("."):
        return False
    labels = hostname.split(".")
    if hostname.endswith("."):
        labels.pop()
    for label in labels:
        if not 1 <= len(label) <= 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not set(label) <= _VALID_LABEL_CHARS:
            return False
    return True