"""Asynchronous host-name resolution returning one preferred socket address.

Each query looks up A and/or AAAA records in the background, depending on
the resolver's :class:`ResolvMode`. Once every lookup has finished, the
query's callback receives the best :class:`SockAddr`, or None when nothing
was found.
"""

from __future__ import annotations

import enum
import ipaddress
import logging
import socket
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ssrtools.netutils import SockAddr

__all__ = ["ResolvMode", "ResolvQuery", "Resolver", "choose_address"]

logger = logging.getLogger(__name__)

Lookup = Callable[[str, int], Iterable[str]]
Callback = Callable[[Optional[SockAddr]], None]

_QUERY_TIMEOUT = 30.0
_LOOPBACK_PREFIXES = ("127.0.0.1", "::1")


class ResolvMode(enum.IntEnum):
    """Which record types are looked up and which family is preferred."""

    IPV4_ONLY = 0
    IPV6_ONLY = 1
    IPV4_FIRST = 2
    IPV6_FIRST = 3


def choose_address(responses: Sequence[SockAddr],
                   mode: ResolvMode) -> Optional[SockAddr]:
    """Pick the address to use from ``responses``.

    In the "first" modes the first address of the preferred family wins,
    falling back to the first address of any family; otherwise the first
    address is taken. An empty sequence gives None.
    """
    preferred = {
        ResolvMode.IPV4_FIRST: socket.AF_INET,
        ResolvMode.IPV6_FIRST: socket.AF_INET6,
    }.get(ResolvMode(mode))
    if preferred is not None:
        for addr in responses:
            if addr.family == preferred:
                return addr
    return responses[0] if responses else None


class ResolvQuery:
    """One outstanding resolution, created by :meth:`Resolver.query`."""

    def __init__(self, hostname: str, port: int, callback: Callback,
                 families: Sequence[int]) -> None:
        self.hostname = hostname
        self.port = port
        self._callback = callback
        self._pending: Set[int] = set(families)
        self._responses: List[SockAddr] = []
        self._futures: List[Future] = []
        self._cancelled = False
        self._finished = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.hostname!r}, port={self.port}, "
                f"done={self.done()})")

    def done(self) -> bool:
        """Whether the query has delivered its result or was cancelled."""
        with self._lock:
            return self._finished or self._cancelled

    def _cancel(self) -> None:
        with self._lock:
            if self._finished:
                return
            self._cancelled = True
            futures = list(self._futures)
        for future in futures:
            future.cancel()

    def _complete(self, family: int, addresses: List[SockAddr],
                  mode: ResolvMode) -> Optional[Callable[[], None]]:
        with self._lock:
            if self._cancelled or self._finished:
                return None
            self._responses.extend(addresses)
            self._pending.discard(family)
            if self._pending:
                return None
            self._finished = True
            best = choose_address(self._responses, mode)
        callback = self._callback
        return lambda: callback(best)


class Resolver:
    """Resolves host names in background threads.

    ``nameservers`` lists the DNS servers to ask; None uses the system
    configuration. ``lookup`` may replace the DNS lookup: it is called with
    a host name and an address family and returns address strings, raising
    on failure.
    """

    def __init__(self, nameservers: Optional[Sequence[str]] = None,
                 ipv6first: bool = False, *, mode: Optional[ResolvMode] = None,
                 lookup: Optional[Lookup] = None, max_workers: int = 4) -> None:
        if mode is None:
            mode = ResolvMode.IPV6_FIRST if ipv6first else ResolvMode.IPV4_FIRST
        self.mode = ResolvMode(mode)
        self.nameservers = list(nameservers) if nameservers is not None else None
        self._lookup = lookup
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="resolv")
        self._active: Set[ResolvQuery] = set()
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "Resolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _default_lookup(self) -> Lookup:
        import dns.resolver

        if self.nameservers is None:
            dns_resolver = dns.resolver.Resolver()
        else:
            dns_resolver = dns.resolver.Resolver(configure=False)
            dns_resolver.nameservers = list(self.nameservers)
        dns_resolver.lifetime = _QUERY_TIMEOUT

        source = None
        if self.nameservers is not None and len(self.nameservers) == 1:
            server = self.nameservers[0]
            if server.startswith(_LOOPBACK_PREFIXES):
                try:
                    ipaddress.ip_address(server)
                except ValueError:
                    logger.error("bind_to_address: %s", server)
                else:
                    logger.debug("bind UDP resolver to %s", server)
                    source = server

        def lookup(hostname: str, family: int) -> List[str]:
            rdtype = "AAAA" if family == socket.AF_INET6 else "A"
            answer = dns_resolver.resolve(hostname, rdtype, source=source)
            return [record.address for record in answer]

        return lookup

    def _families(self) -> List[int]:
        families = []
        if self.mode is not ResolvMode.IPV6_ONLY:
            families.append(socket.AF_INET)
        if self.mode is not ResolvMode.IPV4_ONLY:
            families.append(socket.AF_INET6)
        return families

    def query(self, hostname: str, callback: Callback,
              port: int = 0) -> ResolvQuery:
        """Start resolving ``hostname``; ``callback`` gets the result later.

        Raise RuntimeError if the resolver has been shut down.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("resolver is shut down")
            if self._lookup is None:
                self._lookup = self._default_lookup()
            families = self._families()
            query = ResolvQuery(hostname, port, callback, families)
            self._active.add(query)
            futures = [self._executor.submit(self._run, query, family)
                       for family in families]
        with query._lock:
            query._futures.extend(futures)
        return query

    def _run(self, query: ResolvQuery, family: int) -> None:
        if query.done():
            return
        label = "IPv6" if family == socket.AF_INET6 else "IPv4"
        addresses: List[SockAddr] = []
        try:
            assert self._lookup is not None
            for text in self._lookup(query.hostname, family):
                try:
                    addr = SockAddr.from_host(str(text), query.port)
                except ValueError:
                    logger.error("invalid address in DNS response: %s", text)
                    continue
                if addr.family == family:
                    addresses.append(addr)
        except Exception as exc:  # any lookup failure counts as no answer
            logger.debug("%s resolv: %s", label, exc)
        deliver = query._complete(family, addresses, self.mode)
        if deliver is not None:
            with self._lock:
                self._active.discard(query)
            deliver()

    def cancel(self, query: ResolvQuery) -> None:
        """Abandon ``query``; its callback will not be called."""
        query._cancel()
        with self._lock:
            self._active.discard(query)

    def shutdown(self) -> None:
        """Cancel outstanding queries and stop accepting new ones."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            active = list(self._active)
            self._active.clear()
        for query in active:
            query._cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)