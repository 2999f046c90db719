from __future__ import annotations

import ipaddress
import logging
import random
import threading
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger("pooldns.pool")

DEFAULT_PORT = 53


class ResolverAddress(str):
    """
    Brief: Immutable ``host:port`` string naming one resolver endpoint.

    Inputs:
      - value: "1.1.1.1", "1.1.1.1:53", "[2606:4700::1111]:53" or a bare IPv6
        literal. Missing ports default to 53.

    Outputs:
      - ResolverAddress normalized to ``host:port`` (IPv6 hosts bracketed).

    Example:
      >>> ResolverAddress("8.8.8.8")
      '8.8.8.8:53'
      >>> ResolverAddress("[::1]:5353").hostport
      ('::1', 5353)
    """

    def __new__(cls, value: str) -> "ResolverAddress":
        host, port = _split_hostport(str(value).strip())
        if ":" in host:
            text = f"[{host}]:{port}"
        else:
            text = f"{host}:{port}"
        return super().__new__(cls, text)

    @property
    def hostport(self) -> Tuple[str, int]:
        return _split_hostport(str(self))

    @property
    def host(self) -> str:
        return self.hostport[0]

    @property
    def port(self) -> int:
        return self.hostport[1]


def _split_hostport(value: str) -> Tuple[str, int]:
    """
    Brief: Split a resolver string into (host, port).

    Inputs:
      - value: Resolver text.

    Outputs:
      - (host, port); raises ValueError on empty hosts or bad ports.
    """
    if not value:
        raise ValueError("resolver address must not be empty")

    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep:
            raise ValueError(f"unterminated IPv6 literal in resolver {value!r}")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif value.count(":") > 1:
        # Bare IPv6 literal without a port.
        ipaddress.IPv6Address(value)
        host, port_text = value, ""
    else:
        host, _, port_text = value.partition(":")

    if not host:
        raise ValueError(f"resolver {value!r} has no host")
    try:
        port = int(port_text) if port_text else DEFAULT_PORT
    except ValueError:
        raise ValueError(f"resolver {value!r} has an invalid port") from None
    if not 0 < port < 65536:
        raise ValueError(f"resolver {value!r} port out of range")
    return host, port


class ResolverPool:
    """
    Fixed, ordered set of resolvers with thread-safe random selection.

    The random source is the only shared mutable state of a Client; the lock is
    held for the duration of a single pick and never across network I/O.

    Example use:
        >>> pool = ResolverPool(["1.1.1.1", "8.8.8.8:53"])
        >>> pool.pick() in pool.resolvers
        True
    """

    def __init__(
        self, resolvers: Iterable[str], rng: Optional[random.Random] = None
    ) -> None:
        self._resolvers: Tuple[ResolverAddress, ...] = tuple(
            ResolverAddress(r) for r in resolvers
        )
        if not self._resolvers:
            raise ValueError("resolver pool requires at least one resolver")
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    @property
    def resolvers(self) -> List[ResolverAddress]:
        return list(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)

    def pick(self) -> ResolverAddress:
        """
        Brief: Choose one resolver uniformly at random, with replacement.

        Outputs:
          - ResolverAddress from the configured list. Successive picks may
            return the same address.
        """
        with self._lock:
            idx = self._rng.randrange(len(self._resolvers))
        return self._resolvers[idx]
