from __future__ import annotations

import logging
import socket
import time
from typing import Tuple

from ..pool import ResolverAddress

logger = logging.getLogger("pooldns.transports.udp")

MAX_DATAGRAM = 65535


class UDPError(Exception):
    """Brief: Socket failure or timeout while exchanging a datagram with a resolver."""


def _resolver_sockaddr(addr: ResolverAddress) -> Tuple[int, tuple]:
    """
    Brief: Resolve a resolver address to (family, sockaddr) for SOCK_DGRAM.

    Raises:
      - UDPError when the host cannot be resolved.
    """
    host, port = addr.hostport
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except socket.gaierror as e:
        raise UDPError(f"cannot resolve {addr}: {e}") from e
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


def udp_exchange(addr: ResolverAddress, wire: bytes, *, timeout_ms: int) -> bytes:
    """
    Brief: Send one query datagram to addr and wait for its answer.

    Inputs:
      - addr: Resolver to query.
      - wire: Packed DNS query.
      - timeout_ms: Total time to wait for a reply from addr.

    Outputs:
      - bytes of the first datagram whose source is addr. Datagrams from any
        other peer are discarded and do not extend the deadline.
    """
    family, target = _resolver_sockaddr(addr)
    deadline = time.monotonic() + timeout_ms / 1000.0
    try:
        with socket.socket(family, socket.SOCK_DGRAM) as s:
            s.sendto(wire, target)
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise UDPError(f"timed out waiting for {addr}")
                s.settimeout(remaining)
                data, peer = s.recvfrom(MAX_DATAGRAM)
                if peer[:2] == target[:2]:
                    return data
                logger.debug("Dropping datagram from %s; expected %s", peer, addr)
    except OSError as e:
        raise UDPError(f"UDP exchange with {addr} failed: {e}") from e
