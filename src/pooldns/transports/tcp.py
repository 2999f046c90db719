from __future__ import annotations

import socket
import time

from ..pool import ResolverAddress


class TCPError(Exception):
    """Brief: Connect, read or framing failure during a DNS-over-TCP exchange."""


def tcp_exchange(addr: ResolverAddress, wire: bytes, *, timeout_ms: int) -> bytes:
    """
    Brief: One length-prefixed (RFC 7766) query/reply over a fresh connection.

    Inputs:
      - addr: Resolver to connect to.
      - wire: Packed DNS query.
      - timeout_ms: Budget for the whole exchange, connect included.

    Outputs:
      - bytes of the reply message, without the length prefix.
    """
    deadline = time.monotonic() + timeout_ms / 1000.0
    try:
        with socket.create_connection(addr.hostport, timeout=timeout_ms / 1000.0) as sock:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.sendall(len(wire).to_bytes(2, "big") + wire)
            size = int.from_bytes(_read(sock, 2, deadline, addr), "big")
            return _read(sock, size, deadline, addr)
    except OSError as e:
        raise TCPError(f"TCP exchange with {addr} failed: {e}") from e


def _read(sock: socket.socket, n: int, deadline: float, addr: ResolverAddress) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TCPError(f"timed out reading from {addr}")
        sock.settimeout(remaining)
        chunk = sock.recv(n - len(buf))
        if not chunk:
            raise TCPError(f"{addr} closed the connection after {len(buf)} of {n} bytes")
        buf += chunk
    return bytes(buf)
