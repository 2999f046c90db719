"""Exchange a dnslib query with one resolver.

Brief:
  ``exchange`` is the single transport seam used by pooldns.Client. It sends
  over UDP, falls back to TCP when the reply is truncated, and reports every
  network, timeout or decoding failure as a TransportError so the retry loop
  can treat them uniformly.
"""

from __future__ import annotations

import logging

from dnslib import DNSRecord

from ..errors import TransportError
from ..pool import ResolverAddress
from .tcp import TCPError, tcp_exchange
from .udp import UDPError, udp_exchange

logger = logging.getLogger("pooldns.transports")

DEFAULT_TIMEOUT_MS = 2000


def _parse_reply(wire: bytes, query: DNSRecord, resolver: str) -> DNSRecord:
    try:
        reply = DNSRecord.parse(wire)
    except Exception as e:
        raise TransportError(f"malformed reply from {resolver}: {e}", resolver) from e
    if reply.header.id != query.header.id:
        raise TransportError(
            f"reply id {reply.header.id} from {resolver} does not match query id {query.header.id}",
            resolver,
            reply,
        )
    return reply


def exchange(
    query: DNSRecord, resolver: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> DNSRecord:
    """
    Brief: Send one query to one resolver and return the parsed reply.

    Inputs:
      - query: dnslib.DNSRecord to send.
      - resolver: ``host:port`` resolver address.
      - timeout_ms: Budget for the UDP exchange, and again for a TCP retry.

    Outputs:
      - dnslib.DNSRecord reply, whatever its rcode.

    Raises:
      - TransportError on socket errors, timeouts, undecodable replies or a
        reply id that does not match the query. When a reply was decoded
        before the failure it is attached as ``.response``.
    """
    addr = ResolverAddress(resolver)
    wire = query.pack()

    try:
        reply_wire = udp_exchange(addr, wire, timeout_ms=timeout_ms)
    except UDPError as e:
        raise TransportError(str(e), addr) from e
    reply = _parse_reply(reply_wire, query, addr)

    if reply.header.tc:
        logger.debug("Truncated UDP reply from %s; retrying over TCP", addr)
        try:
            reply_wire = tcp_exchange(addr, wire, timeout_ms=timeout_ms)
        except TCPError as e:
            raise TransportError(str(e), addr, reply) from e
        try:
            reply = _parse_reply(reply_wire, query, addr)
        except TransportError as e:
            if e.response is None:
                e.response = reply
            raise

    return reply


__all__ = ["DEFAULT_TIMEOUT_MS", "exchange", "tcp_exchange", "udp_exchange"]
