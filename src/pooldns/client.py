from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from dnslib import QTYPE, RCODE, DNSRecord

from .errors import ExhaustedError, ProtocolStatusError, ResolutionError, TransportError
from .pool import ResolverAddress, ResolverPool
from .query import build_query
from .records import RecordKind, aggregate, empty_buckets, extract, qtype_name
from .transports import DEFAULT_TIMEOUT_MS, exchange as _default_exchange

logger = logging.getLogger("pooldns.client")

QType = Union[int, str, RecordKind]
ExchangeFn = Callable[[DNSRecord, str, int], DNSRecord]
ReplyObserver = Callable[[DNSRecord, ResolverAddress], None]


@dataclass
class SimpleResult:
    """Addresses from the A answers of one reply; ttl is that of the last A record."""

    addresses: List[str] = field(default_factory=list)
    ttl: int = 0


@dataclass
class RawResult:
    """Type-filtered answer text plus the text dump of the last reply seen."""

    values: List[str] = field(default_factory=list)
    raw: str = ""


@dataclass
class EnrichedResult:
    """
    Brief: Full per-type breakdown of one reply plus diagnostics.

    Fields:
      - domain: Queried hostname.
      - ttl: Not populated by this client; kept for callers that fill it.
      - resolver: Resolver that produced the reply ("" when none did).
      - records: Mapping of the eight type tags to canonical RR text.
      - raw: Text dump of the reply.
      - status_code: Textual rcode ("NOERROR", "NXDOMAIN"...).
    """

    domain: str = ""
    ttl: Optional[int] = None
    resolver: str = ""
    records: Dict[str, List[str]] = field(default_factory=empty_buckets)
    raw: str = ""
    status_code: str = ""


def rcode_text(rcode: int) -> str:
    return RCODE.get(rcode, str(rcode))


class Client:
    """
    DNS resolution client that retries across a pool of resolvers.

    Each attempt goes to an independently, randomly chosen resolver. Transport
    failures rotate to another resolver; a reply with a non-success rcode ends
    the resolution immediately.

    Example use:
        >>> client = Client(["1.1.1.1:53", "8.8.8.8:53"], max_retries=3)
        >>> client.resolve("example.com")  # doctest: +SKIP
        SimpleResult(addresses=['93.184.216.34'], ttl=300)
    """

    def __init__(
        self,
        resolvers: Union[Iterable[str], ResolverPool],
        max_retries: int = 3,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        exchange: Optional[ExchangeFn] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if int(max_retries) < 1:
            raise ValueError("max_retries must be >= 1")
        if isinstance(resolvers, ResolverPool):
            if rng is not None:
                raise ValueError("rng cannot be combined with a ResolverPool; pass it to the pool")
            self.pool = resolvers
        else:
            self.pool = ResolverPool(resolvers, rng=rng)
        self.max_retries = int(max_retries)
        self.timeout_ms = int(timeout_ms)
        self._exchange = exchange or _default_exchange

    @property
    def resolvers(self) -> List[ResolverAddress]:
        return self.pool.resolvers

    def _run_attempts(
        self,
        query: DNSRecord,
        *,
        observe: Optional[ReplyObserver] = None,
        short_circuit: bool = True,
        max_attempts: Optional[int] = None,
    ) -> Tuple[DNSRecord, ResolverAddress]:
        """
        Brief: Shared retry loop behind every entry point.

        Inputs:
          - query: Query to send on each attempt.
          - observe: Called with (reply, resolver) for every reply received,
            before its rcode is inspected. Replies attached to a failed
            attempt (TransportError.response) are observed too.
          - short_circuit: When True, a non-NOERROR reply raises
            ProtocolStatusError. When False any reply counts as success.
          - max_attempts: Attempt budget; defaults to self.max_retries.

        Outputs:
          - (reply, resolver) for the reply that ended the loop.

        Raises:
          - ProtocolStatusError: terminal rcode (short_circuit only).
          - ExhaustedError: every attempt raised TransportError.
        """
        attempts = max_attempts or self.max_retries
        qname = query.q.qname if query.questions else "<no question>"
        qtype = qtype_name(query.q.qtype) if query.questions else "-"
        last_error: Optional[TransportError] = None

        for attempt in range(1, attempts + 1):
            resolver = self.pool.pick()
            try:
                reply = self._exchange(query, resolver, self.timeout_ms)
            except TransportError as e:
                last_error = e
                logger.debug(
                    "Attempt %d/%d for %s %s via %s failed: %s",
                    attempt,
                    attempts,
                    qname,
                    qtype,
                    resolver,
                    e,
                )
                if observe is not None and e.response is not None:
                    observe(e.response, resolver)
                continue

            if observe is not None:
                observe(reply, resolver)

            rcode = reply.header.rcode
            if short_circuit and rcode != RCODE.NOERROR:
                status = rcode_text(rcode)
                logger.info("Resolver %s returned %s for %s", resolver, status, qname)
                raise ProtocolStatusError(status, rcode, resolver, reply)
            return reply, resolver

        logger.warning(
            "All %d attempt(s) for %s failed; last error: %s",
            attempts,
            qname,
            last_error,
        )
        raise ExhaustedError(attempts, last_error) from last_error

    def resolve(self, host: str) -> SimpleResult:
        """
        Brief: Resolve the A records of host.

        Inputs:
          - host: Hostname to resolve.

        Outputs:
          - SimpleResult with every A address in answer order; ttl is taken
            from the last A record seen.

        Raises:
          - ProtocolStatusError, ExhaustedError
        """
        reply, _ = self._run_attempts(build_query(host, QTYPE.A))
        result = SimpleResult()
        for rr in reply.rr:
            if RecordKind.A.matches(rr):
                result.addresses.append(RecordKind.A.value_of(rr))
                result.ttl = rr.ttl
        return result

    def resolve_raw(self, host: str, qtype: QType) -> RawResult:
        """
        Brief: Resolve host for qtype and return the matching answers as text.

        Inputs:
          - host: Hostname to resolve.
          - qtype: Record type as int code, tag name or RecordKind.

        Outputs:
          - RawResult. ``raw`` is refreshed from every reply received, so it
            reflects the last reply seen even when an error is raised.

        Raises:
          - ProtocolStatusError, ExhaustedError; both carry the partial
            RawResult as ``.result``.
        """
        result = RawResult()

        def _capture(reply: DNSRecord, resolver: ResolverAddress) -> None:
            result.raw = str(reply)

        try:
            reply, _ = self._run_attempts(build_query(host, qtype), observe=_capture)
        except ResolutionError as e:
            e.result = result
            raise
        result.values = extract(reply, qtype)
        return result

    def do(
        self, query: DNSRecord
    ) -> Tuple[Optional[DNSRecord], Optional[ResolutionError]]:
        """
        Brief: Send a caller-built query with resolver rotation.

        Inputs:
          - query: dnslib.DNSRecord to send as-is.

        Outputs:
          - (reply, None) for the first reply received, whatever its rcode;
            inspecting the rcode is left to the caller.
          - (None, ExhaustedError) when every attempt failed in transport.
        """
        try:
            reply, _ = self._run_attempts(query, short_circuit=False)
        except ExhaustedError as e:
            return None, e
        return reply, None

    def resolve_enrich(
        self, host: str, qtype: QType, *, retry_transport: bool = False
    ) -> Tuple[EnrichedResult, Optional[ResolutionError]]:
        """
        Brief: Resolve host for qtype and bucket every answer by type.

        Inputs:
          - host: Hostname to resolve.
          - qtype: Record type as int code, tag name or RecordKind.
          - retry_transport: When False (default) a single attempt is made and
            a transport failure is returned as-is. When True, transport
            failures rotate resolvers up to max_retries.

        Outputs:
          - (EnrichedResult, error). The result is always returned:
              * success: all fields populated, error is None
              * terminal status: raw, status_code and resolver set, buckets
                left empty, error is ProtocolStatusError
              * transport failure: empty result, error is TransportError
                (single attempt) or ExhaustedError (retry_transport)
        """
        result = EnrichedResult(domain=host)

        def _record(reply: DNSRecord, resolver: ResolverAddress) -> None:
            result.raw = str(reply)
            result.status_code = rcode_text(reply.header.rcode)
            result.resolver = str(resolver)

        try:
            reply, _ = self._run_attempts(
                build_query(host, qtype),
                observe=_record,
                max_attempts=None if retry_transport else 1,
            )
        except ProtocolStatusError as e:
            return result, e
        except ExhaustedError as e:
            if retry_transport or e.last_error is None:
                return result, e
            return result, e.last_error

        result.records = aggregate(reply)
        return result, None
