"""pooldns: DNS resolution client that retries across a pool of resolvers."""

from .client import Client, EnrichedResult, RawResult, SimpleResult
from .errors import ExhaustedError, ProtocolStatusError, ResolutionError, TransportError
from .pool import ResolverAddress, ResolverPool
from .query import build_query
from .records import RecordKind, aggregate, extract

__all__ = [
    "Client",
    "EnrichedResult",
    "ExhaustedError",
    "ProtocolStatusError",
    "RawResult",
    "RecordKind",
    "ResolutionError",
    "ResolverAddress",
    "ResolverPool",
    "SimpleResult",
    "TransportError",
    "aggregate",
    "build_query",
    "extract",
]
