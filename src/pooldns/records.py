"""Record-type tags, per-type extraction and enrichment bucketing.

Brief:
  pooldns recognises a closed set of eight record types. Each RecordKind
  member knows its QTYPE code and how to pull a typed value (address, name,
  text...) out of a dnslib RR. ``extract`` filters one reply down to a single
  type; ``aggregate`` buckets every answer by type.
"""

from __future__ import annotations

import enum
from typing import Callable, Dict, List, Optional, Union

from dnslib import QTYPE, RR, DNSRecord


def _address(rr: RR) -> str:
    return str(rr.rdata)


def _target(rr: RR) -> str:
    return str(rr.rdata.label)


def _mail_exchange(rr: RR) -> str:
    return f"{rr.rdata.preference} {rr.rdata.label}"


def _text(rr: RR) -> str:
    parts = []
    for chunk in rr.rdata.data:
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8", errors="replace")
        parts.append(chunk)
    return "".join(parts)


def _soa(rr: RR) -> str:
    return str(rr.rdata)


class RecordKind(str, enum.Enum):
    """
    Brief: The eight record types pooldns extracts and aggregates.

    Example:
      >>> RecordKind.MX.code
      15
      >>> RecordKind.lookup("aaaa")
      <RecordKind.AAAA: 'AAAA'>
    """

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    PTR = "PTR"
    SOA = "SOA"
    NS = "NS"
    TXT = "TXT"

    @property
    def code(self) -> int:
        return int(getattr(QTYPE, self.value))

    def value_of(self, rr: RR) -> str:
        """Brief: Typed value of an RR of this kind (address, name, text...)."""
        return _VALUE_EXTRACTORS[self](rr)

    def matches(self, rr: RR) -> bool:
        return rr.rtype == self.code

    @classmethod
    def lookup(cls, qtype: Union[int, str, "RecordKind"]) -> Optional["RecordKind"]:
        """
        Brief: Resolve an int code, tag name or RecordKind to a member.

        Outputs:
          - RecordKind, or None when the type is not one of the eight.
        """
        if isinstance(qtype, cls):
            return qtype
        if isinstance(qtype, str):
            try:
                return cls(qtype.strip().upper())
            except ValueError:
                return None
        return _BY_CODE.get(int(qtype))


_VALUE_EXTRACTORS: Dict[RecordKind, Callable[[RR], str]] = {
    RecordKind.A: _address,
    RecordKind.AAAA: _address,
    RecordKind.CNAME: _target,
    RecordKind.MX: _mail_exchange,
    RecordKind.PTR: _target,
    RecordKind.SOA: _soa,
    RecordKind.NS: _target,
    RecordKind.TXT: _text,
}

_BY_CODE: Dict[int, RecordKind] = {kind.code: kind for kind in RecordKind}


def qtype_code(qtype: Union[int, str, RecordKind]) -> int:
    """
    Brief: Normalize a record type argument to its numeric QTYPE code.

    Inputs:
      - qtype: int code, RecordKind, or any type name dnslib knows ("SRV").

    Outputs:
      - int code; raises ValueError for names dnslib does not know.
    """
    if isinstance(qtype, RecordKind):
        return qtype.code
    if isinstance(qtype, str):
        name = qtype.strip().upper()
        code = QTYPE.reverse.get(name)
        if code is None:
            raise ValueError(f"unknown record type {qtype!r}")
        return int(code)
    return int(qtype)


def qtype_name(code: int) -> str:
    return QTYPE.get(code, f"TYPE{code}")


def extract(response: DNSRecord, qtype: Union[int, str, RecordKind]) -> List[str]:
    """
    Brief: Canonical text of every answer RR of exactly the requested type.

    Inputs:
      - response: Parsed reply.
      - qtype: Requested type. Types outside the eight recognised tags yield
        an empty list.

    Outputs:
      - list[str] in answer order, each produced by RR.toZone().
    """
    kind = RecordKind.lookup(qtype)
    if kind is None:
        return []
    return [rr.toZone() for rr in response.rr if kind.matches(rr)]


def empty_buckets() -> Dict[str, List[str]]:
    return {kind.value: [] for kind in RecordKind}


def aggregate(response: Optional[DNSRecord]) -> Dict[str, List[str]]:
    """
    Brief: Bucket every answer RR by type in a single pass.

    Inputs:
      - response: Parsed reply (None is treated as empty).

    Outputs:
      - dict keyed by all eight tags; unrecognised types are dropped.
    """
    buckets = empty_buckets()
    if response is None:
        return buckets
    for rr in response.rr:
        kind = _BY_CODE.get(rr.rtype)
        if kind is not None:
            buckets[kind.value].append(rr.toZone())
    return buckets
