from __future__ import annotations

import random
from typing import Union

from dnslib import CLASS, QTYPE, DNSHeader, DNSQuestion, DNSRecord

from .records import RecordKind, qtype_code

_ID_SOURCE = random.SystemRandom()


def next_query_id() -> int:
    """Brief: Return a fresh 16-bit DNS message id."""
    return _ID_SOURCE.randint(0, 0xFFFF)


def build_query(
    name: str, qtype: Union[int, str, RecordKind] = QTYPE.A
) -> DNSRecord:
    """
    Brief: Build a recursive single-question query for (name, qtype).

    Inputs:
      - name: Hostname; a trailing dot is optional.
      - qtype: Record type as an int code, tag name or RecordKind (default A).

    Outputs:
      - dnslib.DNSRecord with a fresh id, RD=1 and one IN-class question.

    Example:
      >>> q = build_query("example.com", "MX")
      >>> (q.header.rd, len(q.questions), QTYPE[q.q.qtype])
      (1, 1, 'MX')
    """
    fqdn = name if name.endswith(".") else name + "."
    header = DNSHeader(id=next_query_id(), qr=0, rd=1)
    return DNSRecord(header, q=DNSQuestion(fqdn, qtype_code(qtype), CLASS.IN))
