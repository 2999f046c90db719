"""
Brief: Global pytest configuration and shared DNS fixtures.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import sys

import pytest
from dnslib import AAAA, MX, QTYPE, RCODE, RR, TXT, A, DNSRecord

# Ensure 'src' is on sys.path so 'pooldns' is importable without installation
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from pooldns.errors import TransportError  # noqa: E402


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        yield


def a_rr(name="example.com.", addr="93.184.216.34", ttl=300):
    return RR(name, QTYPE.A, rdata=A(addr), ttl=ttl)


def aaaa_rr(name="example.com.", addr="2606:2800:220:1::1", ttl=300):
    return RR(name, QTYPE.AAAA, rdata=AAAA(addr), ttl=ttl)


def mx_rr(name="example.com.", pref=10, exchange="mail.example.com.", ttl=300):
    return RR(name, QTYPE.MX, rdata=MX(exchange, pref), ttl=ttl)


def txt_rr(name="example.com.", text="v=spf1 -all", ttl=300):
    return RR(name, QTYPE.TXT, rdata=TXT(text), ttl=ttl)


def make_reply(query, answers=(), rcode=RCODE.NOERROR):
    """
    Brief: Build a reply to query with the given answers and rcode.

    Inputs:
      - query: dnslib.DNSRecord the reply answers.
      - answers: iterable of RR.
      - rcode: response code.

    Outputs:
      - dnslib.DNSRecord reply sharing the query id.
    """
    reply = query.reply()
    reply.header.rcode = rcode
    for rr in answers:
        reply.add_answer(rr)
    return reply


class ScriptedExchange:
    """
    Brief: Stand-in for pooldns.transports.exchange driven by a script.

    Each script step is either an Exception (raised), an int rcode (empty
    reply with that rcode) or a list of RRs (NOERROR reply with those
    answers). The last step repeats once the script runs out.
    """

    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls = []

    def __call__(self, query, resolver, timeout_ms):
        self.calls.append((query, resolver, timeout_ms))
        idx = min(len(self.calls) - 1, len(self.steps) - 1)
        step = self.steps[idx]
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, int):
            return make_reply(query, rcode=step)
        return make_reply(query, step)

    @property
    def resolvers_used(self):
        return [call[1] for call in self.calls]


@pytest.fixture
def transport_error():
    return TransportError("timed out", "192.0.2.1:53")


def dns_reply_for(query_wire, answers=(), rcode=RCODE.NOERROR, tc=0):
    """Brief: Wire-format reply for a wire-format query (used by stub servers)."""
    query = DNSRecord.parse(query_wire)
    reply = make_reply(query, answers, rcode)
    reply.header.tc = tc
    return reply.pack()
