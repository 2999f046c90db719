"""
Brief: Unit tests for DNS-over-TCP framing using a local TCP stub server.

Inputs:
  - None

Outputs:
  - None
"""

import socket
import threading
import time

import pytest

from pooldns.pool import ResolverAddress
from pooldns.transports.tcp import TCPError, tcp_exchange


def _recv_n(conn, n):
    buf = b""
    while len(buf) < n:
        chunk = conn.recv(n - len(buf))
        if not chunk:
            break
        buf += chunk
    return buf


def _serve_once(handler):
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)

    def _run():
        conn, _ = srv.accept()
        try:
            handler(conn)
        finally:
            conn.close()
            srv.close()

    threading.Thread(target=_run, daemon=True).start()
    return ResolverAddress("127.0.0.1:%d" % srv.getsockname()[1])


def _echo_framed(conn):
    ln = int.from_bytes(_recv_n(conn, 2), "big")
    body = _recv_n(conn, ln)
    conn.sendall(len(body).to_bytes(2, "big") + body)


def test_tcp_exchange_roundtrip():
    addr = _serve_once(_echo_framed)
    q = b"\xab\xcdquery-bytes"
    assert tcp_exchange(addr, q, timeout_ms=500) == q


def test_tcp_exchange_reply_in_pieces():
    def _dribble(conn):
        ln = int.from_bytes(_recv_n(conn, 2), "big")
        body = _recv_n(conn, ln)
        framed = len(body).to_bytes(2, "big") + body
        for i in range(len(framed)):
            conn.sendall(framed[i : i + 1])

    addr = _serve_once(_dribble)
    q = b"\x01\x02split"
    assert tcp_exchange(addr, q, timeout_ms=1000) == q


def test_tcp_exchange_short_body_raises():
    def _truncated(conn):
        _recv_n(conn, 4)
        conn.sendall((10).to_bytes(2, "big") + b"abc")

    addr = _serve_once(_truncated)
    with pytest.raises(TCPError, match="closed the connection"):
        tcp_exchange(addr, b"\x00\x01", timeout_ms=500)


def test_tcp_exchange_deadline_covers_whole_exchange():
    def _stall(conn):
        _recv_n(conn, 4)
        conn.sendall((10).to_bytes(2, "big") + b"abc")
        time.sleep(0.5)

    addr = _serve_once(_stall)
    started = time.monotonic()
    with pytest.raises(TCPError):
        tcp_exchange(addr, b"\x00\x01", timeout_ms=100)
    assert time.monotonic() - started < 0.45


def test_tcp_exchange_connection_refused():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    with pytest.raises(TCPError):
        tcp_exchange(ResolverAddress("127.0.0.1:%d" % port), b"\x00\x01", timeout_ms=200)
