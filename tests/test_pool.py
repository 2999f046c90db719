"""
Brief: Tests for ResolverAddress parsing and ResolverPool selection.

Inputs:
  - None

Outputs:
  - None
"""

import random
import threading

import pytest

from pooldns.pool import DEFAULT_PORT, ResolverAddress, ResolverPool


@pytest.mark.parametrize(
    "raw,expected,hostport",
    [
        ("8.8.8.8", "8.8.8.8:53", ("8.8.8.8", 53)),
        ("8.8.8.8:5353", "8.8.8.8:5353", ("8.8.8.8", 5353)),
        (" 1.1.1.1:53 ", "1.1.1.1:53", ("1.1.1.1", 53)),
        ("[2606:4700::1111]:853", "[2606:4700::1111]:853", ("2606:4700::1111", 853)),
        ("[::1]", "[::1]:53", ("::1", 53)),
        ("2001:db8::1", "[2001:db8::1]:53", ("2001:db8::1", 53)),
        ("dns.example.net", "dns.example.net:53", ("dns.example.net", 53)),
    ],
)
def test_resolver_address_normalizes(raw, expected, hostport):
    addr = ResolverAddress(raw)
    assert addr == expected
    assert addr.hostport == hostport
    assert addr.host == hostport[0]
    assert addr.port == hostport[1]


@pytest.mark.parametrize("raw", ["", ":53", "1.1.1.1:abc", "1.1.1.1:0", "1.1.1.1:70000", "[::1"])
def test_resolver_address_rejects_invalid(raw):
    with pytest.raises(ValueError):
        ResolverAddress(raw)


def test_resolver_address_is_idempotent():
    addr = ResolverAddress("9.9.9.9")
    assert ResolverAddress(addr) == addr
    assert DEFAULT_PORT == 53


def test_pool_requires_resolvers():
    with pytest.raises(ValueError):
        ResolverPool([])


def test_pool_preserves_order():
    pool = ResolverPool(["192.0.2.1", "192.0.2.2:5353"])
    assert pool.resolvers == ["192.0.2.1:53", "192.0.2.2:5353"]
    assert len(pool) == 2


def test_pick_only_returns_configured_resolvers():
    resolvers = ["192.0.2.1:53", "192.0.2.2:53", "192.0.2.3:53"]
    pool = ResolverPool(resolvers, rng=random.Random(1))
    picks = [pool.pick() for _ in range(500)]
    assert set(picks) <= set(resolvers)
    # Uniform selection over 500 draws reaches every resolver.
    assert set(picks) == set(resolvers)


def test_pick_single_resolver_always_same():
    pool = ResolverPool(["192.0.2.9"])
    assert {pool.pick() for _ in range(20)} == {"192.0.2.9:53"}


def test_pick_is_deterministic_for_seeded_rng():
    resolvers = ["a.example:53", "b.example:53", "c.example:53"]
    first = ResolverPool(resolvers, rng=random.Random(42))
    second = ResolverPool(resolvers, rng=random.Random(42))
    assert [first.pick() for _ in range(50)] == [second.pick() for _ in range(50)]


def test_concurrent_picks_stay_in_range():
    resolvers = ["192.0.2.1:53", "192.0.2.2:53", "192.0.2.3:53"]
    pool = ResolverPool(resolvers)
    results = []
    lock = threading.Lock()

    def worker():
        local = [pool.pick() for _ in range(1000)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8000
    assert set(results) <= set(resolvers)
