"""
Tests for the in-memory TTL cache.
"""

from anime_tracker.protocols import CacheStore
from anime_tracker.repositories import MemoryCacheStore


def test_satisfies_cache_store_protocol(clock):
    assert isinstance(MemoryCacheStore("search", clock=clock), CacheStore)


def test_miss_returns_none(clock):
    cache = MemoryCacheStore("search", clock=clock)

    assert cache.get("missing") is None
    assert cache.get_stale("missing") is None


def test_fresh_until_ttl_elapses(clock):
    cache = MemoryCacheStore("search", clock=clock)
    cache.put("k", ["a"], ttl=60)

    clock.advance(59)
    assert cache.get("k") == ["a"]

    clock.advance(1)
    assert cache.get("k") is None
    assert cache.get_stale("k") == ["a"]


def test_put_replaces_value_and_expiry(clock):
    cache = MemoryCacheStore("anime", clock=clock)
    cache.put("k", "old", ttl=10)
    clock.advance(20)

    cache.put("k", "new", ttl=10)

    assert cache.get("k") == "new"
    assert cache.get_stale("k") == "new"


def test_empty_list_is_a_hit(clock):
    cache = MemoryCacheStore("search", clock=clock)
    cache.put("k", [], ttl=60)

    assert cache.get("k") == []


def test_stats(clock):
    cache = MemoryCacheStore("anime", clock=clock)
    cache.put("a", 1, ttl=5)
    cache.put("b", 2, ttl=50)
    clock.advance(10)

    assert cache.get_stats() == {"name": "anime", "total_entries": 2, "fresh_entries": 1}
    assert cache.name == "anime"
