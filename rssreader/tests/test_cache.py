"""
Tests for the advisory cache.
"""

import pytest

from rssreader.cache import MemoryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(ttl_seconds=60, max_size=3, clock=clock)


class TestMemoryCache:

    def test_miss(self, cache):
        assert cache.get("missing") == (None, False)

    def test_fresh_hit(self, cache):
        cache.put("a", {"title": "A"})
        assert cache.get("a") == ({"title": "A"}, True)

    def test_stale_after_ttl(self, cache, clock):
        cache.put("a", "value")
        clock.now += 61
        value, is_fresh = cache.get("a")
        assert value == "value"
        assert is_fresh is False

    def test_put_refreshes_entry(self, cache, clock):
        cache.put("a", "old")
        clock.now += 61
        cache.put("a", "new")
        assert cache.get("a") == ("new", True)

    def test_lru_eviction(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        cache.get("a")  # a is now most recently used
        cache.put("d", 4)

        assert cache.get("b") == (None, False)
        assert cache.get("a") == (1, True)
        assert cache.get("c") == (3, True)
        assert cache.get("d") == (4, True)

    def test_invalidate(self, cache):
        cache.put("a", 1)
        cache.invalidate("a")
        cache.invalidate("never-stored")
        assert cache.get("a") == (None, False)

    def test_invalidate_prefix(self, cache):
        cache.put("items:user-1:all:1:20", "page")
        cache.put("items:user-1:unread:1:20", "page")
        cache.put("items:user-2:all:1:20", "page")

        removed = cache.invalidate_prefix("items:user-1:")

        assert removed == 2
        assert cache.get("items:user-1:all:1:20") == (None, False)
        assert cache.get("items:user-2:all:1:20") == ("page", True)
