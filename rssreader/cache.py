"""
Cache - Advisory caching behind a storage-independent interface.

Provides:
- AdvisoryCache: get/put/invalidate contract, get reports freshness
- MemoryCache: In-memory cache with per-cache TTL and LRU eviction

Cached values are a freshness hint only. Callers treat a stale hit like a
miss and always fall back to the authoritative source.
"""

import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


class AdvisoryCache(ABC):
    """Abstract base class for advisory caches."""

    @abstractmethod
    def get(self, key: str) -> tuple[Any | None, bool]:
        """Return (value, is_fresh). A miss is (None, False)."""
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def invalidate(self, key: str) -> None:
        pass

    @abstractmethod
    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns count removed."""
        pass


class MemoryCache(AdvisoryCache):
    """
    In-memory cache with TTL and LRU eviction.

    Expired entries are kept and reported stale until evicted or replaced.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> tuple[Any | None, bool]:
        entry = self._cache.get(key)
        if entry is None:
            return None, False

        # Move to end for LRU
        self._cache.move_to_end(key)
        is_fresh = self._clock() - entry.stored_at < self.ttl_seconds
        return entry.value, is_fresh

    def put(self, key: str, value: Any) -> None:
        if key in self._cache:
            self._cache.move_to_end(key)
        self._cache[key] = CacheEntry(value=value, stored_at=self._clock())

        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)

    def invalidate(self, key: str) -> None:
        self._cache.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        keys = [key for key in self._cache if key.startswith(prefix)]
        for key in keys:
            del self._cache[key]
        return len(keys)
