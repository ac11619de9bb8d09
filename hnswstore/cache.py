"""
Query result cache.

A bounded LRU cache with a maximum entry age, mapping (query vector, k) to a
previously returned result list. Keys are built from the vector's *values*
(its float32 bytes), so two distinct arrays or lists with the same numbers hit
the same entry.

Caches are constructed explicitly and handed to the store that uses them; each
store owns its own instance.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

CacheKey = Tuple[bytes, int, int]


@dataclass
class CacheEntry:
    """A cached query result."""
    results: List[Any]
    created_at: float

    def is_expired(self, now: float, max_age: float) -> bool:
        return now - self.created_at > max_age


@dataclass
class CacheStatistics:
    """Statistics about cache performance."""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return (self.hits / total) if total > 0 else 0.0


class QueryCache:
    """
    LRU cache of query results with a maximum age.

    Features:
    - Value-based keys (vector contents + k)
    - Least-recently-used eviction beyond max_entries
    - Entries older than max_age seconds are treated as misses
    - Thread-safe operations
    """

    def __init__(
        self,
        max_entries: int = 100,
        max_age: float = 100.0,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_entries: Maximum number of cached results
            max_age: Seconds after which an entry expires
            time_func: Clock used for ages (injectable for tests)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if max_age <= 0:
            raise ValueError("max_age must be positive")

        self.max_entries = max_entries
        self.max_age = max_age
        self._time = time_func

        self._cache: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self.stats = CacheStatistics()

    @staticmethod
    def make_key(embedding, k: int) -> CacheKey:
        vector = np.ascontiguousarray(embedding, dtype=np.float32)
        return (vector.tobytes(), len(vector), int(k))

    def get(self, embedding, k: int) -> Optional[List[Any]]:
        """
        Return the cached results for (embedding, k), or None on a miss.
        """
        key = self.make_key(embedding, k)

        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self.stats.misses += 1
                return None

            if entry.is_expired(self._time(), self.max_age):
                del self._cache[key]
                self.stats.expirations += 1
                self.stats.misses += 1
                return None

            self._cache.move_to_end(key)
            self.stats.hits += 1
            logger.debug("Cache hit for k=%d", k)
            return list(entry.results)

    def set(self, embedding, k: int, results: List[Any]) -> None:
        """Store results for (embedding, k), evicting the least recently used entry if full."""
        key = self.make_key(embedding, k)

        with self._lock:
            if key in self._cache:
                del self._cache[key]

            self._cache[key] = CacheEntry(results=list(results), created_at=self._time())

            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)
                self.stats.evictions += 1

    def clear(self) -> None:
        """Drop every entry (statistics are kept)."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: Tuple[Any, int]) -> bool:
        embedding, k = key
        with self._lock:
            entry = self._cache.get(self.make_key(embedding, k))
            return entry is not None and not entry.is_expired(self._time(), self.max_age)

    def __repr__(self) -> str:
        return (
            f"QueryCache(entries={len(self._cache)}/{self.max_entries}, "
            f"max_age={self.max_age}s, hit_rate={self.stats.hit_rate:.2f})"
        )
