"""
Memory Cache

Thread-safe in-memory LRU cache. Used for values that are expensive to
derive and identical across renders, such as the intrinsic size of an
embedded image.
"""

import threading
from typing import Any, Callable, Dict, Optional
from collections import OrderedDict
from dataclasses import dataclass, replace
import logging

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Counters of one cache, copied out by LRUCache.stats()"""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hitRate": round(self.hit_rate, 4),
            "size": self.size,
            "maxSize": self.max_size,
        }


class LRUCache:
    """
    Thread-safe LRU (Least Recently Used) cache.

    Features:
    - O(1) get/set operations
    - Automatic eviction of least recently used items
    - Thread-safe (one RLock guards every operation)

    Usage:
        cache = LRUCache(max_size=256)
        size = cache.get_or_compute(digest, lambda: measure(data))
    """

    def __init__(self, max_size: int = 256):
        if max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {max_size}")
        self.max_size = max_size
        self._cache: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats(max_size=max_size)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._cache:
                self._stats.misses += 1
                return None

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            self._stats.hits += 1
            return self._cache[key]

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = value

            # Evict if over capacity
            while len(self._cache) > self.max_size:
                evicted, _ = self._cache.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Evicted cache entry {evicted}")

            self._stats.size = len(self._cache)

    def get_or_compute(self, key: str, factory: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
                self._stats.hits += 1
                return self._cache[key]
            self._stats.misses += 1

        # Compute outside the lock; a concurrent miss on the same key
        # computes the same value
        value = factory()
        self.set(key, value)
        return value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> int:
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._stats.size = 0
            return count

    def stats(self) -> CacheStats:
        with self._lock:
            return replace(self._stats, size=len(self._cache))
