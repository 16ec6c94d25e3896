"""
Cache Module

Exports:
- LRUCache (thread-safe in-memory LRU cache)
- CacheStats (hit/miss/eviction counters)
"""

from .memory_cache import CacheStats, LRUCache

__all__ = [
    'CacheStats',
    'LRUCache',
]
