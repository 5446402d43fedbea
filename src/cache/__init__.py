"""
Storelens Cache Module
======================

Read-through memoization for store fetches, Redis-backed with a bounded
in-memory fallback.

Usage:
    from src.cache import FetchCache

    cache = FetchCache(ttl_seconds=600, max_entries=1000)
    value = cache.get_or_compute("key", lambda: expensive_fetch())
"""

from .redis_cache import FetchCache

__all__ = ["FetchCache"]
