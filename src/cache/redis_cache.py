"""
Storelens Fetch Cache
=====================

Memoization for store fetches via Redis with automatic fallback to a
bounded in-memory cache.

Features:
- get_or_compute(key, compute, ttl_seconds) for read-through memoization
- TTL-based expiration
- JSON serialization (Redis backend)
- In-memory fallback capped at max_entries (oldest entry evicted first)
- Namespace prefixing for key isolation

Usage:
    cache = FetchCache(ttl_seconds=600, max_entries=1000)
    detail = cache.get_or_compute(
        FetchCache.compute_hash("detail", app_id, country),
        lambda: client.app_detail(app_id, country),
    )

Only the fetch layer owns a cache. The analytics engine never sees one.
"""

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_MISSING = object()


class FetchCache:
    """
    Read-through cache with Redis primary storage and in-memory fallback.

    Redis is only tried when a URL is given or use_redis is set; if the
    connection fails the cache silently serves from memory.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        max_entries: int = 1000,
        redis_url: Optional[str] = None,
        use_redis: bool = False,
        prefix: str = "storelens",
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.prefix = prefix
        self._redis: Optional[Any] = None
        self._memory_cache: "OrderedDict[str, Tuple[Optional[datetime], Any]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

        if redis_url or use_redis:
            self._connect(redis_url)

    def _connect(self, redis_url: Optional[str] = None) -> None:
        """Establish Redis connection."""
        import redis

        url = redis_url or "redis://localhost:6379/0"
        try:
            self._redis = redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
            self._redis.ping()
            logger.info(f"Redis cache connected: {url.split('@')[-1] if '@' in url else url}")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}. Using in-memory cache.")
            self._redis = None

    @property
    def backend(self) -> str:
        return "redis" if self._redis is not None else "memory"

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Cached value, or default when missing or expired."""
        full_key = self._make_key(key)

        if self._redis is not None:
            try:
                value = self._redis.get(full_key)
                if value is not None:
                    return json.loads(value)
                return default
            except Exception as e:
                logger.warning(f"Redis get failed: {e}")

        return self._memory_get(full_key, default)

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Store a value; ttl_seconds=None uses the cache default, 0 means no expiry."""
        full_key = self._make_key(key)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds

        if self._redis is not None:
            try:
                serialized = json.dumps(value, default=str)
                if ttl:
                    self._redis.setex(full_key, ttl, serialized)
                else:
                    self._redis.set(full_key, serialized)
                return True
            except Exception as e:
                logger.warning(f"Redis set failed: {e}")

        return self._memory_set(full_key, value, ttl)

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Any],
        ttl_seconds: Optional[int] = None,
    ) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        Exceptions from compute propagate and nothing is cached.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            self._hits += 1
            return value

        self._misses += 1
        value = compute()
        self.set(key, value, ttl_seconds)
        return value

    def delete(self, key: str) -> bool:
        full_key = self._make_key(key)

        if self._redis is not None:
            try:
                return self._redis.delete(full_key) > 0
            except Exception as e:
                logger.warning(f"Redis delete failed: {e}")

        with self._lock:
            return self._memory_cache.pop(full_key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._memory_cache.clear()
        if self._redis is not None:
            try:
                keys = self._redis.keys(f"{self.prefix}:*")
                if keys:
                    self._redis.delete(*keys)
            except Exception as e:
                logger.warning(f"Redis clear failed: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "backend": self.backend,
            "hits": self._hits,
            "misses": self._misses,
            "memory_keys": len(self._memory_cache),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
        }

    # =========================================================================
    # MEMORY FALLBACK
    # =========================================================================

    def _memory_get(self, key: str, default: Any) -> Any:
        with self._lock:
            if key not in self._memory_cache:
                return default

            expires_at, value = self._memory_cache[key]
            if expires_at and datetime.now(timezone.utc) > expires_at:
                del self._memory_cache[key]
                return default

            return value

    def _memory_set(self, key: str, value: Any, ttl_seconds: Optional[int]) -> bool:
        expires_at = None
        if ttl_seconds:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)

        with self._lock:
            self._memory_cache.pop(key, None)
            self._memory_cache[key] = (expires_at, value)
            while len(self._memory_cache) > self.max_entries:
                self._memory_cache.popitem(last=False)
        return True

    # =========================================================================
    # UTILITIES
    # =========================================================================

    @staticmethod
    def compute_hash(*args) -> str:
        """16-character SHA256 key from JSON-serialized arguments."""
        data = json.dumps(args, sort_keys=True, default=str)
        return hashlib.sha256(data.encode()).hexdigest()[:16]

    def close(self) -> None:
        if self._redis:
            try:
                self._redis.close()
            except Exception as e:
                logger.debug(f"Redis close failed: {e}")
            self._redis = None
