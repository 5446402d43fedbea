"""
Tests for the fetch cache (in-memory backend).

Usage:
    pytest tests/test_cache.py -v
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from src.cache import FetchCache


class TestGetOrCompute:

    def setup_method(self):
        self.cache = FetchCache(ttl_seconds=600, max_entries=3)

    def test_computes_once(self):
        compute = MagicMock(return_value={"results": [1, 2]})
        assert self.cache.get_or_compute("k", compute) == {"results": [1, 2]}
        assert self.cache.get_or_compute("k", compute) == {"results": [1, 2]}
        assert compute.call_count == 1

    def test_hit_and_miss_counters(self):
        self.cache.get_or_compute("k", lambda: 1)
        self.cache.get_or_compute("k", lambda: 1)
        stats = self.cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["backend"] == "memory"

    def test_failures_not_cached(self):
        failing = MagicMock(side_effect=RuntimeError("upstream down"))
        with pytest.raises(RuntimeError):
            self.cache.get_or_compute("k", failing)
        assert self.cache.get_or_compute("k", lambda: "ok") == "ok"

    def test_falsy_values_are_cached(self):
        compute = MagicMock(return_value=[])
        self.cache.get_or_compute("k", compute)
        self.cache.get_or_compute("k", compute)
        assert compute.call_count == 1


class TestExpiryAndEviction:

    def setup_method(self):
        self.cache = FetchCache(ttl_seconds=600, max_entries=3)

    def test_expired_entry_is_recomputed(self):
        self.cache.set("k", "old")
        expired = datetime.now(timezone.utc) - timedelta(seconds=1)
        self.cache._memory_cache[self.cache._make_key("k")] = (expired, "old")
        assert self.cache.get("k") is None
        assert self.cache.get_or_compute("k", lambda: "new") == "new"

    def test_zero_ttl_never_expires(self):
        self.cache.set("k", "forever", ttl_seconds=0)
        expires_at, _ = self.cache._memory_cache[self.cache._make_key("k")]
        assert expires_at is None

    def test_oldest_entry_evicted(self):
        for key in ("a", "b", "c", "d"):
            self.cache.set(key, key)
        assert self.cache.get("a") is None
        assert self.cache.get("d") == "d"
        assert self.cache.get_stats()["memory_keys"] == 3

    def test_delete_and_clear(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        assert self.cache.delete("a") is True
        assert self.cache.delete("a") is False
        self.cache.clear()
        assert self.cache.get("b") is None


class TestKeys:

    def test_compute_hash_is_stable(self):
        assert FetchCache.compute_hash("ios", "spotify", 10) == FetchCache.compute_hash("ios", "spotify", 10)
        assert len(FetchCache.compute_hash("ios")) == 16

    def test_compute_hash_differs_by_argument(self):
        assert FetchCache.compute_hash("ios", "x") != FetchCache.compute_hash("android", "x")

    def test_prefix_isolation(self):
        first = FetchCache(prefix="one")
        second = FetchCache(prefix="two")
        first.set("k", 1)
        assert second.get("k") is None

    def test_no_redis_without_configuration(self):
        assert FetchCache().backend == "memory"
