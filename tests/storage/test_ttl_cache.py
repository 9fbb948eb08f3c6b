"""
TTLCacheStore 테스트

@FEAT:ttl-cache @COMP:test @TYPE:unit
"""

import json

import pytest

from merchant_sync.storage.kv_store import InMemoryKeyValueStore
from merchant_sync.storage.ttl_cache import TTLCacheStore


class TestTTLExpiry:
    """TTL 만료 경계"""

    def test_read_before_ttl_returns_value(self, ttl_cache, clock):
        ttl_cache.set("order:ord_1", {"status": "PENDING"}, ttl_ms=30_000)
        clock.advance(29_999)

        assert ttl_cache.get("order:ord_1") == {"status": "PENDING"}

    def test_read_at_ttl_boundary_is_miss_and_evicts(self, ttl_cache, kv_store, clock):
        ttl_cache.set("order:ord_1", {"status": "PENDING"}, ttl_ms=30_000)
        clock.advance(30_000)

        assert ttl_cache.get("order:ord_1") is None
        assert kv_store.get_string("order:ord_1") is None

    def test_set_without_ttl_never_expires(self, ttl_cache, kv_store, clock):
        ttl_cache.set("profile", {"merchant_id": "m_1"})
        clock.advance(10 * 365 * 24 * 3600 * 1000)

        assert ttl_cache.get("profile") == {"merchant_id": "m_1"}
        assert "expiresAt" not in json.loads(kv_store.get_string("profile"))

    def test_envelope_format(self, ttl_cache, kv_store, clock):
        ttl_cache.set("orders:PENDING", [1, 2], ttl_ms=1000)

        envelope = json.loads(kv_store.get_string("orders:PENDING"))
        assert envelope == {"data": [1, 2], "expiresAt": clock() + 1000}

    def test_missing_key_returns_default(self, ttl_cache):
        assert ttl_cache.get("nope") is None
        assert ttl_cache.get("nope", default=[]) == []

    def test_contains_distinguishes_stored_none(self, ttl_cache):
        ttl_cache.set("flag", None)

        assert ttl_cache.contains("flag") is True
        assert ttl_cache.contains("other") is False


class TestSelfHealing:
    """손상 엔트리 자가 치유"""

    @pytest.mark.parametrize("raw", [
        "not-json",
        json.dumps([1, 2, 3]),
        json.dumps({"value": 1}),
        json.dumps({"data": 1, "expiresAt": "tomorrow"}),
    ])
    def test_corrupted_entry_is_miss_and_deleted(self, raw):
        store = InMemoryKeyValueStore({"order:broken": raw})
        cache = TTLCacheStore(store, clock=lambda: 0)

        assert cache.get("order:broken") is None
        assert store.get_string("order:broken") is None

    def test_is_expired_does_not_delete(self, kv_store, ttl_cache, clock):
        kv_store.set("bad", "{{{")
        ttl_cache.set("old", 1, ttl_ms=10)
        clock.advance(10)

        assert ttl_cache.is_expired("bad") is True
        assert ttl_cache.is_expired("old") is True
        assert ttl_cache.is_expired("missing") is True
        assert kv_store.get_string("bad") == "{{{"
        assert kv_store.get_string("old") is not None


class TestSweepAndClear:
    """일괄 정리"""

    def test_sweep_removes_expired_and_corrupted_only(self, ttl_cache, kv_store, clock):
        ttl_cache.set("order:1", "a", ttl_ms=1_000)
        ttl_cache.set("order:2", "b", ttl_ms=60_000)
        ttl_cache.set("profile", "c")
        kv_store.set("garbage", "<html>")
        clock.advance(5_000)

        removed = ttl_cache.sweep_expired()

        assert removed == 2
        assert sorted(kv_store.get_all_keys()) == ["order:2", "profile"]

    def test_clear_all(self, ttl_cache, kv_store):
        ttl_cache.set("a", 1)
        ttl_cache.set("b", 2, ttl_ms=100)

        assert ttl_cache.clear_all() == 2
        assert kv_store.get_all_keys() == []

    def test_stats_count_hits_and_misses(self, ttl_cache):
        ttl_cache.set("a", 1)
        ttl_cache.get("a")
        ttl_cache.get("a")
        ttl_cache.get("b")

        stats = ttl_cache.get_stats()

        assert stats["total_hits"] == 2
        assert stats["total_misses"] == 1
        assert stats["hit_rate"] == "66.7%"
