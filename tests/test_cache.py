"""Tests for the TTL result cache."""

import pytest

from nvg.cache import ResultCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestResultCache:
    def test_key_is_sha256_of_content(self):
        key = ResultCache.key_for("hello")
        assert key == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        assert ResultCache.key_for("hello") != ResultCache.key_for("hello ")

    def test_get_within_ttl(self):
        clock = FakeClock()
        cache = ResultCache(ttl=60, clock=clock)
        cache.set("k", "value")
        clock.now += 59
        assert cache.get("k") == "value"

    def test_expired_entry_evicted_on_read(self):
        clock = FakeClock()
        cache = ResultCache(ttl=60, clock=clock)
        cache.set("k", "value")
        clock.now += 61
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_clear_expired(self):
        clock = FakeClock()
        cache = ResultCache(ttl=60, clock=clock)
        cache.set("old", 1)
        clock.now += 30
        cache.set("new", 2)
        clock.now += 40
        assert cache.clear_expired() == 1
        assert cache.get("new") == 2

    def test_set_evicts_expired_entries(self):
        clock = FakeClock()
        cache = ResultCache(ttl=10, clock=clock)
        for i in range(50):
            cache.set(ResultCache.key_for(f"document {i}"), i)
            clock.now += 100
        assert len(cache) == 1
        assert cache.get(ResultCache.key_for("document 49")) is None

    def test_set_keeps_live_entries(self):
        clock = FakeClock()
        cache = ResultCache(ttl=60, clock=clock)
        cache.set("a", 1)
        clock.now += 30
        cache.set("b", 2)
        assert len(cache) == 2

    def test_invalidate_and_stats(self):
        cache = ResultCache()
        key = ResultCache.key_for("content")
        cache.set(key, "value")
        assert cache.stats() == {"size": 1, "entries": [key[:8] + "..."]}
        cache.invalidate(key)
        cache.invalidate(key)
        assert cache.stats()["size"] == 0

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            ResultCache(ttl=0)
