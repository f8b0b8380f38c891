"""Tests for ContextCache."""

from __future__ import annotations

import pytest

from lifecyclekit import ContextCache


class TestContextCache:
    """Tests for lookup, eviction and statistics."""

    def test_get_or_create_builds_once(self):
        cache = ContextCache()
        builds = []

        def build():
            builds.append(1)
            return "ctx"

        assert cache.get_or_create("k", build) == "ctx"
        assert cache.get_or_create("k", build) == "ctx"
        assert len(builds) == 1
        assert cache.get_stats() == {
            "size": 1,
            "max_size": 32,
            "hits": 1,
            "misses": 1,
            "hit_rate": 0.5,
        }

    def test_get_miss_returns_none(self):
        cache = ContextCache()

        assert cache.get("absent") is None
        assert cache.miss_count == 1

    def test_lru_eviction_closes_value(self, fake_resource_type):
        cache = ContextCache(max_size=2)
        first = fake_resource_type("first")
        second = fake_resource_type("second")
        third = fake_resource_type("third")
        cache.put("a", first)
        cache.put("b", second)
        cache.get("a")

        cache.put("c", third)

        assert cache.contains("a")
        assert not cache.contains("b")
        assert second.closed is True
        assert first.closed is False
        assert cache.size == 2

    def test_put_replacing_value_closes_previous(self, fake_resource_type):
        cache = ContextCache()
        old = fake_resource_type("old")
        cache.put("k", old)

        cache.put("k", fake_resource_type("new"))

        assert old.closed is True
        assert len(cache) == 1

    def test_remove_and_clear(self, fake_resource_type):
        cache = ContextCache()
        values = [fake_resource_type(str(i)) for i in range(3)]
        for i, value in enumerate(values):
            cache.put(i, value)

        assert cache.remove(0) is True
        assert cache.remove(0) is False
        cache.clear()

        assert len(cache) == 0
        assert all(value.closed for value in values)

    def test_close_failure_is_logged(self, caplog):
        class Broken:
            def close(self):
                raise RuntimeError("cannot close")

        cache = ContextCache()
        cache.put("k", Broken())

        assert cache.remove("k") is True
        assert "cannot close" in caplog.text

    def test_clear_statistics(self):
        cache = ContextCache()
        cache.get("x")

        cache.clear_statistics()

        assert cache.hit_count == 0
        assert cache.miss_count == 0
        assert cache.get_stats()["hit_rate"] == 0.0

    def test_invalid_max_size(self):
        with pytest.raises(ValueError, match="at least 1"):
            ContextCache(max_size=0)
