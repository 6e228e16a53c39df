"""Tests for metacat.core.cache — InMemoryCatalogCache."""

from __future__ import annotations

from metacat.core.cache import InMemoryCatalogCache


class TestInMemoryCatalogCache:
    def test_miss_then_hit(self):
        cache = InMemoryCatalogCache()
        assert cache.get("term", "term.json") is None
        cache.set("term", "term.json", {"entries": []})
        assert cache.get("term", "term.json") == {"entries": []}
        assert (cache.hits, cache.misses) == (1, 1)

    def test_values_are_copied(self):
        cache = InMemoryCatalogCache()
        payload = {"entries": [{"id": "1"}]}
        cache.set("term", "term.json", payload)
        payload["entries"].clear()
        got = cache.get("term", "term.json")
        got["entries"].append({"id": "2"})
        assert cache.get("term", "term.json") == {"entries": [{"id": "1"}]}

    def test_invalidate_type(self):
        cache = InMemoryCatalogCache()
        cache.set("term", "a.json", {})
        cache.set("term", "b.json", {})
        cache.set("domain", "a.json", {})
        cache.invalidate_type("term")
        assert len(cache) == 1
        assert cache.get("domain", "a.json") == {}

    def test_clear(self):
        cache = InMemoryCatalogCache()
        cache.set("term", "a.json", {})
        cache.clear()
        assert len(cache) == 0
