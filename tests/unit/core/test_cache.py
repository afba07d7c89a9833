"""Tests for the bounded LRU cache."""

import pytest

from mergesight.core.cache import BoundedCache


def test_put_and_get():
    cache = BoundedCache(2)
    cache.put("a", 1)

    assert cache.get("a") == 1
    assert cache.get("missing") is None
    assert "a" in cache
    assert len(cache) == 1


def test_evicts_least_recently_inserted():
    """Without reads, the oldest insert goes first."""
    cache = BoundedCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)

    assert cache.keys() == ["b", "c"]
    assert cache.get("a") is None


def test_get_refreshes_recency():
    """A read protects an entry from the next eviction."""
    cache = BoundedCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.put("c", 3)

    assert cache.keys() == ["a", "c"]


def test_replace_does_not_evict():
    cache = BoundedCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)

    assert len(cache) == 2
    assert cache.get("a") == 10
    assert cache.keys() == ["b", "a"]


def test_pop_and_clear():
    cache = BoundedCache(3)
    cache.put("a", 1)
    cache.put("b", 2)

    assert cache.pop("a") == 1
    assert cache.pop("a") is None
    cache.clear()
    assert len(cache) == 0
    assert cache.evict_oldest() is None


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        BoundedCache(0)
