"""Bounded least-recently-used cache."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterator
from typing import Generic, TypeVar

from mergesight.core.log import logger

K = TypeVar("K")
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """Mapping with a fixed capacity and LRU eviction.

    Reads through get() refresh an entry's recency; put() evicts the
    least recently used entry when the cache is full. Eviction is
    silent apart from a debug log line.
    """

    def __init__(self, max_entries: int):
        """Initialize an empty cache.

        Args:
            max_entries: Capacity; must be at least 1

        Raises:
            ValueError: If max_entries is less than 1
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> V | None:
        """Return the cached value and mark it most recently used."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or replace a value, evicting the oldest if full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_entries:
            self.evict_oldest()
        self._entries[key] = value

    def evict_oldest(self) -> K | None:
        """Drop the least recently used entry.

        Returns:
            The evicted key, or None when the cache is empty
        """
        if not self._entries:
            return None
        key, _ = self._entries.popitem(last=False)
        logger.debug("Evicted cache entry", key=str(key))
        return key

    def pop(self, key: K) -> V | None:
        return self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def values(self) -> list[V]:
        return list(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)
