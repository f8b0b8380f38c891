"""Explicitly scoped cache for per-class test resources.

A ContextCache stores whatever a ContextLoader builds for a test class
(an application context, a database fixture, a server handle) keyed by a
loader-provided key, so that test classes sharing a configuration share the
built resource. The cache is an ordinary object: it is created by the caller,
handed to the context factory, and cleared by the caller. There is no
module-level instance.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 32


class ContextLoader(ABC):
    """Builds the cached resource for a test class."""

    @abstractmethod
    def cache_key(self, test_class: type) -> Hashable:
        """Key under which the resource for ``test_class`` is cached.

        Classes that return equal keys share one resource.
        """
        ...

    @abstractmethod
    def load(self, test_class: type) -> Any:
        """Build a new resource for ``test_class``."""
        ...


class ContextCache:
    """LRU cache of loaded resources with hit/miss statistics.

    When an entry is evicted or removed, its value is closed if it has a
    ``close()`` method.

    Example:
        >>> cache = ContextCache(max_size=8)
        >>> ctx = cache.get_or_create("key", build_context)
        >>> cache.get_stats()
        {'size': 1, 'max_size': 8, 'hits': 0, 'misses': 1, 'hit_rate': 0.0}
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries before LRU eviction

        Raises:
            ValueError: If max_size is less than 1
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def contains(self, key: Hashable) -> bool:
        """Check for a key without touching statistics or LRU order."""
        return key in self._entries

    def get(self, key: Hashable) -> Any | None:
        """Get a cached value, or None on a miss."""
        if key in self._entries:
            self._hits += 1
            self._entries.move_to_end(key)
            return self._entries[key]
        self._misses += 1
        return None

    def put(self, key: Hashable, value: Any) -> None:
        """Store a value, evicting the least recently used entry if full."""
        if key in self._entries:
            previous = self._entries.pop(key)
            if previous is not value:
                self._close(key, previous)
        self._entries[key] = value

        while len(self._entries) > self.max_size:
            evicted_key, evicted = self._entries.popitem(last=False)
            logger.debug(f"Evicting cached context for key {evicted_key!r}")
            self._close(evicted_key, evicted)

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached value for key, building it on a miss."""
        if key in self._entries:
            return self.get(key)

        self._misses += 1
        logger.debug(f"Loading context for key {key!r}")
        value = factory()
        self.put(key, value)
        return value

    def remove(self, key: Hashable) -> bool:
        """Remove and close an entry.

        Returns:
            True if an entry was removed
        """
        if key not in self._entries:
            return False
        value = self._entries.pop(key)
        self._close(key, value)
        return True

    def clear(self) -> None:
        """Remove and close every entry."""
        for key in list(self._entries.keys()):
            self.remove(key)

    def clear_statistics(self) -> None:
        self._hits = 0
        self._misses = 0

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def hit_count(self) -> int:
        return self._hits

    @property
    def miss_count(self) -> int:
        return self._misses

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        """Get caching statistics.

        Returns:
            Dictionary with size, capacity, hits, misses and hit rate.
        """
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total > 0 else 0.0,
        }

    def _close(self, key: Hashable, value: Any) -> None:
        close = getattr(value, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as e:
            logger.warning(f"Error closing cached context for key {key!r}: {e}")
