"""
Catalog cache service.

Loaded catalog payloads are cached per ``(catalog type, filename)`` so
repeated reads inside one request, or across requests, skip the disk.
The cache is an explicit object handed to the store; there is no module
level state. Writers call :meth:`CatalogCache.invalidate` after every
mutation so readers never see stale data.

Architecture:
    ::

        CatalogCache (Protocol)
        └── InMemoryCatalogCache  — single-process dict, no TTL

        API: get(catalog, filename) → payload | None
             set(catalog, filename, payload)
             invalidate(catalog, filename)
             invalidate_type(catalog)
             clear()
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Protocol


class CatalogCache(Protocol):
    """Protocol for catalog payload caches."""

    def get(self, catalog: str, filename: str) -> dict[str, Any] | None:
        """Return a private copy of the cached payload, or ``None``."""
        ...

    def set(self, catalog: str, filename: str, payload: dict[str, Any]) -> None:
        """Store a payload for ``(catalog, filename)``."""
        ...

    def invalidate(self, catalog: str, filename: str) -> None:
        """Drop one cached payload.  No-op if absent."""
        ...

    def invalidate_type(self, catalog: str) -> None:
        """Drop every cached payload of one catalog type."""
        ...

    def clear(self) -> None:
        """Drop everything."""
        ...


class InMemoryCatalogCache:
    """Thread-safe dict-backed cache.

    Values are deep-copied on the way in and on the way out, so callers may
    mutate what they receive without corrupting the cache.
    """

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], dict[str, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, catalog: str, filename: str) -> dict[str, Any] | None:
        with self._lock:
            payload = self._store.get((catalog, filename))
            if payload is None:
                self.misses += 1
                return None
            self.hits += 1
            return copy.deepcopy(payload)

    def set(self, catalog: str, filename: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self._store[(catalog, filename)] = copy.deepcopy(payload)

    def invalidate(self, catalog: str, filename: str) -> None:
        with self._lock:
            self._store.pop((catalog, filename), None)

    def invalidate_type(self, catalog: str) -> None:
        with self._lock:
            for key in [k for k in self._store if k[0] == catalog]:
                del self._store[key]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
