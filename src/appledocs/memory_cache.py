"""Short-lived in-process response cache.

Least-recently-used eviction with a per-entry TTL. Expired entries are
purged lazily when read. Only the transport client uses this tier; the
on-disk cache remains the source of truth.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Generic, TypeVar

from appledocs.models.index import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


class MemoryCache(Generic[T]):
    def __init__(
        self,
        ttl_seconds: float = 600.0,
        max_size: int = 100,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.timestamp >= self._ttl:
            del self._entries[key]
            return None

        # Mark as most recently used
        self._entries.move_to_end(key)
        return entry.data

    def set(self, key: str, data: T) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._max_size:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
