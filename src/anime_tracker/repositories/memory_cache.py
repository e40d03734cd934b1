"""In-process implementation of CacheStore.

State lives for the lifetime of the process. Entries are never evicted;
a refresh replaces the entry for its key.
"""

import time
from collections.abc import Callable
from typing import Generic, TypeVar

from anime_tracker.entities import CacheEntry

T = TypeVar("T")


class MemoryCacheStore(Generic[T]):
    """Dictionary-backed time-bounded cache.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    The clock is injectable so expiry can be tested without sleeping;
    it defaults to ``time.monotonic`` so wall-clock jumps never make an
    entry fresh again.
    """

    def __init__(self, name: str, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store.

        Args:
            name: Short label used in stats and logs ("search", "anime")
            clock: Returns the current time in seconds
        """
        self._name = name
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None or not entry.is_fresh(self._clock()):
            return None
        return entry.value

    def get_stale(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return entry.value

    def put(self, key: str, value: T, ttl: float) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def get_stats(self) -> dict:
        """Get store statistics.

        Returns:
            Dictionary with the store name, entry count and fresh entry count
        """
        now = self._clock()
        return {
            "name": self._name,
            "total_entries": len(self._entries),
            "fresh_entries": sum(1 for entry in self._entries.values() if entry.is_fresh(now)),
        }

    @property
    def name(self) -> str:
        return self._name
