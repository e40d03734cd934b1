"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value together with the monotonic time it stops being fresh.

    Entries are replaced on refresh, never mutated in place.

    Attributes:
        value: The cached value
        expires_at: Clock reading after which the entry is stale
    """

    value: T
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at
