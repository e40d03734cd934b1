"""Cache storage protocol.

Defines the interface for a time-bounded key/value store used by the
catalog layer. Two independent instances back the catalog: one for
search results and one for single-anime lookups.

Implementations can include:
- In-process dictionary (default, process lifetime only)
- Anything else that can hold a value plus an expiry
"""

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class CacheStore(Protocol[T]):
    """Protocol for time-bounded cache stores.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from anime_tracker.protocols import CacheStore

        store: CacheStore[list[Anime]] = MemoryCacheStore("search")
        ```
    """

    def get(self, key: str) -> T | None:
        """Return the value only while it is still fresh.

        Expired entries are reported as absent but are kept so that
        ``get_stale`` can still serve them.

        Args:
            key: The cache key

        Returns:
            The fresh value, or None
        """
        ...

    def get_stale(self, key: str) -> T | None:
        """Return the value regardless of expiry.

        Args:
            key: The cache key

        Returns:
            The last stored value, or None if the key was never stored
        """
        ...

    def put(self, key: str, value: T, ttl: float) -> None:
        """Store or overwrite a value.

        Args:
            key: The cache key
            value: The value to store
            ttl: Seconds the value stays fresh
        """
        ...
