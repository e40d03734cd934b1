"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the in-process cache for another backend
- Unit testing the HTTP layer with a fixed catalog
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .catalog_provider import CatalogProvider

__all__ = [
    "CacheStore",
    "CatalogProvider",
]
