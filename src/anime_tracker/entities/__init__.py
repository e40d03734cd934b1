"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .anime import Anime, CatalogQuery, CatalogSort
from .cache_entry import CacheEntry
from .recommendation import RecommendationEntity
from .user import User
from .watchlist_entry import AnimeStatus, WatchlistEntry

__all__ = [
    "Anime",
    "AnimeStatus",
    "CacheEntry",
    "CatalogQuery",
    "CatalogSort",
    "RecommendationEntity",
    "User",
    "WatchlistEntry",
]
