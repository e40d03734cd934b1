"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on repositories and protocols, never on HTTP types.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from anime_tracker.services import CatalogService

    catalog = CatalogService.create()
    results = await catalog.search(CatalogQuery(text="frieren"))
    ```
"""

from .auth_service import AuthService
from .catalog_service import CatalogService
from .coalescer import RequestCoalescer
from .normalizer import normalize_anime
from .recommendation_service import RecommendationService
from .watchlist_service import WatchlistService

__all__ = [
    "AuthService",
    "CatalogService",
    "RecommendationService",
    "RequestCoalescer",
    "WatchlistService",
    "normalize_anime",
]
