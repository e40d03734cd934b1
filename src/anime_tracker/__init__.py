"""Anime Tracker - anime catalog, watchlists and recommendations over Jikan.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, CatalogProvider)
    - repositories: Data access implementations (Jikan, SQLite, memory)
    - services: Business logic (catalog cache, auth, watchlist, recommendations)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from anime_tracker.services import CatalogService

    catalog = CatalogService.create()
    results = await catalog.search(CatalogQuery(genre="drama"))
    ```

For HTTP API:
    ```python
    from anime_tracker.api.app import app, create_app
    ```
"""

from anime_tracker.config import Settings, settings
from anime_tracker.entities import (
    Anime,
    AnimeStatus,
    CatalogQuery,
    CatalogSort,
    User,
    WatchlistEntry,
)
from anime_tracker.errors import (
    AnimeTrackerError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
)
from anime_tracker.protocols import CacheStore, CatalogProvider
from anime_tracker.repositories import JikanClient, MemoryCacheStore
from anime_tracker.services import (
    AuthService,
    CatalogService,
    RecommendationService,
    RequestCoalescer,
    WatchlistService,
)

__all__ = [
    # Configuration
    "Settings",
    "settings",
    # Errors
    "AnimeTrackerError",
    "AuthenticationError",
    "ConflictError",
    "NotFoundError",
    "UpstreamError",
    # Protocols (interfaces)
    "CacheStore",
    "CatalogProvider",
    # Services (business logic)
    "AuthService",
    "CatalogService",
    "RecommendationService",
    "RequestCoalescer",
    "WatchlistService",
    # Repositories (data access)
    "JikanClient",
    "MemoryCacheStore",
    # Entities (domain models)
    "Anime",
    "AnimeStatus",
    "CatalogQuery",
    "CatalogSort",
    "User",
    "WatchlistEntry",
]
