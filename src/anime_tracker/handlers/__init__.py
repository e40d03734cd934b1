"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .auth_handler import AuthHandler
from .catalog_handler import CatalogHandler
from .recommendation_handler import RecommendationHandler
from .watchlist_handler import WatchlistHandler

__all__ = [
    "AuthHandler",
    "CatalogHandler",
    "RecommendationHandler",
    "WatchlistHandler",
]
