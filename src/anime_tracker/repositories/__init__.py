"""Repository layer for data access.

This layer wraps external dependencies (the Jikan HTTP API, SQLite,
in-process memory) behind small classes so services stay free of
transport and storage details.
"""

from .database import connect, run_migrations
from .jikan_client import JikanClient
from .memory_cache import MemoryCacheStore
from .user_repository import SqliteUserRepository
from .watchlist_repository import SqliteWatchlistRepository

__all__ = [
    "connect",
    "run_migrations",
    "JikanClient",
    "MemoryCacheStore",
    "SqliteUserRepository",
    "SqliteWatchlistRepository",
]
