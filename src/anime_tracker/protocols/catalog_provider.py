"""Catalog provider protocol.

This is the whole surface the HTTP layer needs from the catalog:
filtered searches and single-anime lookups. The production
implementation is ``CatalogService``; tests swap in fixed catalogs.
"""

from typing import Protocol, runtime_checkable

from anime_tracker.entities import Anime, CatalogQuery


@runtime_checkable
class CatalogProvider(Protocol):
    """Protocol for anime catalog sources."""

    async def search(self, query: CatalogQuery) -> list[Anime]:
        """Search the catalog.

        Args:
            query: Text, filters and sort order

        Returns:
            Matching anime, sorted as requested

        Raises:
            UpstreamError: If the catalog is unreachable and nothing is cached
        """
        ...

    async def get_by_id(self, anime_id: str) -> Anime | None:
        """Look up a single anime.

        Args:
            anime_id: Catalog identifier

        Returns:
            The anime, or None if unknown or unavailable (never raises)
        """
        ...
