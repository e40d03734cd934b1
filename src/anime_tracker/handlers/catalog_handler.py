"""HTTP handlers for catalog operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import httpx
from fastapi import HTTPException, status

from anime_tracker.dto import AnimeItem, CatalogResponse
from anime_tracker.entities import CatalogQuery, CatalogSort
from anime_tracker.errors import UpstreamError
from anime_tracker.protocols import CatalogProvider


class CatalogHandler:
    """HTTP handlers for catalog search and lookup.

    Example:
        ```python
        catalog = CatalogService.create()
        handler = CatalogHandler(catalog=catalog)

        @app.get("/catalog", response_model=CatalogResponse)
        async def search_catalog(q: str | None = None):
            return await handler.search(text=q)
        ```
    """

    def __init__(self, catalog: CatalogProvider) -> None:
        """Initialize the catalog handler.

        Args:
            catalog: Catalog provider, normally the cached CatalogService (required).
        """
        self._catalog = catalog

    async def search(
        self,
        text: str | None = None,
        genre: str | None = None,
        min_rating: float | None = None,
        max_episodes: int | None = None,
        sort: str | None = None,
    ) -> CatalogResponse:
        """Handle GET /catalog requests.

        Args:
            text: Free-text search; blank means top-rated listing
            genre: Case-insensitive genre filter
            min_rating: Keep anime rated at least this much
            max_episodes: Keep anime with at most this many episodes
            sort: rating_desc, rating_asc or title_asc; anything else is rating_desc

        Returns:
            CatalogResponse with the matching anime

        Raises:
            HTTPException: 502 if the upstream catalog is unavailable
        """
        query = CatalogQuery(
            text=text,
            genre=genre,
            min_rating=min_rating,
            max_episodes=max_episodes,
            sort=CatalogSort.parse(sort),
        )
        try:
            items = await self._catalog.search(query)
        except (UpstreamError, httpx.HTTPError) as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Catalog unavailable: {e}",
            ) from e

        return CatalogResponse(items=[AnimeItem.from_entity(anime) for anime in items])

    async def get_anime(self, anime_id: str) -> AnimeItem:
        """Handle GET /catalog/{anime_id} requests.

        Raises:
            HTTPException: 404 if the anime is unknown or unavailable
        """
        anime = await self._catalog.get_by_id(anime_id)
        if anime is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="anime not found",
            )
        return AnimeItem.from_entity(anime)
