"""HTTP handlers for recommendations."""

import httpx
from fastapi import HTTPException, status

from anime_tracker.dto import RecommendationItem, RecommendationResponse
from anime_tracker.entities import RecommendationEntity, User
from anime_tracker.errors import UpstreamError
from anime_tracker.services import RecommendationService, WatchlistService


def _to_response(items: list[RecommendationEntity]) -> RecommendationResponse:
    return RecommendationResponse(items=[RecommendationItem.from_entity(item) for item in items])


class RecommendationHandler:
    """HTTP handlers for personalized and preview recommendations."""

    def __init__(
        self,
        recommendation_service: RecommendationService,
        watchlist_service: WatchlistService,
    ) -> None:
        self._recommendations = recommendation_service
        self._watchlist = watchlist_service

    async def personalized(self, user: User) -> RecommendationResponse:
        """Handle GET /recommendations/personalized requests.

        Raises:
            HTTPException: 502 if the catalog is unavailable
        """
        watchlist = self._watchlist.list_entries(user.id)
        try:
            items = await self._recommendations.personalized(watchlist)
        except (UpstreamError, httpx.HTTPError) as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Recommendations unavailable: {e}",
            ) from e
        return _to_response(items)

    async def preview(self) -> RecommendationResponse:
        """Handle GET /recommendations/preview requests."""
        try:
            items = await self._recommendations.preview()
        except (UpstreamError, httpx.HTTPError) as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Recommendations unavailable: {e}",
            ) from e
        return _to_response(items)
