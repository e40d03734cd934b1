"""HTTP handlers for watchlist operations."""

from fastapi import HTTPException, status

from anime_tracker.dto import (
    CreateWatchlistItemRequest,
    UpdateWatchlistItemRequest,
    WatchlistItem,
    WatchlistResponse,
)
from anime_tracker.entities import User
from anime_tracker.errors import ConflictError, NotFoundError
from anime_tracker.services import WatchlistService


class WatchlistHandler:
    """HTTP handlers for the signed-in user's watchlist.

    Every method receives the already-authenticated user; token checks
    live in the API dependencies.
    """

    def __init__(self, watchlist_service: WatchlistService) -> None:
        """Initialize the watchlist handler.

        Args:
            watchlist_service: The watchlist service for business logic (required).
        """
        self._watchlist = watchlist_service

    async def list_items(self, user: User) -> WatchlistResponse:
        """Handle GET /watchlist requests."""
        entries = self._watchlist.list_entries(user.id)
        return WatchlistResponse(items=[WatchlistItem.from_entity(entry) for entry in entries])

    async def add_item(self, user: User, request: CreateWatchlistItemRequest) -> WatchlistItem:
        """Handle POST /watchlist requests.

        Args:
            user: Owner of the watchlist
            request: Anime id and initial status

        Returns:
            The created entry

        Raises:
            HTTPException: 400 on a blank id, 404 if the anime is unknown,
                409 if it is already on the watchlist
        """
        try:
            entry = await self._watchlist.add(
                user_id=user.id,
                anime_id=request.anime_id,
                status=request.status,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
        except ConflictError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

        return WatchlistItem.from_entity(entry)

    async def update_item(
        self,
        user: User,
        anime_id: str,
        request: UpdateWatchlistItemRequest,
    ) -> WatchlistItem:
        """Handle PATCH /watchlist/{anime_id} requests.

        Raises:
            HTTPException: 400 on out-of-range values, 404 if the entry is missing
        """
        try:
            entry = self._watchlist.update(user.id, anime_id, request.changes())
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

        return WatchlistItem.from_entity(entry)

    async def remove_item(self, user: User, anime_id: str) -> None:
        """Handle DELETE /watchlist/{anime_id} requests."""
        try:
            self._watchlist.remove(user.id, anime_id)
        except NotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
