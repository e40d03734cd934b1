"""Watchlist service: per-user CRUD over catalog anime."""

import logging
from typing import Any

from anime_tracker.entities import AnimeStatus, WatchlistEntry
from anime_tracker.errors import ConflictError, NotFoundError
from anime_tracker.protocols import CatalogProvider
from anime_tracker.repositories import SqliteWatchlistRepository

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 500


class WatchlistService:
    """Watchlist business rules.

    Adding an entry resolves the anime through the catalog so only real
    titles can be tracked, and snapshots its title, genres and episode
    count for later listing and recommendations.
    """

    def __init__(self, repository: SqliteWatchlistRepository, catalog: CatalogProvider) -> None:
        self._repository = repository
        self._catalog = catalog

    def list_entries(self, user_id: str) -> list[WatchlistEntry]:
        """Return a user's entries, most recently updated first."""
        return self._repository.list_for_user(user_id)

    def get(self, user_id: str, anime_id: str) -> WatchlistEntry | None:
        return self._repository.get(user_id, anime_id)

    async def add(
        self,
        user_id: str,
        anime_id: str,
        status: AnimeStatus = AnimeStatus.PLAN,
    ) -> WatchlistEntry:
        """Add an anime to a user's watchlist.

        Args:
            user_id: Owner of the watchlist
            anime_id: Catalog id (trimmed)
            status: Initial status, "plan" by default

        Returns:
            The new entry

        Raises:
            ValueError: If anime_id is blank
            NotFoundError: If the catalog does not know the anime
            ConflictError: If the anime is already on the watchlist
        """
        anime_id = anime_id.strip()
        if not anime_id:
            raise ValueError("animeId is required")

        anime = await self._catalog.get_by_id(anime_id)
        if anime is None:
            raise NotFoundError("anime not found in catalog")

        if self._repository.get(user_id, anime_id) is not None:
            raise ConflictError("anime already in watchlist")

        entry = self._repository.add(
            user_id=user_id,
            anime_id=anime.id,
            anime_title=anime.title,
            anime_genres=anime.genres,
            anime_episodes=anime.episodes,
            status=AnimeStatus(status),
        )
        logger.info("User %s added anime %s (%s)", user_id, anime.id, entry.status.value)
        return entry

    def update(self, user_id: str, anime_id: str, changes: dict[str, Any]) -> WatchlistEntry:
        """Apply a partial update to an entry.

        Only the keys present in ``changes`` are touched, so a ``rating`` of
        None clears the rating while a missing ``rating`` leaves it alone.

        Args:
            user_id: Owner of the entry
            anime_id: Catalog id of the entry
            changes: Subset of status, rating, notes, progress_episodes

        Returns:
            The updated entry

        Raises:
            ValueError: If a value is out of range
            NotFoundError: If the entry does not exist
        """
        if self._repository.get(user_id, anime_id) is None:
            raise NotFoundError("watchlist item not found")

        values: dict[str, Any] = {}
        if "status" in changes:
            values["status"] = AnimeStatus(changes["status"])
        if "rating" in changes:
            rating = changes["rating"]
            if rating is not None and not 0 <= rating <= 10:
                raise ValueError("rating must be between 0 and 10")
            values["rating"] = rating
        if "notes" in changes:
            values["notes"] = (changes["notes"] or "").strip()[:MAX_NOTES_LENGTH]
        if "progress_episodes" in changes:
            progress = changes["progress_episodes"]
            if not isinstance(progress, int) or progress < 0:
                raise ValueError("progressEpisodes must be a non-negative integer")
            values["progress_episodes"] = progress

        updated = self._repository.update(user_id, anime_id, values)
        if updated is None:
            raise NotFoundError("watchlist item not found")
        return updated

    def remove(self, user_id: str, anime_id: str) -> None:
        """Delete an entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        if not self._repository.remove(user_id, anime_id):
            raise NotFoundError("watchlist item not found")
