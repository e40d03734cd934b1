"""Watchlist domain entities."""

from dataclasses import dataclass
from enum import Enum


class AnimeStatus(str, Enum):
    """Progress state of an anime on a user's watchlist."""

    PLAN = "plan"
    WATCHING = "watching"
    COMPLETED = "completed"
    DROPPED = "dropped"


@dataclass(frozen=True)
class WatchlistEntry:
    """One anime on one user's watchlist.

    Title, genres and episode count are a snapshot of the catalog taken
    when the entry was added, so listing a watchlist never hits upstream.
    """

    user_id: str
    anime_id: str
    anime_title: str
    anime_genres: tuple[str, ...]
    anime_episodes: int
    status: AnimeStatus
    rating: float | None
    notes: str
    progress_episodes: int
    updated_at: str
