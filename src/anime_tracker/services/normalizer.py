"""Mapping from Jikan records to Anime entities."""

from typing import Any

from anime_tracker.entities import Anime


def normalize_anime(source: dict[str, Any]) -> Anime:
    """Convert one Jikan anime record into an Anime.

    ``mal_id`` becomes a string id, null episode counts and scores become 0,
    and genre objects are flattened to their names.

    Args:
        source: Raw record, e.g. ``{"mal_id": 1, "title": "...", "genres": [{"name": "Action"}],
                "episodes": 26, "score": 8.75}``

    Returns:
        The normalized Anime
    """
    return Anime(
        id=str(source["mal_id"]),
        title=source.get("title") or "",
        genres=tuple(genre["name"] for genre in source.get("genres") or []),
        episodes=source.get("episodes") or 0,
        rating=source.get("score") or 0,
    )
