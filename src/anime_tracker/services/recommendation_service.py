"""Content-based recommendations from watchlist genre preferences.

Scoring:
- each watchlist entry weighs its status (completed 1.3, watching 0.9,
  plan 0.3, dropped -0.8) plus ``(rating - 5) / 5`` when rated
- a genre's preference is the sum of the weights of entries carrying it
- a candidate scores ``rating / 10`` plus the preferences of its genres
"""

from anime_tracker.entities import (
    Anime,
    AnimeStatus,
    CatalogQuery,
    RecommendationEntity,
    WatchlistEntry,
)
from anime_tracker.protocols import CatalogProvider

STATUS_WEIGHTS = {
    AnimeStatus.COMPLETED: 1.3,
    AnimeStatus.WATCHING: 0.9,
    AnimeStatus.PLAN: 0.3,
    AnimeStatus.DROPPED: -0.8,
}

MAX_RECOMMENDATIONS = 8
PREVIEW_SIZE = 3

NO_SIGNAL_REASON = "Strong public rating. Add watchlist activity to improve personalization."
FALLBACK_REASON = "Good overall match from your recent watchlist behavior."
PREVIEW_REASON = "Popular in the community and strong genre overlap"


def build_genre_preferences(watchlist: list[WatchlistEntry]) -> dict[str, float]:
    scores: dict[str, float] = {}
    for entry in watchlist:
        rating_adjustment = 0.0 if entry.rating is None else (entry.rating - 5) / 5
        weight = STATUS_WEIGHTS[AnimeStatus(entry.status)] + rating_adjustment
        for genre in entry.anime_genres:
            scores[genre] = scores.get(genre, 0.0) + weight
    return scores


def explain(anime: Anime, preferences: dict[str, float], has_signals: bool) -> str:
    """Pick the reason shown next to a recommendation."""
    if not has_signals:
        return NO_SIGNAL_REASON

    ranked = sorted(
        ((genre, preferences.get(genre, 0.0)) for genre in anime.genres),
        key=lambda pair: pair[1],
        reverse=True,
    )
    top_genres = [genre for genre, score in ranked if score > 0][:2]
    if top_genres:
        return f"Matches your genre preferences: {' and '.join(top_genres)}."
    return FALLBACK_REASON


def recommend(
    watchlist: list[WatchlistEntry],
    candidates: list[Anime],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[RecommendationEntity]:
    """Score unseen candidates against the watchlist.

    Args:
        watchlist: The user's entries
        candidates: Catalog anime to choose from
        limit: Maximum number of recommendations

    Returns:
        Recommendations, best score first
    """
    seen = {entry.anime_id for entry in watchlist}
    preferences = build_genre_preferences(watchlist)
    has_signals = len(watchlist) > 0

    items = []
    for anime in candidates:
        if anime.id in seen:
            continue
        genre_score = sum(preferences.get(genre, 0.0) for genre in anime.genres)
        items.append(
            RecommendationEntity(
                anime_id=anime.id,
                anime_title=anime.title,
                score=round(anime.rating / 10 + genre_score, 3),
                reason=explain(anime, preferences, has_signals),
            )
        )

    items.sort(key=lambda item: item.score, reverse=True)
    return items[:limit]


class RecommendationService:
    """Builds recommendations from the top-rated catalog."""

    def __init__(self, catalog: CatalogProvider) -> None:
        self._catalog = catalog

    async def personalized(self, watchlist: list[WatchlistEntry]) -> list[RecommendationEntity]:
        """Recommend top-rated anime matching the user's genre preferences.

        Raises:
            UpstreamError: If the catalog is unavailable and nothing is cached
        """
        candidates = await self._catalog.search(CatalogQuery())
        return recommend(watchlist, candidates)

    async def preview(self) -> list[RecommendationEntity]:
        """Generic recommendations for anonymous visitors."""
        candidates = await self._catalog.search(CatalogQuery())
        return [
            RecommendationEntity(
                anime_id=anime.id,
                anime_title=anime.title,
                score=anime.rating,
                reason=PREVIEW_REASON,
            )
            for anime in candidates[:PREVIEW_SIZE]
        ]
