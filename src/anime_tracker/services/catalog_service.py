"""Catalog service: cached, coalesced access to the Jikan catalog.

This service sits between the HTTP layer and Jikan. For every request it:
1. Looks for a fresh cache entry and returns it without any network call
2. Otherwise joins or starts the single in-flight fetch for that key
3. Normalizes, filters and sorts the upstream records
4. Stores the result with a TTL (60s for searches, 10 minutes per anime)
5. On failure, serves the last stored value even if it has expired

Searches re-raise the failure when nothing was ever cached; single-anime
lookups degrade to None instead.
"""

import json
import logging
import re
import time
from collections.abc import Callable

from anime_tracker.config import settings
from anime_tracker.entities import Anime, CatalogQuery, CatalogSort
from anime_tracker.protocols import CacheStore
from anime_tracker.repositories import JikanClient, MemoryCacheStore
from anime_tracker.services.coalescer import RequestCoalescer
from anime_tracker.services.normalizer import normalize_anime

logger = logging.getLogger(__name__)

# ASCII digits only, matched against the whole id
NUMERIC_ID = re.compile(r"[0-9]+")


def _as_number(value: float | None) -> float | None:
    return None if value is None else float(value)


def make_search_cache_key(query: CatalogQuery) -> str:
    """Build the canonical cache key for a search.

    Text and genre are trimmed, genre is lowercased (the genre filter is
    case-insensitive), numeric filters are written as floats (8 and 8.0
    are the same filter) and the JSON keys are sorted, so equal queries map to
    the same key no matter how they were spelled out.
    """
    text = (query.text or "").strip()
    genre = (query.genre or "").strip().lower()
    return json.dumps(
        {
            "q": text,
            "genre": genre,
            "minRating": _as_number(query.min_rating),
            "maxEpisodes": _as_number(query.max_episodes),
            "sort": CatalogSort(query.sort).value,
        },
        sort_keys=True,
    )


def filter_anime(items: list[Anime], query: CatalogQuery) -> list[Anime]:
    """Apply the genre, minimum rating and maximum episode filters, in that order."""
    genre = (query.genre or "").strip().lower()
    if genre:
        items = [anime for anime in items if any(g.lower() == genre for g in anime.genres)]

    if query.min_rating is not None:
        items = [anime for anime in items if anime.rating >= query.min_rating]

    if query.max_episodes is not None:
        items = [anime for anime in items if anime.episodes <= query.max_episodes]

    return items


def sort_anime(items: list[Anime], sort: CatalogSort) -> list[Anime]:
    """Sort a copy of ``items``. Ties keep their upstream order."""
    if sort == CatalogSort.RATING_ASC:
        return sorted(items, key=lambda anime: anime.rating)
    if sort == CatalogSort.TITLE_ASC:
        return sorted(items, key=lambda anime: anime.title.casefold())
    return sorted(items, key=lambda anime: anime.rating, reverse=True)


class CatalogService:
    """Cached front for the Jikan catalog.

    One instance is built at application start and owns both caches and
    both in-flight maps for the lifetime of the process.

    Example:
        ```python
        catalog = CatalogService.create()

        top = await catalog.search(CatalogQuery(genre="action", sort=CatalogSort.TITLE_ASC))
        frieren = await catalog.get_by_id("52991")
        ```
    """

    def __init__(
        self,
        client: JikanClient,
        search_ttl: float | None = None,
        anime_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        search_cache: CacheStore[list[Anime]] | None = None,
        anime_cache: CacheStore[Anime] | None = None,
    ) -> None:
        """Initialize the catalog service.

        Args:
            client: Jikan client used for upstream fetches (required).
            search_ttl: Freshness of search results in seconds. Defaults to settings.
            anime_ttl: Freshness of single-anime lookups in seconds. Defaults to settings.
            clock: Time source for cache expiry.
            search_cache: Store for search results. Defaults to an in-memory store.
            anime_cache: Store for single anime. Defaults to an in-memory store.
        """
        self._client = client
        self._search_ttl = search_ttl or settings.search_cache_ttl
        self._anime_ttl = anime_ttl or settings.anime_cache_ttl
        self._search_cache = search_cache or MemoryCacheStore("search", clock=clock)
        self._anime_cache = anime_cache or MemoryCacheStore("anime", clock=clock)
        self._search_flights: RequestCoalescer[list[Anime]] = RequestCoalescer("search")
        self._anime_flights: RequestCoalescer[Anime | None] = RequestCoalescer("anime")

    @classmethod
    def create(
        cls,
        client: JikanClient | None = None,
        search_ttl: float | None = None,
        anime_ttl: float | None = None,
    ) -> "CatalogService":
        """Factory method to create CatalogService with defaults.

        Args:
            client: Jikan client. If None, creates one from settings.
            search_ttl: Search cache TTL. If None, uses settings.
            anime_ttl: Anime cache TTL. If None, uses settings.

        Returns:
            Configured CatalogService
        """
        return cls(
            client=client or JikanClient.create(),
            search_ttl=search_ttl,
            anime_ttl=anime_ttl,
        )

    async def search(self, query: CatalogQuery) -> list[Anime]:
        """Search the catalog.

        Args:
            query: Text, filters and sort order

        Returns:
            Matching anime, filtered and sorted

        Raises:
            UpstreamError: If Jikan fails and no earlier result is cached
            httpx.HTTPError: On transport failures with nothing cached
        """
        key = make_search_cache_key(query)
        cached = self._search_cache.get(key)
        if cached is not None:
            # Callers get their own list; the cached one stays untouched
            return list(cached)

        async def produce() -> list[Anime]:
            try:
                result = await self._fetch_search(query)
            except Exception:
                stale = self._search_cache.get_stale(key)
                if stale is None:
                    raise
                logger.warning("Serving stale catalog search after fetch failure: %s", key)
                return stale
            self._search_cache.put(key, result, self._search_ttl)
            return result

        return list(await self._search_flights.run(key, produce))

    async def _fetch_search(self, query: CatalogQuery) -> list[Anime]:
        text = (query.text or "").strip()
        if text:
            records = await self._client.search_anime(text)
        else:
            records = await self._client.top_anime()

        items = [normalize_anime(record) for record in records]
        items = filter_anime(items, query)
        return sort_anime(items, CatalogSort(query.sort))

    async def get_by_id(self, anime_id: str) -> Anime | None:
        """Look up a single anime by its MyAnimeList id.

        Never raises: upstream failures fall back to a stale entry, or None.

        Args:
            anime_id: Numeric id as a string

        Returns:
            The anime, or None if the id is not numeric or nothing is available
        """
        if not NUMERIC_ID.fullmatch(anime_id):
            return None

        cached = self._anime_cache.get(anime_id)
        if cached is not None:
            return cached

        async def produce() -> Anime | None:
            try:
                record = await self._client.get_anime(anime_id)
                anime = normalize_anime(record)
            except Exception as e:
                stale = self._anime_cache.get_stale(anime_id)
                if stale is not None:
                    logger.warning("Serving stale anime %s after fetch failure: %s", anime_id, e)
                    return stale
                logger.warning("Anime %s unavailable: %s", anime_id, e)
                return None
            self._anime_cache.put(anime_id, anime, self._anime_ttl)
            return anime

        return await self._anime_flights.run(anime_id, produce)

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with per-cache entry counts, in-flight counts and TTLs
        """
        stats = {
            "search_ttl": self._search_ttl,
            "anime_ttl": self._anime_ttl,
            "search_in_flight": self._search_flights.in_flight_count,
            "anime_in_flight": self._anime_flights.in_flight_count,
        }
        for cache in (self._search_cache, self._anime_cache):
            if isinstance(cache, MemoryCacheStore):
                stats[f"{cache.name}_cache"] = cache.get_stats()
        return stats

    async def close(self) -> None:
        await self._client.close()

    @property
    def client(self) -> JikanClient:
        """Get the underlying Jikan client (for testing)."""
        return self._client
