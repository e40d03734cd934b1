"""
Tests for the cached, coalesced catalog service.
"""

import asyncio

import httpx
import pytest

from anime_tracker.entities import Anime, CatalogQuery, CatalogSort
from anime_tracker.errors import UpstreamError
from anime_tracker.services import CatalogService
from anime_tracker.services.catalog_service import (
    filter_anime,
    make_search_cache_key,
    sort_anime,
)

SEARCH_TTL = 60
ANIME_TTL = 600


class FakeJikan:
    """Duck-typed JikanClient recording calls, with optional gate and failure."""

    def __init__(self, top=None, searches=None, anime=None) -> None:
        self.top = top or []
        self.searches = searches or {}
        self.anime = anime or {}
        self.calls: list[tuple] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def _respond(self, call: tuple, value):
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return value

    async def top_anime(self):
        return await self._respond(("top",), self.top)

    async def search_anime(self, text):
        return await self._respond(("search", text), self.searches.get(text, []))

    async def get_anime(self, anime_id):
        if anime_id not in self.anime and self.error is None:
            self.calls.append(("anime", anime_id))
            raise UpstreamError(404, f"/anime/{anime_id}")
        return await self._respond(("anime", anime_id), self.anime.get(anime_id))

    async def close(self):
        self.closed = True


@pytest.fixture
def upstream(top_records, record):
    return FakeJikan(
        top=top_records,
        searches={"bebop": [record(1, "Cowboy Bebop", ["Action", "Sci-Fi"], 26, 8.75)]},
        anime={"1": record(1, "Cowboy Bebop", ["Action", "Sci-Fi"], 26, 8.75)},
    )


@pytest.fixture
def catalog(upstream, clock):
    return CatalogService(client=upstream, search_ttl=SEARCH_TTL, anime_ttl=ANIME_TTL, clock=clock)


def titles(items: list[Anime]) -> list[str]:
    return [anime.title for anime in items]


async def test_blank_text_uses_top_listing(catalog, upstream):
    items = await catalog.search(CatalogQuery(text="   "))

    assert upstream.calls == [("top",)]
    assert titles(items)[0] == "Sousou no Frieren"
    assert len(items) == 6


async def test_text_search_uses_trimmed_text(catalog, upstream):
    items = await catalog.search(CatalogQuery(text="  bebop "))

    assert upstream.calls == [("search", "bebop")]
    assert titles(items) == ["Cowboy Bebop"]


async def test_fresh_hit_skips_upstream(catalog, upstream, clock):
    first = await catalog.search(CatalogQuery())
    clock.advance(SEARCH_TTL - 1)
    second = await catalog.search(CatalogQuery())

    assert first == second
    assert len(upstream.calls) == 1


async def test_expired_entry_is_refetched(catalog, upstream, clock):
    await catalog.search(CatalogQuery())
    clock.advance(SEARCH_TTL)
    await catalog.search(CatalogQuery())

    assert len(upstream.calls) == 2


async def test_equivalent_queries_share_a_cache_entry(catalog, upstream):
    await catalog.search(CatalogQuery(text="bebop", genre="Action"))
    await catalog.search(CatalogQuery(text=" bebop", genre=" action "))

    assert len(upstream.calls) == 1


async def test_integer_and_float_filters_share_a_cache_entry(catalog, upstream):
    first = await catalog.search(CatalogQuery(min_rating=8, max_episodes=64))
    second = await catalog.search(CatalogQuery(min_rating=8.0, max_episodes=64.0))

    assert first == second
    assert upstream.calls == [("top",)]


async def test_mutating_search_result_leaves_cache_intact(catalog, upstream):
    first = await catalog.search(CatalogQuery())
    expected = list(first)
    first.clear()

    second = await catalog.search(CatalogQuery())

    assert second == expected
    assert second
    assert upstream.calls == [("top",)]


async def test_mutating_coalesced_result_leaves_other_caller_intact(catalog, upstream):
    a, b = await asyncio.gather(catalog.search(CatalogQuery()), catalog.search(CatalogQuery()))
    a.clear()

    assert b
    assert await catalog.search(CatalogQuery()) == b


async def test_different_filters_are_cached_separately(catalog, upstream):
    await catalog.search(CatalogQuery(genre="drama"))
    await catalog.search(CatalogQuery(genre="comedy"))

    assert upstream.calls == [("top",), ("top",)]


async def test_concurrent_searches_are_coalesced(catalog, upstream):
    upstream.gate = asyncio.Event()

    waiters = [asyncio.create_task(catalog.search(CatalogQuery(genre="drama"))) for _ in range(10)]
    await asyncio.sleep(0)
    upstream.gate.set()
    results = await asyncio.gather(*waiters)

    assert upstream.calls == [("top",)]
    assert all(result == results[0] for result in results)
    assert catalog.get_stats()["search_in_flight"] == 0


async def test_concurrent_failures_are_shared(catalog, upstream, upstream_down):
    upstream.gate = asyncio.Event()
    upstream.error = upstream_down

    waiters = [asyncio.create_task(catalog.search(CatalogQuery())) for _ in range(4)]
    await asyncio.sleep(0)
    upstream.gate.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert len(upstream.calls) == 1
    assert all(result is upstream_down for result in results)


async def test_search_failure_without_cache_raises(catalog, upstream, upstream_down):
    upstream.error = upstream_down

    with pytest.raises(UpstreamError):
        await catalog.search(CatalogQuery())


async def test_stale_search_served_when_upstream_fails(catalog, upstream, clock, upstream_down):
    original = await catalog.search(CatalogQuery(genre="drama"))
    clock.advance(SEARCH_TTL * 10)
    upstream.error = upstream_down

    degraded = await catalog.search(CatalogQuery(genre="drama"))

    assert degraded == original
    # The stale value is not re-stored, so the next call tries upstream again
    await catalog.search(CatalogQuery(genre="drama"))
    assert len(upstream.calls) == 3


async def test_transport_errors_fall_back_to_stale(catalog, upstream, clock):
    original = await catalog.search(CatalogQuery())
    clock.advance(SEARCH_TTL)
    upstream.error = httpx.ConnectTimeout("timed out")

    assert await catalog.search(CatalogQuery()) == original


async def test_filters_apply_to_fetched_results(catalog):
    items = await catalog.search(CatalogQuery(genre="ACTION", min_rating=9.07, max_episodes=64))

    assert titles(items) == ["Fullmetal Alchemist: Brotherhood"]


async def test_sort_orders(catalog):
    by_title = await catalog.search(CatalogQuery(sort=CatalogSort.TITLE_ASC))
    by_rating = await catalog.search(CatalogQuery(sort=CatalogSort.RATING_ASC))

    assert titles(by_title) == sorted(titles(by_title), key=str.casefold)
    assert titles(by_rating)[0] == "Mushishi"


def test_filter_boundaries_are_inclusive(top_anime):
    items = filter_anime(top_anime, CatalogQuery(min_rating=9.1, max_episodes=28))

    assert titles(items) == ["Sousou no Frieren"]


def test_rating_ties_keep_upstream_order():
    items = [
        Anime(id="1", title="B", genres=(), episodes=12, rating=8.0),
        Anime(id="2", title="A", genres=(), episodes=12, rating=8.0),
        Anime(id="3", title="C", genres=(), episodes=12, rating=9.0),
    ]

    assert [a.id for a in sort_anime(items, CatalogSort.RATING_DESC)] == ["3", "1", "2"]
    assert [a.id for a in sort_anime(items, CatalogSort.RATING_ASC)] == ["1", "2", "3"]


def test_invalid_sort_falls_back_to_rating_desc():
    assert CatalogSort.parse("popularity") == CatalogSort.RATING_DESC
    assert CatalogSort.parse(None) == CatalogSort.RATING_DESC
    assert CatalogSort.parse("title_asc") == CatalogSort.TITLE_ASC


def test_cache_key_is_canonical():
    a = make_search_cache_key(CatalogQuery(text=" frieren ", genre="Drama", min_rating=8.0))
    b = make_search_cache_key(CatalogQuery(text="frieren", genre="drama", min_rating=8.0))
    c = make_search_cache_key(CatalogQuery(text="frieren", genre="drama", min_rating=8.5))

    assert a == b
    assert a != c


def test_cache_key_ignores_numeric_spelling():
    assert make_search_cache_key(CatalogQuery(min_rating=8)) == make_search_cache_key(
        CatalogQuery(min_rating=8.0)
    )
    assert make_search_cache_key(CatalogQuery(max_episodes=25)) == make_search_cache_key(
        CatalogQuery(max_episodes=25.0)
    )
    assert make_search_cache_key(CatalogQuery(max_episodes=25)) != make_search_cache_key(
        CatalogQuery(max_episodes=26)
    )


async def test_get_by_id_caches_lookup(catalog, upstream, clock):
    anime = await catalog.get_by_id("1")
    clock.advance(ANIME_TTL - 1)
    again = await catalog.get_by_id("1")

    assert anime is not None
    assert anime.title == "Cowboy Bebop"
    assert again == anime
    assert upstream.calls == [("anime", "1")]


@pytest.mark.parametrize("anime_id", ["", "abc", "12a", "-1", "1.5", "١٢٣", "５", "123\n"])
async def test_get_by_id_rejects_non_numeric_ids(catalog, upstream, anime_id):
    assert await catalog.get_by_id(anime_id) is None
    assert upstream.calls == []


async def test_get_by_id_failure_returns_none(catalog, upstream):
    assert await catalog.get_by_id("424242") is None
    assert upstream.calls == [("anime", "424242")]


async def test_get_by_id_serves_stale_on_failure(catalog, upstream, clock, upstream_down):
    original = await catalog.get_by_id("1")
    clock.advance(ANIME_TTL)
    upstream.error = upstream_down

    assert await catalog.get_by_id("1") == original


async def test_concurrent_lookups_are_coalesced(catalog, upstream):
    upstream.gate = asyncio.Event()

    waiters = [asyncio.create_task(catalog.get_by_id("1")) for _ in range(3)]
    await asyncio.sleep(0)
    upstream.gate.set()
    results = await asyncio.gather(*waiters)

    assert upstream.calls == [("anime", "1")]
    assert all(result == results[0] for result in results)


async def test_end_to_end_retry_through_jikan_client(make_jikan_client, sleeps, clock, top_records):
    responses = [
        httpx.Response(429, headers={"Retry-After": "3"}),
        httpx.Response(200, json={"data": top_records}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    catalog = CatalogService(client=make_jikan_client(handler), clock=clock)
    items = await catalog.search(CatalogQuery(max_episodes=24))

    assert titles(items) == ["Steins;Gate", "Bocchi the Rock!"]
    assert sleeps.delays == [3.0]
    await catalog.close()


async def test_close_closes_client(catalog, upstream):
    await catalog.close()

    assert upstream.closed
