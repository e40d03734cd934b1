"""Shared fixtures: fake time, upstream records and a fake catalog."""

import httpx
import pytest

from anime_tracker.entities import Anime, CatalogQuery, CatalogSort
from anime_tracker.errors import UpstreamError
from anime_tracker.repositories import JikanClient, connect, run_migrations
from anime_tracker.services import normalize_anime
from anime_tracker.services.catalog_service import filter_anime, sort_anime

JIKAN_TEST_URL = "https://jikan.test/v4"


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeCatalog:
    """Fixed in-memory catalog for HTTP tests."""

    def __init__(self, items: list[Anime]) -> None:
        self.items = items
        self.error: Exception | None = None

    async def search(self, query: CatalogQuery) -> list[Anime]:
        if self.error is not None:
            raise self.error
        text = (query.text or "").strip().lower()
        items = [anime for anime in self.items if text in anime.title.lower()]
        return sort_anime(filter_anime(items, query), CatalogSort(query.sort))

    async def get_by_id(self, anime_id: str) -> Anime | None:
        return next((anime for anime in self.items if anime.id == anime_id), None)


def jikan_record(mal_id, title, genres=(), episodes=12, score=8.0) -> dict:
    return {
        "mal_id": mal_id,
        "title": title,
        "genres": [{"mal_id": index, "type": "anime", "name": name} for index, name in enumerate(genres)],
        "episodes": episodes,
        "score": score,
    }


TOP_RECORDS = [
    jikan_record(52991, "Sousou no Frieren", ["Adventure", "Drama", "Fantasy"], 28, 9.3),
    jikan_record(5114, "Fullmetal Alchemist: Brotherhood", ["Action", "Adventure", "Drama", "Fantasy"], 64, 9.1),
    jikan_record(9253, "Steins;Gate", ["Drama", "Sci-Fi", "Suspense"], 24, 9.07),
    jikan_record(28977, "Gintama°", ["Action", "Comedy", "Sci-Fi"], 51, 9.06),
    jikan_record(47917, "Bocchi the Rock!", ["Comedy", "Music"], 12, 8.8),
    jikan_record(457, "Mushishi", ["Adventure", "Mystery", "Slice of Life"], 26, 8.65),
]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def record():
    """Factory for raw Jikan anime records."""
    return jikan_record


@pytest.fixture
def top_records() -> list[dict]:
    return [dict(record) for record in TOP_RECORDS]


@pytest.fixture
def top_anime() -> list[Anime]:
    return [normalize_anime(record) for record in TOP_RECORDS]


@pytest.fixture
def make_jikan_client(sleeps):
    """Build a JikanClient whose HTTP traffic goes to ``handler``."""

    def factory(handler, max_attempts: int = 3) -> JikanClient:
        return JikanClient(
            base_url=JIKAN_TEST_URL,
            max_attempts=max_attempts,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            sleep=sleeps,
        )

    return factory


@pytest.fixture
def fake_catalog(top_anime) -> FakeCatalog:
    return FakeCatalog(top_anime)


@pytest.fixture
def upstream_down() -> UpstreamError:
    return UpstreamError(503, f"{JIKAN_TEST_URL}/top/anime")


@pytest.fixture
def db():
    """Migrated in-memory database."""
    conn = connect(":memory:")
    run_migrations(conn)
    yield conn
    conn.close()
