"""Anime catalog domain entities."""

from dataclasses import dataclass
from enum import Enum


class CatalogSort(str, Enum):
    """Sort orders supported by catalog searches."""

    RATING_DESC = "rating_desc"
    RATING_ASC = "rating_asc"
    TITLE_ASC = "title_asc"

    @classmethod
    def parse(cls, value: str | None) -> "CatalogSort":
        """Parse a raw sort value, falling back to rating_desc for unknown input."""
        try:
            return cls(value)
        except ValueError:
            return cls.RATING_DESC


@dataclass(frozen=True)
class Anime:
    """Domain entity for a single catalog title.

    Attributes:
        id: Upstream identifier as a string (MyAnimeList ids are numeric)
        title: Display title
        genres: Genre names in upstream order
        episodes: Episode count, 0 when unknown
        rating: Public score in [0, 10], 0 when unknown
    """

    id: str
    title: str
    genres: tuple[str, ...]
    episodes: int
    rating: float


@dataclass(frozen=True)
class CatalogQuery:
    """Immutable catalog search parameters.

    Only used to build the upstream request, the local post-filters
    and the search cache key.
    """

    text: str | None = None
    genre: str | None = None
    min_rating: float | None = None
    max_episodes: int | None = None
    sort: CatalogSort = CatalogSort.RATING_DESC
