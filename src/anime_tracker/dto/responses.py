"""Response DTOs for API endpoints."""

from typing import Literal

from pydantic import Field

from anime_tracker.entities import (
    Anime,
    AnimeStatus,
    RecommendationEntity,
    User,
    WatchlistEntry,
)

from .base import CamelModel


class AnimeItem(CamelModel):
    """Single catalog anime."""

    id: str = Field(..., description="MyAnimeList id")
    title: str
    genres: list[str] = Field(default_factory=list)
    episodes: int = Field(..., ge=0)
    rating: float = Field(..., description="Public score, 0 when unknown", ge=0.0, le=10.0)

    @classmethod
    def from_entity(cls, anime: Anime) -> "AnimeItem":
        return cls(
            id=anime.id,
            title=anime.title,
            genres=list(anime.genres),
            episodes=anime.episodes,
            rating=anime.rating,
        )


class CatalogResponse(CamelModel):
    """Response DTO for catalog searches."""

    items: list[AnimeItem] = Field(default_factory=list)


class UserPublic(CamelModel):
    """Public view of a user (no password hash)."""

    id: str
    email: str
    username: str
    created_at: str

    @classmethod
    def from_entity(cls, user: User) -> "UserPublic":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
        )


class AuthSuccessResponse(CamelModel):
    """Response DTO for signup and login."""

    token: str = Field(..., description="Bearer token for the Authorization header")
    user: UserPublic


class AuthMeResponse(CamelModel):
    user: UserPublic


class WatchlistItem(CamelModel):
    """Single watchlist entry."""

    user_id: str
    anime_id: str
    anime_title: str
    anime_genres: list[str] = Field(default_factory=list)
    anime_episodes: int
    status: AnimeStatus
    rating: float | None = None
    notes: str = ""
    progress_episodes: int = 0
    updated_at: str

    @classmethod
    def from_entity(cls, entry: WatchlistEntry) -> "WatchlistItem":
        return cls(
            user_id=entry.user_id,
            anime_id=entry.anime_id,
            anime_title=entry.anime_title,
            anime_genres=list(entry.anime_genres),
            anime_episodes=entry.anime_episodes,
            status=entry.status,
            rating=entry.rating,
            notes=entry.notes,
            progress_episodes=entry.progress_episodes,
            updated_at=entry.updated_at,
        )


class WatchlistResponse(CamelModel):
    items: list[WatchlistItem] = Field(default_factory=list)


class RecommendationItem(CamelModel):
    """Single recommendation with its explanation."""

    anime_id: str
    anime_title: str
    score: float
    reason: str

    @classmethod
    def from_entity(cls, item: RecommendationEntity) -> "RecommendationItem":
        return cls(
            anime_id=item.anime_id,
            anime_title=item.anime_title,
            score=item.score,
            reason=item.reason,
        )


class RecommendationResponse(CamelModel):
    items: list[RecommendationItem] = Field(default_factory=list)


class HealthResponse(CamelModel):
    """Response DTO for health check."""

    status: Literal["ok"] = "ok"
    service: str = Field(..., description="Service name")
    timestamp: str = Field(..., description="Current server time (ISO 8601, UTC)")


class MessageResponse(CamelModel):
    message: str
