"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    CreateWatchlistItemRequest,
    LoginRequest,
    SignupRequest,
    UpdateWatchlistItemRequest,
)
from .responses import (
    AnimeItem,
    AuthMeResponse,
    AuthSuccessResponse,
    CatalogResponse,
    HealthResponse,
    MessageResponse,
    RecommendationItem,
    RecommendationResponse,
    UserPublic,
    WatchlistItem,
    WatchlistResponse,
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "CreateWatchlistItemRequest",
    "UpdateWatchlistItemRequest",
    "AnimeItem",
    "CatalogResponse",
    "UserPublic",
    "AuthSuccessResponse",
    "AuthMeResponse",
    "WatchlistItem",
    "WatchlistResponse",
    "RecommendationItem",
    "RecommendationResponse",
    "HealthResponse",
    "MessageResponse",
]
