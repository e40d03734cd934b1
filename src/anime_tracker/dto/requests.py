"""Request DTOs for API endpoints."""

from pydantic import Field

from anime_tracker.entities import AnimeStatus

from .base import CamelModel


class SignupRequest(CamelModel):
    """Request DTO for creating an account."""

    email: str = Field(..., description="Email address, stored lowercased", min_length=1)
    username: str = Field(..., description="Display name", min_length=1, max_length=64)
    password: str = Field(..., description="Plain-text password (8+ characters)", min_length=1)


class LoginRequest(CamelModel):
    """Request DTO for logging in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CreateWatchlistItemRequest(CamelModel):
    """Request DTO for adding an anime to the watchlist."""

    anime_id: str = Field(..., description="Catalog id of the anime", min_length=1)
    status: AnimeStatus = Field(AnimeStatus.PLAN, description="Initial watch status")


class UpdateWatchlistItemRequest(CamelModel):
    """Request DTO for a partial watchlist update.

    Only fields present in the body are applied; send ``"rating": null``
    to clear a rating.
    """

    status: AnimeStatus | None = None
    rating: float | None = Field(None, description="Personal rating", ge=0.0, le=10.0)
    notes: str | None = Field(None, description="Free text, truncated to 500 characters")
    progress_episodes: int | None = Field(None, description="Episodes watched", ge=0)

    def changes(self) -> dict:
        """Return only the fields the client actually sent."""
        values = {name: getattr(self, name) for name in self.model_fields_set}
        # status and progress cannot be cleared, so an explicit null means "leave alone"
        for name in ("status", "notes", "progress_episodes"):
            if values.get(name, ...) is None:
                del values[name]
        return values
