"""Domain errors raised by services and repositories.

Handlers translate these into HTTP status codes; nothing below the
handler layer knows about HTTP responses.
"""


class AnimeTrackerError(Exception):
    """Base class for all application errors."""


class UpstreamError(AnimeTrackerError):
    """The upstream catalog answered with a non-success status.

    Attributes:
        status: Last HTTP status code observed from the upstream service
        url: The requested URL
    """

    def __init__(self, status: int, url: str = "") -> None:
        self.status = status
        self.url = url
        super().__init__(f"Jikan request failed: {status}")


class ConflictError(AnimeTrackerError):
    """The resource already exists (duplicate email, duplicate watchlist entry)."""


class AuthenticationError(AnimeTrackerError):
    """Credentials or session token were rejected."""


class NotFoundError(AnimeTrackerError):
    """The requested anime or watchlist entry does not exist."""
