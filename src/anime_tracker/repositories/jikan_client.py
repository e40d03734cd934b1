"""Jikan (MyAnimeList) HTTP client with bounded retries.

Jikan is rate limited and occasionally returns 5xx under load, so every
request goes through ``fetch_json``:

- at most ``max_attempts`` attempts (3 by default)
- 429 waits for the ``Retry-After`` hint (whole seconds), or 1 second
- 5xx waits 0.5s, 1.0s, ... (linear in the attempt index)
- any other non-success status fails at once
- transport errors (DNS, connection refused, timeouts) are not retried

Endpoints used:
- GET /anime?q=<text>&limit=25&page=1&sfw=true
- GET /top/anime?order_by=score&sort=desc&limit=25&page=1&sfw=true
- GET /anime/{id}
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from anime_tracker.config import settings
from anime_tracker.errors import UpstreamError

logger = logging.getLogger(__name__)

PAGE_SIZE = 25
DEFAULT_RETRY_AFTER_SECONDS = 1.0
SERVER_ERROR_BACKOFF_SECONDS = 0.5


def parse_retry_after(value: str | None) -> float:
    """Convert a Retry-After header into a wait in seconds.

    Only positive integers are honoured; anything else (missing, HTTP
    dates, garbage, zero) falls back to one second.
    """
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    if seconds > 0:
        return float(seconds)
    return DEFAULT_RETRY_AFTER_SECONDS


def is_retriable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class JikanClient:
    """Async client for the Jikan v4 REST API.

    Example:
        ```python
        client = JikanClient.create()
        payload = await client.top_anime()
        print(len(payload["data"]))  # up to 25
        await client.close()
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the Jikan client.

        Args:
            base_url: Jikan API base URL. Defaults to settings.jikan_base_url.
            timeout: Per-request timeout in seconds. Defaults to settings.
            max_attempts: Attempts per request, retries included. Defaults to settings.
            http_client: Pre-built httpx client (tests pass one with a MockTransport).
            sleep: Coroutine used to wait between attempts.
        """
        self._base_url = (base_url or settings.jikan_base_url).rstrip("/")
        self._timeout = timeout or settings.jikan_timeout
        self._max_attempts = max_attempts or settings.jikan_max_attempts
        self._client = http_client
        self._sleep = sleep

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
    ) -> "JikanClient":
        """Factory method to create JikanClient with defaults.

        Args:
            base_url: API base URL. If None, uses settings.
            timeout: Request timeout in seconds. If None, uses settings.
            max_attempts: Attempts per request. If None, uses settings.

        Returns:
            Configured JikanClient
        """
        return cls(base_url=base_url, timeout=timeout, max_attempts=max_attempts)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            )
        return self._client

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_json(self, url: str) -> Any:
        """GET a URL and return its parsed JSON body, retrying transient failures.

        Args:
            url: Absolute URL to request

        Returns:
            The decoded JSON payload of the first successful response

        Raises:
            UpstreamError: On a non-retriable status, or when every attempt failed
            httpx.HTTPError: On transport failures (not retried)
        """
        last_status = 500

        for attempt in range(self._max_attempts):
            response = await self.client.get(url, headers={"Accept": "application/json"})

            if response.is_success:
                return response.json()

            last_status = response.status_code
            if not is_retriable(last_status) or attempt == self._max_attempts - 1:
                raise UpstreamError(last_status, url)

            if last_status == 429:
                delay = parse_retry_after(response.headers.get("Retry-After"))
            else:
                delay = SERVER_ERROR_BACKOFF_SECONDS * (attempt + 1)

            logger.warning(
                "Jikan returned %s for %s, retrying in %.1fs (attempt %d/%d)",
                last_status,
                url,
                delay,
                attempt + 1,
                self._max_attempts,
            )
            await self._sleep(delay)

        raise UpstreamError(last_status, url)

    def search_url(self, text: str) -> str:
        params = httpx.QueryParams(
            {"q": text, "limit": PAGE_SIZE, "page": 1, "sfw": "true"}
        )
        return f"{self._base_url}/anime?{params}"

    def top_url(self) -> str:
        params = httpx.QueryParams(
            {
                "order_by": "score",
                "sort": "desc",
                "limit": PAGE_SIZE,
                "page": 1,
                "sfw": "true",
            }
        )
        return f"{self._base_url}/top/anime?{params}"

    def anime_url(self, anime_id: str) -> str:
        return f"{self._base_url}/anime/{anime_id}"

    async def search_anime(self, text: str) -> list[dict[str, Any]]:
        """Full-text search, first page only.

        Args:
            text: Search text (already trimmed, non-empty)

        Returns:
            Raw Jikan anime records
        """
        payload = await self.fetch_json(self.search_url(text))
        return payload.get("data") or []

    async def top_anime(self) -> list[dict[str, Any]]:
        """Top-rated listing ordered by score, first page only."""
        payload = await self.fetch_json(self.top_url())
        return payload.get("data") or []

    async def get_anime(self, anime_id: str) -> dict[str, Any]:
        """Fetch one anime record by its numeric MyAnimeList id."""
        payload = await self.fetch_json(self.anime_url(anime_id))
        return payload["data"]

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
