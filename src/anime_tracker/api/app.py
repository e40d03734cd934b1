"""FastAPI application for the anime tracker.

Routes are thin: each one resolves its handler from app.state and
delegates. Run locally with ``python -m anime_tracker.api.app``.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from anime_tracker.api.dependencies import (
    AuthHandlerDep,
    CatalogHandlerDep,
    CurrentUser,
    RecommendationHandlerDep,
    WatchlistHandlerDep,
    make_lifespan,
)
from anime_tracker.config import Settings, get_settings
from anime_tracker.dto import (
    AnimeItem,
    AuthMeResponse,
    AuthSuccessResponse,
    CatalogResponse,
    CreateWatchlistItemRequest,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    RecommendationResponse,
    SignupRequest,
    UpdateWatchlistItemRequest,
    WatchlistItem,
    WatchlistResponse,
)
from anime_tracker.logging_config import setup_logging
from anime_tracker.protocols import CatalogProvider

logger = logging.getLogger(__name__)

SERVICE_NAME = "anime-api"
API_VERSION = "0.1.0"


def create_app(
    settings: Settings | None = None,
    catalog: CatalogProvider | None = None,
) -> FastAPI:
    """Build a configured application.

    Args:
        settings: Settings to use. Defaults to the environment settings.
        catalog: Catalog provider to use instead of the cached Jikan catalog.

    Returns:
        FastAPI application with all routes registered
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Anime Tracker API",
        description="Anime catalog, watchlists and recommendations backed by Jikan",
        version=API_VERSION,
        lifespan=make_lifespan(settings, catalog),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Anime Tracker API",
            "version": API_VERSION,
            "description": "Anime catalog, watchlists and recommendations backed by Jikan",
            "endpoints": {
                "auth": "/auth",
                "catalog": "/catalog",
                "watchlist": "/watchlist",
                "recommendations": "/recommendations",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            service=SERVICE_NAME,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    # Auth

    @app.post(
        "/auth/signup",
        response_model=AuthSuccessResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def signup(request: SignupRequest, handler: AuthHandlerDep) -> AuthSuccessResponse:
        return await handler.signup(request)

    @app.post("/auth/login", response_model=AuthSuccessResponse)
    async def login(request: LoginRequest, handler: AuthHandlerDep) -> AuthSuccessResponse:
        return await handler.login(request)

    @app.get("/auth/me", response_model=AuthMeResponse)
    async def me(user: CurrentUser, handler: AuthHandlerDep) -> AuthMeResponse:
        return await handler.me(user)

    @app.post("/auth/logout", response_model=MessageResponse)
    async def logout(handler: AuthHandlerDep) -> MessageResponse:
        return await handler.logout()

    # Catalog

    @app.get("/catalog", response_model=CatalogResponse)
    async def search_catalog(
        handler: CatalogHandlerDep,
        q: str | None = None,
        genre: str | None = None,
        min_rating: Annotated[float | None, Query(alias="minRating", ge=0, le=10)] = None,
        max_episodes: Annotated[int | None, Query(alias="maxEpisodes", ge=1)] = None,
        sort: str | None = None,
    ) -> CatalogResponse:
        """Search the catalog, or list the top-rated anime when ``q`` is blank."""
        return await handler.search(
            text=q,
            genre=genre,
            min_rating=min_rating,
            max_episodes=max_episodes,
            sort=sort,
        )

    @app.get("/catalog/{anime_id}", response_model=AnimeItem)
    async def get_anime(anime_id: str, handler: CatalogHandlerDep) -> AnimeItem:
        return await handler.get_anime(anime_id)

    # Watchlist

    @app.get("/watchlist", response_model=WatchlistResponse)
    async def list_watchlist(user: CurrentUser, handler: WatchlistHandlerDep) -> WatchlistResponse:
        return await handler.list_items(user)

    @app.post(
        "/watchlist",
        response_model=WatchlistItem,
        status_code=status.HTTP_201_CREATED,
    )
    async def add_to_watchlist(
        request: CreateWatchlistItemRequest,
        user: CurrentUser,
        handler: WatchlistHandlerDep,
    ) -> WatchlistItem:
        return await handler.add_item(user, request)

    @app.patch("/watchlist/{anime_id}", response_model=WatchlistItem)
    async def update_watchlist_item(
        anime_id: str,
        request: UpdateWatchlistItemRequest,
        user: CurrentUser,
        handler: WatchlistHandlerDep,
    ) -> WatchlistItem:
        return await handler.update_item(user, anime_id, request)

    @app.delete("/watchlist/{anime_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def remove_from_watchlist(
        anime_id: str,
        user: CurrentUser,
        handler: WatchlistHandlerDep,
    ) -> None:
        await handler.remove_item(user, anime_id)

    # Recommendations

    @app.get("/recommendations/personalized", response_model=RecommendationResponse)
    async def personalized_recommendations(
        user: CurrentUser,
        handler: RecommendationHandlerDep,
    ) -> RecommendationResponse:
        return await handler.personalized(user)

    @app.get("/recommendations/preview", response_model=RecommendationResponse)
    async def preview_recommendations(handler: RecommendationHandlerDep) -> RecommendationResponse:
        return await handler.preview()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "anime_tracker.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
