"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from anime_tracker.config import Settings
from anime_tracker.entities import User
from anime_tracker.errors import AuthenticationError
from anime_tracker.handlers import (
    AuthHandler,
    CatalogHandler,
    RecommendationHandler,
    WatchlistHandler,
)
from anime_tracker.protocols import CatalogProvider
from anime_tracker.repositories import (
    JikanClient,
    SqliteUserRepository,
    SqliteWatchlistRepository,
    connect,
    run_migrations,
)
from anime_tracker.services import (
    AuthService,
    CatalogService,
    RecommendationService,
    WatchlistService,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _from_state(request: Request, name: str, label: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{label} not initialized. Check lifespan setup.")
    return value


def get_auth_service(request: Request) -> AuthService:
    """Dependency injection for AuthService from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The AuthService instance from app.state

    Raises:
        RuntimeError: If service is not initialized
    """
    return _from_state(request, "auth_service", "AuthService")


def get_catalog_handler(request: Request) -> CatalogHandler:
    return _from_state(request, "catalog_handler", "CatalogHandler")


def get_auth_handler(request: Request) -> AuthHandler:
    return _from_state(request, "auth_handler", "AuthHandler")


def get_watchlist_handler(request: Request) -> WatchlistHandler:
    return _from_state(request, "watchlist_handler", "WatchlistHandler")


def get_recommendation_handler(request: Request) -> RecommendationHandler:
    return _from_state(request, "recommendation_handler", "RecommendationHandler")


async def get_current_user(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the bearer token in the Authorization header to a user.

    Args:
        auth: Auth service from app.state
        authorization: Raw Authorization header value

    Returns:
        The authenticated user

    Raises:
        HTTPException: 401 if the header is missing, not a bearer token,
            or the token is rejected
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        return auth.authenticate(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def make_lifespan(
    settings: Settings,
    catalog: CatalogProvider | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for one application instance.

    Args:
        settings: Settings the container is built from
        catalog: Catalog to use instead of the cached Jikan service (tests)

    Returns:
        Lifespan callable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize all layers and store them in app.state.

        1. Repositories (SQLite, Jikan client) - created explicitly
        2. Services (business logic) - stored in app.state.*_service
        3. Handlers (HTTP endpoints) - stored in app.state.*_handler

        Cleanup:
            Closes the upstream client and the database, then removes
            everything from app.state
        """
        conn = connect(settings.database_path)
        applied = run_migrations(conn)
        if applied:
            logger.info("Applied migrations: %s", ", ".join(applied))

        auth_service = AuthService.create(
            users=SqliteUserRepository(conn),
            secret=settings.session_secret,
            token_ttl=timedelta(days=settings.session_ttl_days),
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        if settings.seed_demo_user:
            auth_service.ensure_demo_user()

        owned_catalog: CatalogService | None = None
        if catalog is None:
            client = JikanClient.create(
                base_url=settings.jikan_base_url,
                timeout=settings.jikan_timeout,
                max_attempts=settings.jikan_max_attempts,
            )
            owned_catalog = CatalogService.create(
                client=client,
                search_ttl=settings.search_cache_ttl,
                anime_ttl=settings.anime_cache_ttl,
            )
        catalog_service = catalog if catalog is not None else owned_catalog

        watchlist_service = WatchlistService(
            repository=SqliteWatchlistRepository(conn),
            catalog=catalog_service,
        )
        recommendation_service = RecommendationService(catalog=catalog_service)

        # Store in app.state (FastAPI pattern)
        app.state.auth_service = auth_service
        app.state.catalog_service = catalog_service
        app.state.watchlist_service = watchlist_service
        app.state.recommendation_service = recommendation_service
        app.state.auth_handler = AuthHandler(auth_service=auth_service)
        app.state.catalog_handler = CatalogHandler(catalog=catalog_service)
        app.state.watchlist_handler = WatchlistHandler(watchlist_service=watchlist_service)
        app.state.recommendation_handler = RecommendationHandler(
            recommendation_service=recommendation_service,
            watchlist_service=watchlist_service,
        )
        logger.info("Anime API services initialized (database: %s)", settings.database_path)

        try:
            yield
        finally:
            if owned_catalog is not None:
                await owned_catalog.close()
            conn.close()

            for name in (
                "auth_handler",
                "catalog_handler",
                "watchlist_handler",
                "recommendation_handler",
                "auth_service",
                "catalog_service",
                "watchlist_service",
                "recommendation_service",
            ):
                delattr(app.state, name)
            logger.info("Anime API services shut down")

    return lifespan


# Type aliases for cleaner dependency injection
AuthHandlerDep = Annotated[AuthHandler, Depends(get_auth_handler)]
CatalogHandlerDep = Annotated[CatalogHandler, Depends(get_catalog_handler)]
WatchlistHandlerDep = Annotated[WatchlistHandler, Depends(get_watchlist_handler)]
RecommendationHandlerDep = Annotated[RecommendationHandler, Depends(get_recommendation_handler)]
CurrentUser = Annotated[User, Depends(get_current_user)]
