"""HTTP handlers for account and session operations."""

from fastapi import HTTPException, status

from anime_tracker.dto import (
    AuthMeResponse,
    AuthSuccessResponse,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    UserPublic,
)
from anime_tracker.entities import User
from anime_tracker.errors import AuthenticationError, ConflictError
from anime_tracker.services import AuthService


class AuthHandler:
    """HTTP handlers for signup, login and the current session."""

    def __init__(self, auth_service: AuthService) -> None:
        self._auth = auth_service

    async def signup(self, request: SignupRequest) -> AuthSuccessResponse:
        """Handle POST /auth/signup requests.

        Raises:
            HTTPException: 400 on invalid input, 409 if the email is taken
        """
        try:
            token, user = await self._auth.signup(
                email=request.email,
                username=request.username,
                password=request.password,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except ConflictError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

        return AuthSuccessResponse(token=token, user=UserPublic.from_entity(user))

    async def login(self, request: LoginRequest) -> AuthSuccessResponse:
        """Handle POST /auth/login requests.

        Raises:
            HTTPException: 400 on a malformed email, 401 on bad credentials
        """
        try:
            token, user = await self._auth.login(email=request.email, password=request.password)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except AuthenticationError as e:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

        return AuthSuccessResponse(token=token, user=UserPublic.from_entity(user))

    async def me(self, user: User) -> AuthMeResponse:
        return AuthMeResponse(user=UserPublic.from_entity(user))

    async def logout(self) -> MessageResponse:
        # Tokens are not stored server side; the client drops its copy
        return MessageResponse(message="logged out")
