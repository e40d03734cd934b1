"""Authentication service: signup, login and stateless session tokens.

Passwords are hashed with bcrypt; sessions are HS256 JWTs carrying the
user id in ``sub`` and the email in a custom claim. Logging out is a
client-side concern since tokens are not stored.
"""

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from anime_tracker.config import settings
from anime_tracker.entities import User
from anime_tracker.errors import AuthenticationError, ConflictError
from anime_tracker.repositories import SqliteUserRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72
JWT_ALGORITHM = "HS256"

DEMO_EMAIL = "demo@anime.app"
DEMO_USERNAME = "demo_user"
DEMO_PASSWORD = "password123"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """User registration, credential checks and session tokens.

    Example:
        ```python
        auth = AuthService.create(users=SqliteUserRepository(conn))
        token, user = await auth.signup("me@example.com", "me", "hunter22!")
        assert auth.authenticate(token).id == user.id
        ```
    """

    def __init__(
        self,
        users: SqliteUserRepository,
        secret: str | None = None,
        token_ttl: timedelta | None = None,
        bcrypt_rounds: int | None = None,
    ) -> None:
        """Initialize the auth service.

        Args:
            users: User repository (required).
            secret: HMAC secret for session tokens. Defaults to settings.
            token_ttl: Session lifetime. Defaults to settings.session_ttl_days.
            bcrypt_rounds: bcrypt cost factor. Defaults to settings.
        """
        self._users = users
        self._secret = secret or settings.session_secret
        self._token_ttl = token_ttl or timedelta(days=settings.session_ttl_days)
        self._rounds = bcrypt_rounds or settings.bcrypt_rounds

    @classmethod
    def create(
        cls,
        users: SqliteUserRepository,
        secret: str | None = None,
        token_ttl: timedelta | None = None,
        bcrypt_rounds: int | None = None,
    ) -> "AuthService":
        """Factory method to create AuthService with defaults from settings."""
        return cls(users=users, secret=secret, token_ttl=token_ttl, bcrypt_rounds=bcrypt_rounds)

    def hash_password(self, password: str) -> str:
        secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(secret, password_hash.encode("ascii"))
        except ValueError:
            # Malformed stored hash
            return False

    async def signup(self, email: str, username: str, password: str) -> tuple[str, User]:
        """Register a new user and open a session.

        Args:
            email: Email address (trimmed and lowercased)
            username: Display name (trimmed)
            password: Plain-text password, at least 8 characters

        Returns:
            Tuple of (session token, stored user)

        Raises:
            ValueError: If a field is missing or malformed
            ConflictError: If the email is already registered
        """
        email = normalize_email(email)
        username = username.strip()
        if not email or not username or not password:
            raise ValueError("email, username, and password are required")
        if not is_valid_email(email):
            raise ValueError("invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self._users.find_by_email(email) is not None:
            raise ConflictError("email is already registered")

        # bcrypt is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.hash_password, password)
        user = self._users.create(email=email, username=username, password_hash=password_hash)
        logger.info("Registered user %s", user.id)
        return self.issue_token(user), user

    async def login(self, email: str, password: str) -> tuple[str, User]:
        """Check credentials and open a session.

        Raises:
            ValueError: If the email is malformed
            AuthenticationError: If the user is unknown or the password is wrong
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise ValueError("invalid email format")

        user = self._users.find_by_email(email)
        if user is None:
            raise AuthenticationError("invalid credentials")

        if not await asyncio.to_thread(self.verify_password, password, user.password_hash):
            raise AuthenticationError("invalid credentials")

        return self.issue_token(user), user

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "email": user.email,
            "iat": now,
            "exp": now + self._token_ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def authenticate(self, token: str) -> User:
        """Resolve a session token to its user.

        Args:
            token: Bearer token from the Authorization header

        Returns:
            The stored user

        Raises:
            AuthenticationError: If the token is invalid, expired or its user is gone
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid or expired token") from e

        if not isinstance(claims.get("sub"), str) or not isinstance(claims.get("email"), str):
            raise AuthenticationError("Invalid or expired token")

        user = self._users.find_by_id(claims["sub"])
        if user is None:
            raise AuthenticationError("Session user not found")
        return user

    def ensure_demo_user(self) -> bool:
        """Create the demo account if it does not exist yet.

        Returns:
            True if the account was created by this call
        """
        if self._users.find_by_email(DEMO_EMAIL) is not None:
            return False
        self._users.create(
            email=DEMO_EMAIL,
            username=DEMO_USERNAME,
            password_hash=self.hash_password(DEMO_PASSWORD),
        )
        logger.info("Seeded demo user %s", DEMO_EMAIL)
        return True
