"""SQLite repository for users."""

import sqlite3
import uuid
from datetime import datetime, timezone

from anime_tracker.entities import User
from anime_tracker.errors import ConflictError


class SqliteUserRepository:
    """User storage backed by the ``users`` table.

    Emails are stored lowercased; lookups lowercase their input too.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @staticmethod
    def _to_entity(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            username=row["username"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
        )

    def find_by_email(self, email: str) -> User | None:
        row = self._conn.execute(
            "SELECT * FROM users WHERE email = ?", (email.lower(),)
        ).fetchone()
        return self._to_entity(row) if row else None

    def find_by_id(self, user_id: str) -> User | None:
        row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._to_entity(row) if row else None

    def create(self, email: str, username: str, password_hash: str) -> User:
        """Insert a new user.

        Args:
            email: Email address (lowercased before storing)
            username: Display name
            password_hash: Opaque hash produced by the auth service

        Returns:
            The stored user

        Raises:
            ConflictError: If the email is already registered
        """
        user = User(
            id=str(uuid.uuid4()),
            email=email.lower(),
            username=username,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        try:
            self._conn.execute(
                """
                INSERT INTO users (id, email, username, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user.id, user.email, user.username, user.password_hash, user.created_at),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("email is already registered") from e
        return user

    def count_all(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
