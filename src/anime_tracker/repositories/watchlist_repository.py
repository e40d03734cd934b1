"""SQLite repository for watchlist entries."""

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any

from anime_tracker.entities import AnimeStatus, WatchlistEntry
from anime_tracker.errors import ConflictError

# Columns a caller may change through update()
UPDATABLE_FIELDS = ("status", "rating", "notes", "progress_episodes")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteWatchlistRepository:
    """Watchlist storage backed by the ``watchlist_items`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @staticmethod
    def _to_entity(row: sqlite3.Row) -> WatchlistEntry:
        return WatchlistEntry(
            user_id=row["user_id"],
            anime_id=row["anime_id"],
            anime_title=row["anime_title"],
            anime_genres=tuple(json.loads(row["anime_genres"])),
            anime_episodes=row["anime_episodes"],
            status=AnimeStatus(row["status"]),
            rating=row["rating"],
            notes=row["notes"],
            progress_episodes=row["progress_episodes"],
            updated_at=row["updated_at"],
        )

    def list_for_user(self, user_id: str) -> list[WatchlistEntry]:
        """Return a user's entries, most recently updated first."""
        rows = self._conn.execute(
            """
            SELECT * FROM watchlist_items
            WHERE user_id = ?
            ORDER BY updated_at DESC, rowid DESC
            """,
            (user_id,),
        ).fetchall()
        return [self._to_entity(row) for row in rows]

    def get(self, user_id: str, anime_id: str) -> WatchlistEntry | None:
        row = self._conn.execute(
            "SELECT * FROM watchlist_items WHERE user_id = ? AND anime_id = ?",
            (user_id, anime_id),
        ).fetchone()
        return self._to_entity(row) if row else None

    def add(
        self,
        user_id: str,
        anime_id: str,
        anime_title: str,
        anime_genres: tuple[str, ...],
        anime_episodes: int,
        status: AnimeStatus,
    ) -> WatchlistEntry:
        """Insert a new entry with default rating, notes and progress.

        Raises:
            ConflictError: If the anime is already on the user's watchlist
        """
        entry = WatchlistEntry(
            user_id=user_id,
            anime_id=anime_id,
            anime_title=anime_title,
            anime_genres=tuple(anime_genres),
            anime_episodes=anime_episodes,
            status=status,
            rating=None,
            notes="",
            progress_episodes=0,
            updated_at=_now(),
        )
        try:
            self._conn.execute(
                """
                INSERT INTO watchlist_items (
                    user_id, anime_id, anime_title, anime_genres, anime_episodes,
                    status, rating, notes, progress_episodes, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.user_id,
                    entry.anime_id,
                    entry.anime_title,
                    json.dumps(list(entry.anime_genres)),
                    entry.anime_episodes,
                    entry.status.value,
                    entry.rating,
                    entry.notes,
                    entry.progress_episodes,
                    entry.updated_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("anime already in watchlist") from e
        return entry

    def update(
        self,
        user_id: str,
        anime_id: str,
        changes: dict[str, Any],
    ) -> WatchlistEntry | None:
        """Apply a partial update and bump ``updated_at``.

        Args:
            user_id: Owner of the entry
            anime_id: Catalog id of the entry
            changes: Subset of status, rating, notes, progress_episodes

        Returns:
            The updated entry, or None if it does not exist
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        values = dict(changes)
        if isinstance(values.get("status"), AnimeStatus):
            values["status"] = values["status"].value
        values["updated_at"] = _now()

        assignments = ", ".join(f"{column} = ?" for column in values)
        cursor = self._conn.execute(
            f"UPDATE watchlist_items SET {assignments} WHERE user_id = ? AND anime_id = ?",
            (*values.values(), user_id, anime_id),
        )
        if cursor.rowcount == 0:
            return None
        return self.get(user_id, anime_id)

    def remove(self, user_id: str, anime_id: str) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM watchlist_items WHERE user_id = ? AND anime_id = ?",
            (user_id, anime_id),
        )
        return cursor.rowcount > 0
