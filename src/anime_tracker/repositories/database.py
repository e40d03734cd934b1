"""SQLite connection and schema migrations.

Migrations are ``NNN_name.sql`` files shipped in ``anime_tracker/migrations``.
Each file is applied once, in lexical order, inside its own transaction,
and recorded in ``schema_migrations``.
"""

import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from anime_tracker.config import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"
MIGRATION_NAME = re.compile(r"^\d{3}_[a-z0-9_]+\.sql$")


def connect(database_path: str | None = None) -> sqlite3.Connection:
    """Open the application database.

    The connection runs in autocommit mode; multi-statement work opens
    its own transaction.

    Args:
        database_path: SQLite file path or ":memory:". Defaults to settings.

    Returns:
        Configured sqlite3 connection
    """
    path = database_path or settings.database_path
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Opened in the lifespan hook, used from the request event loop
    conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _ensure_migration_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            id TEXT PRIMARY KEY,
            applied_at TEXT NOT NULL
        )
        """
    )


def get_applied_migrations(conn: sqlite3.Connection) -> set[str]:
    """Return the ids of migrations already recorded."""
    _ensure_migration_table(conn)
    rows = conn.execute("SELECT id FROM schema_migrations").fetchall()
    return {row["id"] for row in rows}


def run_migrations(
    conn: sqlite3.Connection,
    migrations_dir: Path | None = None,
) -> list[str]:
    """Apply pending migrations in order.

    Safe to call on every startup; already-applied files are skipped.

    Args:
        conn: Open database connection
        migrations_dir: Directory with NNN_name.sql files. Defaults to the packaged set.

    Returns:
        Names of the migrations applied by this call

    Raises:
        sqlite3.Error: If a migration fails (its transaction is rolled back)
    """
    directory = migrations_dir or MIGRATIONS_DIR
    applied = get_applied_migrations(conn)
    files = sorted(path.name for path in directory.glob("*.sql"))

    newly_applied = []
    for name in files:
        if name in applied:
            continue
        if not MIGRATION_NAME.match(name):
            raise ValueError(f"Invalid migration file name: {name}")

        sql = (directory / name).read_text(encoding="utf-8")
        applied_at = datetime.now(timezone.utc).isoformat()
        script = (
            "BEGIN;\n"
            f"{sql}\n"
            f"INSERT INTO schema_migrations (id, applied_at) VALUES ('{name}', '{applied_at}');\n"
            "COMMIT;"
        )
        try:
            conn.executescript(script)
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

        logger.info("Applied migration %s", name)
        newly_applied.append(name)

    return newly_applied
