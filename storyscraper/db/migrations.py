"""Database initialisation and migrations.

``init_db(conn)`` is idempotent and safe to call on an existing database.
``schema.sql`` creates the version-1 tables; later columns are added by
``migrate(conn)`` and recorded in ``schema_version``.
"""

from __future__ import annotations

import sqlite3

from storyscraper.config import settings

BASE_VERSION = 1

# (version, statements) in ascending order.
MIGRATIONS: list[tuple[int, tuple[str, ...]]] = [
    (
        2,
        (
            "ALTER TABLE stories ADD COLUMN read_count INTEGER NOT NULL DEFAULT 0",
            "ALTER TABLE stories ADD COLUMN last_read INTEGER",
        ),
    ),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes, then apply pending migrations.

    Args:
        conn: An open, configured SQLite connection.
    """
    sql = settings.schema_path.read_text(encoding="utf-8")
    # executescript() issues an implicit COMMIT first, which is fine for
    # a DDL-only script.
    conn.executescript(sql)
    _ensure_version_table(conn)
    migrate(conn)


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version  INTEGER PRIMARY KEY,
                applied_at INTEGER DEFAULT (unixepoch())
            )
            """
        )
        conn.execute(
            "INSERT OR IGNORE INTO schema_version(version) VALUES (?)",
            (BASE_VERSION,),
        )


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied schema version (0 if none applied)."""
    row = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return row[0] if row else 0


def migrate(conn: sqlite3.Connection) -> None:
    """Apply every migration newer than :func:`current_version`, in order."""
    applied = current_version(conn)
    for version, statements in MIGRATIONS:
        if version <= applied:
            continue
        with conn:
            for statement in statements:
                conn.execute(statement)
            conn.execute("INSERT INTO schema_version(version) VALUES (?)", (version,))
