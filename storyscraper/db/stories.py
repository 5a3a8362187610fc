"""CRUD operations for the ``stories`` table."""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from storyscraper.db.models import Story
from storyscraper.scraper.models import ExtractionResult


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_story(row: sqlite3.Row) -> Story:
    return Story(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        content=row["content"],
        author=row["author"],
        word_count=row["word_count"],
        domain=row["domain"],
        scraped_at=row["scraped_at"],
        read_count=row["read_count"],
        last_read=row["last_read"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_story(conn: sqlite3.Connection, result: ExtractionResult) -> Story:
    """Insert an extracted story and return the stored row.

    Raises:
        sqlite3.IntegrityError: If a story with the same URL already exists.
    """
    with conn:
        cursor = conn.execute(
            """
            INSERT INTO stories (url, title, content, author, word_count, domain, scraped_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                result.url,
                result.title,
                result.content,
                result.author,
                result.word_count,
                result.domain,
                int(time()),
            ),
        )
    return get_story(conn, cursor.lastrowid)  # type: ignore[return-value, arg-type]


def get_story(conn: sqlite3.Connection, story_id: int) -> Optional[Story]:
    """Fetch a single story by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM stories WHERE id = ?", (story_id,)).fetchone()
    return _row_to_story(row) if row else None


def get_story_by_url(conn: sqlite3.Connection, url: str) -> Optional[Story]:
    row = conn.execute("SELECT * FROM stories WHERE url = ?", (url,)).fetchone()
    return _row_to_story(row) if row else None


def story_exists(conn: sqlite3.Connection, url: str) -> bool:
    row = conn.execute("SELECT 1 FROM stories WHERE url = ?", (url,)).fetchone()
    return row is not None


def list_stories(
    conn: sqlite3.Connection,
    domain: Optional[str] = None,
) -> list[Story]:
    """Return all stories, newest first, optionally filtered by ``domain``."""
    if domain:
        rows = conn.execute(
            "SELECT * FROM stories WHERE domain = ? ORDER BY scraped_at DESC, id DESC",
            (domain,),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM stories ORDER BY scraped_at DESC, id DESC"
        ).fetchall()
    return [_row_to_story(r) for r in rows]


def search_stories(
    conn: sqlite3.Connection,
    query: str = "",
    *,
    search_title: bool = True,
    search_author: bool = True,
    search_content: bool = True,
    min_word_count: Optional[int] = None,
    max_word_count: Optional[int] = None,
    domain: Optional[str] = None,
    limit: int = 50,
) -> list[Story]:
    """Substring search over title, author and content, newest first.

    A blank *query* matches every story, so the word-count and domain filters
    can be used on their own.  *domain* matches any part of the host name.
    """
    clauses: list[str] = []
    params: list[object] = []

    term = query.strip()
    if term:
        columns = [
            column
            for column, enabled in (
                ("title", search_title),
                ("author", search_author),
                ("content", search_content),
            )
            if enabled
        ]
        if columns:
            clauses.append("(" + " OR ".join(f"{c} LIKE ?" for c in columns) + ")")
            params.extend([f"%{term}%"] * len(columns))

    if min_word_count is not None:
        clauses.append("word_count >= ?")
        params.append(min_word_count)
    if max_word_count is not None:
        clauses.append("word_count <= ?")
        params.append(max_word_count)
    if domain:
        clauses.append("domain LIKE ?")
        params.append(f"%{domain}%")

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = conn.execute(
        f"SELECT * FROM stories {where} ORDER BY scraped_at DESC, id DESC LIMIT ?",
        (*params, limit),
    ).fetchall()
    return [_row_to_story(r) for r in rows]


def mark_story_read(conn: sqlite3.Connection, story_id: int) -> Optional[Story]:
    """Increment the read counter and stamp ``last_read``.

    Returns the updated story, or ``None`` if *story_id* does not exist.
    """
    with conn:
        cursor = conn.execute(
            "UPDATE stories SET read_count = read_count + 1, last_read = ? WHERE id = ?",
            (int(time()), story_id),
        )
    if cursor.rowcount == 0:
        return None
    return get_story(conn, story_id)


def delete_story(conn: sqlite3.Connection, story_id: int) -> int:
    """Delete a story by id and return the number of rows removed (0 or 1)."""
    with conn:
        cursor = conn.execute("DELETE FROM stories WHERE id = ?", (story_id,))
    return cursor.rowcount


def delete_story_by_url(conn: sqlite3.Connection, url: str) -> int:
    with conn:
        cursor = conn.execute("DELETE FROM stories WHERE url = ?", (url,))
    return cursor.rowcount


class SqliteStoryStore:
    """The storage collaborator used by the crawl pipeline."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def exists(self, url: str) -> bool:
        return story_exists(self.conn, url)

    def save(self, result: ExtractionResult) -> Story:
        return create_story(self.conn, result)
