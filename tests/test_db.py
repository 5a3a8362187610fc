"""Database layer tests.

All tests use an in-memory SQLite database so they are:
- Fast (no disk I/O)
- Isolated (each fixture gets a fresh DB)
- Side-effect free (nothing written to ~/.storyscraper)
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from storyscraper.db.connection import get_connection
from storyscraper.db.migrations import SCHEMA_VERSION, current_version, init_db
from storyscraper.db.stories import (
    SqliteStoryStore,
    create_story,
    delete_story,
    delete_story_by_url,
    get_story,
    get_story_by_url,
    list_stories,
    mark_story_read,
    search_stories,
    story_exists,
)
from storyscraper.scraper.models import ExtractionResult


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    yield connection
    connection.close()


def _result(
    url: str,
    domain: str = "tales.example.com",
    content: str = "one two three",
    title: str = "The Harbour",
    author: str = "Mara Quinn",
) -> ExtractionResult:
    return ExtractionResult(
        url=url,
        title=title,
        content=content,
        author=author,
        domain=domain,
    )


# ---------------------------------------------------------------------------
# connection / init
# ---------------------------------------------------------------------------

class TestConnection:
    def test_foreign_keys_enabled(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("PRAGMA foreign_keys").fetchone()
        assert row[0] == 1

    def test_row_factory(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1

    def test_creates_parent_directory(self, tmp_path) -> None:
        db_path = tmp_path / "nested" / "deeper" / "stories.db"
        connection = get_connection(db_path)
        try:
            init_db(connection)
        finally:
            connection.close()
        assert db_path.exists()


class TestInitDb:
    def test_creates_stories_table(self, conn: sqlite3.Connection) -> None:
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='stories'"
        ).fetchone()
        assert row is not None

    def test_idempotent(self, conn: sqlite3.Connection) -> None:
        init_db(conn)
        init_db(conn)
        assert current_version(conn) == SCHEMA_VERSION

    def test_upgrades_version_one_database(self, tmp_path) -> None:
        db_path = tmp_path / "old.db"
        old = sqlite3.connect(str(db_path))
        old.executescript(
            """
            CREATE TABLE stories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL UNIQUE,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                author TEXT,
                word_count INTEGER NOT NULL DEFAULT 0,
                domain TEXT NOT NULL DEFAULT '',
                scraped_at INTEGER NOT NULL DEFAULT (unixepoch())
            );
            CREATE TABLE schema_version (version INTEGER PRIMARY KEY, applied_at INTEGER);
            INSERT INTO schema_version(version) VALUES (1);
            INSERT INTO stories(url, title, content) VALUES ('https://tales.example.com/old', 'Old', 'a b');
            """
        )
        old.close()

        connection = get_connection(db_path)
        try:
            init_db(connection)
            assert current_version(connection) == SCHEMA_VERSION
            story = get_story_by_url(connection, "https://tales.example.com/old")
            assert story.read_count == 0
            assert story.last_read is None
        finally:
            connection.close()


# ---------------------------------------------------------------------------
# stories CRUD
# ---------------------------------------------------------------------------

class TestStories:
    def test_create_and_get(self, conn: sqlite3.Connection) -> None:
        story = create_story(conn, _result("https://tales.example.com/1"))
        assert story.id > 0
        assert story.word_count == 3
        assert story.scraped_at > 0

        fetched = get_story(conn, story.id)
        assert fetched == story

    def test_url_is_unique(self, conn: sqlite3.Connection) -> None:
        create_story(conn, _result("https://tales.example.com/1"))
        with pytest.raises(sqlite3.IntegrityError):
            create_story(conn, _result("https://tales.example.com/1"))

    def test_exists_and_lookup_by_url(self, conn: sqlite3.Connection) -> None:
        url = "https://tales.example.com/1"
        assert story_exists(conn, url) is False
        create_story(conn, _result(url))
        assert story_exists(conn, url) is True
        assert get_story_by_url(conn, url).title == "The Harbour"

    def test_missing_story(self, conn: sqlite3.Connection) -> None:
        assert get_story(conn, 999) is None
        assert get_story_by_url(conn, "https://nowhere.example.com/") is None

    def test_list_filters_by_domain(self, conn: sqlite3.Connection) -> None:
        create_story(conn, _result("https://a.example.com/1", domain="a.example.com"))
        create_story(conn, _result("https://b.example.com/1", domain="b.example.com"))
        create_story(conn, _result("https://a.example.com/2", domain="a.example.com"))

        assert len(list_stories(conn)) == 3
        urls = [s.url for s in list_stories(conn, domain="a.example.com")]
        # Same-second inserts fall back to id order, newest first.
        assert urls == ["https://a.example.com/2", "https://a.example.com/1"]

    def test_delete(self, conn: sqlite3.Connection) -> None:
        story = create_story(conn, _result("https://tales.example.com/1"))
        assert delete_story(conn, story.id) == 1
        assert delete_story(conn, story.id) == 0
        assert get_story(conn, story.id) is None

    def test_delete_by_url(self, conn: sqlite3.Connection) -> None:
        create_story(conn, _result("https://tales.example.com/1"))
        assert delete_story_by_url(conn, "https://tales.example.com/1") == 1
        assert story_exists(conn, "https://tales.example.com/1") is False

    def test_to_dict(self, conn: sqlite3.Connection) -> None:
        story = create_story(conn, _result("https://tales.example.com/1"))
        data = story.to_dict()
        assert data["url"] == "https://tales.example.com/1"
        assert data["author"] == "Mara Quinn"
        assert data["word_count"] == 3


class TestSqliteStoryStore:
    def test_save_then_exists(self, conn: sqlite3.Connection) -> None:
        store = SqliteStoryStore(conn)
        url = "https://tales.example.com/1"
        assert store.exists(url) is False
        story = store.save(_result(url))
        assert store.exists(url) is True
        assert story.url == url


class TestSearchStories:
    @pytest.fixture()
    def seeded(self, conn: sqlite3.Connection) -> sqlite3.Connection:
        create_story(conn, _result(
            "https://a.example.com/1", domain="a.example.com",
            title="Harbour Lights", author="Mara Quinn", content="the tide came in",
        ))
        create_story(conn, _result(
            "https://b.example.com/1", domain="b.example.com",
            title="Salt and Smoke", author="Ines Varga",
            content="smoke drifted over the salt flats at noon",
        ))
        create_story(conn, _result(
            "https://a.example.com/2", domain="a.example.com",
            title="Iron Rain", author="Tom Hale", content="rain",
        ))
        return conn

    def test_matches_title(self, seeded: sqlite3.Connection) -> None:
        assert [s.title for s in search_stories(seeded, "harbour")] == ["Harbour Lights"]

    def test_matches_author(self, seeded: sqlite3.Connection) -> None:
        assert [s.title for s in search_stories(seeded, "Varga")] == ["Salt and Smoke"]

    def test_matches_content(self, seeded: sqlite3.Connection) -> None:
        assert [s.title for s in search_stories(seeded, "tide")] == ["Harbour Lights"]

    def test_disabled_columns_are_not_searched(self, seeded: sqlite3.Connection) -> None:
        assert search_stories(seeded, "tide", search_content=False) == []
        assert search_stories(seeded, "Varga", search_author=False) == []

    def test_blank_query_returns_everything_newest_first(self, seeded: sqlite3.Connection) -> None:
        titles = [s.title for s in search_stories(seeded, "  ")]
        assert titles == ["Iron Rain", "Salt and Smoke", "Harbour Lights"]

    def test_word_count_bounds(self, seeded: sqlite3.Connection) -> None:
        assert [s.title for s in search_stories(seeded, min_word_count=5)] == ["Salt and Smoke"]
        assert [s.title for s in search_stories(seeded, max_word_count=1)] == ["Iron Rain"]
        between = search_stories(seeded, min_word_count=2, max_word_count=4)
        assert [s.title for s in between] == ["Harbour Lights"]

    def test_domain_is_a_substring_match(self, seeded: sqlite3.Connection) -> None:
        titles = [s.title for s in search_stories(seeded, domain="a.example")]
        assert titles == ["Iron Rain", "Harbour Lights"]

    def test_limit(self, seeded: sqlite3.Connection) -> None:
        assert len(search_stories(seeded, limit=2)) == 2

    def test_no_match(self, seeded: sqlite3.Connection) -> None:
        assert search_stories(seeded, "dragon") == []


class TestMarkStoryRead:
    def test_new_story_is_unread(self, conn: sqlite3.Connection) -> None:
        story = create_story(conn, _result("https://tales.example.com/1"))
        assert story.read_count == 0
        assert story.last_read is None

    def test_increments_and_stamps(self, conn: sqlite3.Connection) -> None:
        story = create_story(conn, _result("https://tales.example.com/1"))

        first = mark_story_read(conn, story.id)
        assert first.read_count == 1
        assert first.last_read is not None
        assert first.last_read >= story.scraped_at

        second = mark_story_read(conn, story.id)
        assert second.read_count == 2
        assert get_story(conn, story.id).read_count == 2

    def test_missing_story(self, conn: sqlite3.Connection) -> None:
        assert mark_story_read(conn, 999) is None
