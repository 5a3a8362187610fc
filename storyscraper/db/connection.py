"""SQLite connection factory for the story store."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from storyscraper.config import settings

MEMORY = ":memory:"


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Open the story database (``settings.db_path`` unless *db_path* is given).

    Rows come back as :class:`sqlite3.Row`.  The connection may be shared
    with FastAPI's worker threads; WAL mode lets ``stories list`` read while
    a crawl is writing.
    """
    path = db_path or settings.db_path
    if str(path) != MEMORY:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn
