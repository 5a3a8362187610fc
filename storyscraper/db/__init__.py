"""Database layer package.

Public re-exports so callers can write::

    from storyscraper.db import get_connection, init_db
    from storyscraper.db import stories
"""

from storyscraper.db.connection import get_connection
from storyscraper.db.migrations import init_db
from storyscraper.db import stories

__all__ = ["get_connection", "init_db", "stories"]
