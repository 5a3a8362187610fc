"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from storyscraper.api import app

    uvicorn storyscraper.api:app --reload
"""

from storyscraper.api.app import app

__all__ = ["app"]
