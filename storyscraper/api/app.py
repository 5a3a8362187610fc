"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging, opens a single SQLite connection
(shared across all requests via ``request.app.state.db``) and initialises the
schema.  On shutdown it closes the connection cleanly.

Routers
-------
    /scrape, /scrape/debug, /scrape-links  — extraction and batch crawling
    /stories                               — stored story read / delete
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storyscraper.config import configure_logging
from storyscraper.db import get_connection, init_db

from storyscraper.api.routers import scrape as scrape_router
from storyscraper.api.routers import stories as stories_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB on startup and close it on shutdown."""
    configure_logging()
    conn = get_connection()
    init_db(conn)
    app.state.db = conn
    try:
        yield
    finally:
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="StoryScraper API",
        description=(
            "Extracts title, author and body text from story pages and "
            "crawls story links found on listing pages."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scrape_router.router, tags=["scrape"])
    app.include_router(stories_router.router, prefix="/stories", tags=["stories"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn storyscraper.api.app:app --reload
app = create_app()
