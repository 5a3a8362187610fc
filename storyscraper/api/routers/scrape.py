"""Scraping endpoints — single story, extraction debug, and link batches.

Routes
------
POST /scrape          Body: {"url": "https://..."}                  → scrape_one
POST /scrape/debug    Body: {"url": "https://..."}                  → debug_extraction
POST /scrape-links    Body: {"url": "https://...", "options": {...}} → discover_and_crawl
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, HttpUrl

from storyscraper.config import settings
from storyscraper.crawl.pipeline import CrawlContext, discover_and_crawl, scrape_one
from storyscraper.db.stories import SqliteStoryStore, get_story_by_url
from storyscraper.errors import ConfigurationError, FetchFailure
from storyscraper.scraper.extractor import debug_extraction
from storyscraper.scraper.fetcher import make_renderer
from storyscraper.scraper.models import LinkFilterConfig, OutcomeStatus

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class UrlRequest(BaseModel):
    url: HttpUrl


class ScrapeLinksRequest(BaseModel):
    url: HttpUrl
    options: LinkFilterConfig = Field(default_factory=LinkFilterConfig)


class ScrapeResponse(BaseModel):
    skipped: bool
    reason: Optional[str] = None
    story: dict[str, Any]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/scrape", response_model=ScrapeResponse)
def scrape_endpoint(body: UrlRequest, request: Request) -> dict[str, Any]:
    """Scrape one story page and store it unless the URL is already known."""
    conn = request.app.state.db
    url = str(body.url)
    try:
        with make_renderer() as renderer:
            context = CrawlContext(storage=SqliteStoryStore(conn), renderer=renderer)
            outcome = scrape_one(url, context)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except FetchFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    if outcome.status is OutcomeStatus.FAILED:
        raise HTTPException(status_code=502, detail=f"Scrape failed: {outcome.error}")
    if outcome.status is OutcomeStatus.SKIPPED:
        existing = get_story_by_url(conn, url)
        return {
            "skipped": True,
            "reason": outcome.reason.value if outcome.reason else None,
            "story": existing.to_dict() if existing else {"url": url},
        }
    return {"skipped": False, "story": outcome.result.to_dict()}  # type: ignore[union-attr]


@router.post("/scrape/debug")
def debug_endpoint(body: UrlRequest) -> dict[str, Any]:
    """Report what every extraction strategy sees on a page; nothing is stored."""
    url = str(body.url)
    try:
        with make_renderer() as renderer:
            page = renderer.render(url)
    except FetchFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return debug_extraction(page)


@router.post("/scrape-links")
def scrape_links_endpoint(body: ScrapeLinksRequest, request: Request) -> dict[str, Any]:
    """Find story links on a page and scrape each one sequentially.

    Blocks until the whole batch is done, politeness delays included.
    """
    conn = request.app.state.db
    try:
        with make_renderer() as renderer:
            context = CrawlContext(
                storage=SqliteStoryStore(conn),
                renderer=renderer,
                delay=settings.crawl_delay,
            )
            batch = discover_and_crawl(str(body.url), body.options, context)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except FetchFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return batch.to_dict()
