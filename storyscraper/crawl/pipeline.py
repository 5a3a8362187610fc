"""Sequential, rate-limited crawl of candidate story links.

Per link the pipeline moves ``Pending -> Fetching -> Success | Skipped |
Failed``:

    duplicate check -> render -> extract -> length check -> save

Links are processed one at a time in list order with a single renderer
session.  Nothing is written before the length check passes, so a
too-short page never leaves a stub record behind.  A failure on one link
is recorded and the batch continues.
"""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Optional, Protocol

from storyscraper.config import settings
from storyscraper.crawl.clock import Clock, SystemClock
from storyscraper.db import get_connection, init_db
from storyscraper.db.stories import SqliteStoryStore
from storyscraper.errors import ConfigurationError
from storyscraper.scraper.document import parse_document
from storyscraper.scraper.extractor import extract_story
from storyscraper.scraper.fetcher import Renderer, make_renderer
from storyscraper.scraper.links import discover_links, resolve_link, validate_filter_config
from storyscraper.scraper.models import (
    CandidateLink,
    CrawlOutcome,
    CrawlReport,
    DiscoveryResult,
    ExtractionResult,
    LinkFilterConfig,
    SkipReason,
)

logger = logging.getLogger(__name__)


class StoryStore(Protocol):
    def exists(self, url: str) -> bool: ...

    def save(self, result: ExtractionResult) -> Any: ...


@dataclass
class CrawlContext:
    """Everything a crawl run shares across links."""

    storage: StoryStore
    renderer: Renderer
    delay: float = field(default_factory=lambda: settings.crawl_delay)
    clock: Clock = field(default_factory=SystemClock)
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        """Stop the run before the next link is started."""
        self.cancel_event.set()


@contextmanager
def open_context(
    db_path: Optional[Path] = None,
    renderer: Optional[str] = None,
    delay: Optional[float] = None,
    clock: Optional[Clock] = None,
) -> Iterator[CrawlContext]:
    """Acquire the DB connection and renderer for one run; release both on exit."""
    with ExitStack() as stack:
        conn = get_connection(db_path)
        stack.callback(conn.close)
        init_db(conn)
        session = stack.enter_context(make_renderer(renderer))
        yield CrawlContext(
            storage=SqliteStoryStore(conn),
            renderer=session,
            delay=settings.crawl_delay if delay is None else delay,
            clock=clock or SystemClock(),
        )


class CrawlPipeline:
    def __init__(self, context: CrawlContext):
        self.context = context

    def process(self, link: CandidateLink, min_content_length: int) -> CrawlOutcome:
        """Run one link to a terminal state."""
        ctx = self.context
        try:
            if ctx.storage.exists(link.url):
                return CrawlOutcome.skipped(link.url, SkipReason.DUPLICATE_URL, link.text)

            page = ctx.renderer.render(link.url)
            result = extract_story(page)
            if len(result.content) < min_content_length:
                return CrawlOutcome.skipped(link.url, SkipReason.TOO_SHORT, link.text)
            ctx.storage.save(result)
        except Exception as exc:
            logger.warning("Failed to scrape %s: %s", link.url, exc)
            return CrawlOutcome.failed(link.url, str(exc), link.text)
        return CrawlOutcome.success(link.url, result, link.text)

    def run(
        self,
        links: List[CandidateLink],
        min_content_length: Optional[int] = None,
    ) -> CrawlReport:
        """Process *links* strictly in order and return every outcome.

        The politeness delay follows each Success or Failed link except the
        last; skips cost no request and are not throttled.
        """
        if min_content_length is None:
            min_content_length = settings.min_content_length
        ctx = self.context
        report = CrawlReport()
        total = len(links)
        logger.info("Starting batch scrape of %d links", total)

        for index, link in enumerate(links, start=1):
            if ctx.cancel_event.is_set():
                logger.info("Crawl cancelled after %d of %d links", index - 1, total)
                report.cancelled = True
                break

            outcome = self.process(link, min_content_length)
            report.outcomes.append(outcome)
            detail = outcome.reason.value if outcome.reason else outcome.error or ""
            logger.info("[%d/%d] %s %s %s", index, total, outcome.status.value, link.url, detail)

            if outcome.reason is None and index < total and ctx.delay > 0:
                logger.debug("Waiting %.1fs", ctx.delay)
                ctx.clock.sleep(ctx.delay)

        summary = report.summary
        logger.info(
            "Batch completed: %d successful, %d skipped, %d failed",
            summary.successful, summary.skipped, summary.failed,
        )
        return report


@dataclass
class BatchCrawl:
    """Discovery counts plus the crawl report for one source page."""

    page_url: str
    discovery: DiscoveryResult
    report: CrawlReport

    def to_dict(self) -> dict[str, Any]:
        return self.report.to_dict(
            page_url=self.page_url, total_links_found=self.discovery.total_found
        )


def find_links(
    page_url: str,
    config: LinkFilterConfig,
    context: CrawlContext,
) -> DiscoveryResult:
    """Render *page_url* and discover candidate story links on it."""
    validate_filter_config(config)
    if not page_url or resolve_link(page_url, page_url) is None:
        raise ConfigurationError(f"Page URL must be an absolute http(s) URL, got {page_url!r}")
    page = context.renderer.render(page_url)
    return discover_links(parse_document(page.html), page_url, config)


def discover_and_crawl(
    page_url: str,
    config: LinkFilterConfig,
    context: CrawlContext,
) -> BatchCrawl:
    """Find story links on *page_url* and scrape each of them.

    Raises:
        ConfigurationError: For a bad page URL or filter configuration; raised
            before anything is fetched.
        FetchFailure: If the source page itself cannot be rendered.
    """
    discovery = find_links(page_url, config, context)
    report = CrawlPipeline(context).run(discovery.links, config.min_content_length)
    return BatchCrawl(page_url=page_url, discovery=discovery, report=report)


def scrape_one(
    url: str,
    context: CrawlContext,
    min_content_length: int = 0,
) -> CrawlOutcome:
    """Scrape a single URL with the same duplicate and length rules."""
    if not url or resolve_link(url, url) is None:
        raise ConfigurationError(f"URL must be an absolute http(s) URL, got {url!r}")
    link = CandidateLink(url=url, text="", parent_text="", domain="")
    return CrawlPipeline(context).process(link, min_content_length)
