"""Batch crawl of discovered story links."""

from storyscraper.crawl.pipeline import (
    BatchCrawl,
    CrawlContext,
    CrawlPipeline,
    discover_and_crawl,
    find_links,
    open_context,
    scrape_one,
)

__all__ = [
    "BatchCrawl",
    "CrawlContext",
    "CrawlPipeline",
    "discover_and_crawl",
    "find_links",
    "open_context",
    "scrape_one",
]
