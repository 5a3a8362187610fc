"""Scraper package: page rendering, story extraction and link discovery."""

from storyscraper.scraper.extractor import debug_extraction, extract_story
from storyscraper.scraper.fetcher import BrowserRenderer, HttpRenderer, make_renderer
from storyscraper.scraper.links import discover_links
from storyscraper.scraper.models import (
    CandidateLink,
    ExtractionResult,
    LinkFilterConfig,
    RawPage,
)

__all__ = [
    "extract_story",
    "debug_extraction",
    "discover_links",
    "make_renderer",
    "BrowserRenderer",
    "HttpRenderer",
    "RawPage",
    "ExtractionResult",
    "CandidateLink",
    "LinkFilterConfig",
]
