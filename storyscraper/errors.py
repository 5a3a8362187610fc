"""Exception types raised by storyscraper.

Only configuration problems and renderer failures are exceptions.  A page
with nothing extractable is not an error: the extractors return sentinel
values instead (see :mod:`storyscraper.scraper.extractor`).
"""

from __future__ import annotations


class StoryScraperError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(StoryScraperError, ValueError):
    """Raised before any work starts when required input is missing or invalid."""


class UnsupportedFilterPattern(ConfigurationError):
    """Raised when a link filter option cannot be applied."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Unsupported filter pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class FetchFailure(StoryScraperError):
    """Raised by a renderer when a page cannot be loaded."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
