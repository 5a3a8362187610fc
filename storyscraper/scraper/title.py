"""Title extraction: a priority-ordered selector chain plus title cleaning."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from storyscraper.scraper.document import inline_text, select_first
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, UNTITLED, ExtractionThresholds

logger = logging.getLogger(__name__)

# Tried in order; the first cleaned title inside the length bounds wins.
TITLE_SELECTORS = [
    "h1.story-title", "h1.post-title", "h1.chapter-title",
    ".story-title", ".post-title", ".chapter-title", ".entry-title",
    "h1.title", ".title h1", "#title h1",
    "article h1", "main h1", ".content h1",
    "h1", "h2", "h3",
    "title",
]

# Site suffixes: everything after a pipe or an en/em dash, or after a
# hyphen that has whitespace on both sides (keeps "Spider-Man" intact).
_SITE_SUFFIX = re.compile(r"(?:\s*[|–—]|\s+-\s).*$", re.DOTALL)
_ROLE_PREFIX = re.compile(r"^(?:story|chapter|part)\s*:\s*", re.IGNORECASE)
# Only after a separator, so "Born Free" keeps its last word.
_QUALIFIER_SUFFIX = re.compile(r"\s*[-:,]\s*(?:read online|free)\s*$", re.IGNORECASE)
_PARENTHETICAL_SUFFIX = re.compile(r"\s*\([^()]*\)\s*$")


def _clean_once(title: str) -> str:
    title = " ".join(title.split())
    title = _SITE_SUFFIX.sub("", title)
    title = _ROLE_PREFIX.sub("", title)
    title = _QUALIFIER_SUFFIX.sub("", title)
    title = _PARENTHETICAL_SUFFIX.sub("", title)
    return title.strip()


def clean_title(title: str) -> str:
    """Strip site suffixes, role prefixes, qualifiers and trailing parentheses.

    The rules are applied until nothing changes, which makes the function
    idempotent: ``clean_title(clean_title(t)) == clean_title(t)``.
    """
    if not title:
        return ""
    current = title
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def extract_title(
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Return the page title, or ``"Untitled Story"`` when nothing qualifies."""
    for selector in TITLE_SELECTORS:
        element = select_first(soup, selector)
        if element is None:
            continue
        title = clean_title(inline_text(element))
        if thresholds.title_min_length < len(title) < thresholds.title_max_length:
            logger.debug("Title from %r: %r", selector, title)
            return title
    return UNTITLED
