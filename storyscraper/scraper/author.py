"""Author extraction: selectors, then ``<meta name="author">``, then a byline scan."""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from storyscraper.scraper.document import element_text, inline_text, select_first
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, ExtractionThresholds

logger = logging.getLogger(__name__)

AUTHOR_SELECTORS = [
    ".story-author", ".post-author", ".chapter-author",
    ".author", ".by-author", ".byline",
    '[rel="author"]', '[itemprop="author"]',
    ".author-name", ".writer", ".creator",
    "article .author", "main .author", ".content .author",
]

_BYLINE = re.compile(
    r"(?:^|\s)(?:by|author:|written by)\s+([A-Za-z][A-Za-z ]{1,49})(?=\s|$|\.)",
    re.IGNORECASE | re.MULTILINE,
)
_ROLE_PREFIX = re.compile(
    r"^(?:(?:written|story)\s+by\b|by\b|author\s*:)\s*:?\s*", re.IGNORECASE
)
_VERB_SUFFIX = re.compile(
    r"\s*\b(?:writes?|says?|posted|published)\b.*$", re.IGNORECASE | re.DOTALL
)
_GENERIC_IDENTITIES = re.compile(
    r"^(?:admin|administrator|user|guest|anonymous|unknown|n/a|none)$", re.IGNORECASE
)
_NUMERIC = re.compile(r"^\d+$")
_TOO_SHORT = re.compile(r"^[a-z]{1,2}$", re.IGNORECASE)


def clean_author(
    author: Optional[str],
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> Optional[str]:
    """Normalise a raw author string; ``None`` when it is not a real name."""
    if not author:
        return None
    author = _ROLE_PREFIX.sub("", author.strip())
    author = _VERB_SUFFIX.sub("", author)
    author = " ".join(author.split())

    if (
        _GENERIC_IDENTITIES.match(author)
        or _NUMERIC.match(author)
        or _TOO_SHORT.match(author)
    ):
        return None
    if not thresholds.author_min_length < len(author) < thresholds.author_max_length:
        return None
    return author


def extract_author(
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> Optional[str]:
    """Return the author name, or ``None`` when none is found.

    A candidate rejected by :func:`clean_author` does not end the search; the
    next strategy in the chain is tried.
    """
    for selector in AUTHOR_SELECTORS:
        element = select_first(soup, selector)
        if element is None:
            continue
        text = inline_text(element)
        if thresholds.author_min_length < len(text) < thresholds.author_max_length:
            author = clean_author(text, thresholds)
            if author:
                logger.debug("Author from %r: %r", selector, author)
                return author

    meta = soup.find("meta", attrs={"name": "author"})
    if meta is not None:
        author = clean_author(str(meta.get("content") or ""), thresholds)
        if author:
            return author

    body_text = element_text(soup.body or soup)
    match = _BYLINE.search(body_text)
    if match:
        return clean_author(match.group(1), thresholds)
    return None
