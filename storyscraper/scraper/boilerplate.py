"""Removal and detection of page chrome (navigation, ads, comments, ...)."""

from __future__ import annotations

import re
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from storyscraper.scraper.document import class_string, id_string, non_empty_lines
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, ExtractionThresholds

# Removed wherever they appear.
BOILERPLATE_TAGS = {
    "script", "style", "noscript", "iframe", "nav", "header", "footer", "aside",
}

# Matched against class and id values, one hyphen/underscore-delimited
# segment run at a time, so "ad" hits "ad-slot" but not "header" or "reader".
BOILERPLATE_KEYWORDS = [
    "navigation", "navbar", "nav", "menu", "sidebar",
    "header", "footer",
    "advertisement", "advert", "ads", "ad",
    "social", "share", "sharing",
    "comments", "comment", "comment-section",
    "related", "recommended",
    "breadcrumb", "breadcrumbs",
    "tags", "tag-list",
    "author-bio", "author-info",
    "newsletter", "subscription",
    "popup", "modal", "overlay",
]

# Keywords used to reject whole blocks in the largest-block fallback.
BLOCK_KEYWORDS = [
    "nav", "menu", "sidebar", "footer", "header",
    "advertisement", "ad", "social", "share",
    "comment", "related", "recommended",
]

# Never removed on a class/id match: dropping them empties the page.
_PROTECTED_TAGS = {"html", "body"}


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(
        re.escape(k) for k in sorted(set(keywords), key=len, reverse=True)
    )
    return re.compile(rf"(?:^|[\s_-])(?:{alternatives})(?=$|[\s_-])")


_BOILERPLATE_RE = _keyword_pattern(BOILERPLATE_KEYWORDS)
_BLOCK_RE = _keyword_pattern(BLOCK_KEYWORDS)


def has_boilerplate_marker(element: Tag, pattern: re.Pattern[str] = _BOILERPLATE_RE) -> bool:
    """True if the element's class or id names a boilerplate role."""
    return bool(
        pattern.search(class_string(element)) or pattern.search(id_string(element))
    )


def remove_boilerplate(soup: BeautifulSoup) -> int:
    """Remove noise subtrees from *soup* in place; return how many were removed.

    Applying it twice is a no-op the second time.
    """
    doomed = []
    for element in soup.find_all(True):
        if element.name in BOILERPLATE_TAGS:
            doomed.append(element)
        elif element.name not in _PROTECTED_TAGS and has_boilerplate_marker(element):
            doomed.append(element)

    removed = 0
    for element in doomed:
        # A parent already removed takes its descendants with it.
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def is_likely_boilerplate(
    element: Tag,
    text: str,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Classify a candidate block as chrome rather than prose.

    A block is chrome when its class/id names a boilerplate role, or when it
    is a list of many very short lines (link lists, menus).
    """
    if has_boilerplate_marker(element, _BLOCK_RE):
        return True
    lines = non_empty_lines(text)
    if not lines:
        return False
    average = len(text) / len(lines)
    return average < thresholds.boilerplate_line_length and len(lines) > thresholds.boilerplate_min_lines
