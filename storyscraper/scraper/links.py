"""Candidate story-link discovery on a listing page.

Links are resolved against the page URL, run through an ordered
inclusion/exclusion filter chain, deduplicated (first occurrence wins) and
truncated to ``max_links``.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import urldefrag, urljoin, urlsplit

import soupsieve
from bs4 import BeautifulSoup

from storyscraper.errors import ConfigurationError, UnsupportedFilterPattern
from storyscraper.scraper.document import inline_text
from storyscraper.scraper.models import CandidateLink, DiscoveryResult, LinkFilterConfig

logger = logging.getLogger(__name__)

NAVIGATION_TEXTS = [
    "home", "about", "contact", "login", "register", "search",
    "menu", "navigation", "footer", "header", "sidebar",
]
GENERIC_LINK_WORDS = {"more", "click", "here", "link", "page"}

# Only link contexts (link + parent text) shorter than this are checked
# for navigation words.
NAVIGATION_TEXT_MAX_LENGTH = 50
MIN_LINK_TEXT_LENGTH = 3
TITLE_LIKE_MIN_LENGTH = 10
TITLE_LIKE_MAX_LENGTH = 200

_NAVIGATION_RE = re.compile(r"\b(?:%s)\b" % "|".join(NAVIGATION_TEXTS))
_SEQUENCE_RE = re.compile(r"chapter|part|episode|\d+")
_NON_WORD_RE = re.compile(r"\W")
_WEB_SCHEMES = {"http", "https"}


def validate_filter_config(config: LinkFilterConfig) -> None:
    """Raise :class:`UnsupportedFilterPattern` for options that cannot be applied."""
    try:
        soupsieve.compile(config.link_selector)
    except (soupsieve.SelectorSyntaxError, NotImplementedError) as exc:
        raise UnsupportedFilterPattern(config.link_selector, f"invalid CSS selector: {exc}") from exc

    for pattern in [*config.filter_patterns, *config.exclude_patterns]:
        if not pattern.strip():
            raise UnsupportedFilterPattern(pattern, "empty patterns match every URL")


def domain_of(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


def resolve_link(href: str, page_url: str) -> Optional[str]:
    """Absolute, fragment-free http(s) URL for *href*, or ``None`` if malformed."""
    try:
        absolute, _fragment = urldefrag(urljoin(page_url, href.strip()))
        parts = urlsplit(absolute)
        if parts.scheme not in _WEB_SCHEMES or not parts.hostname:
            return None
    except ValueError:
        return None
    return absolute


def _is_navigation_text(combined: str) -> bool:
    """True when navigation words make up most of a short link context."""
    if len(combined) >= NAVIGATION_TEXT_MAX_LENGTH or not _NAVIGATION_RE.search(combined):
        return False
    letters = len(_NON_WORD_RE.sub("", combined))
    remaining = len(_NON_WORD_RE.sub("", _NAVIGATION_RE.sub("", combined)))
    return remaining * 2 < letters


def _passes_filters(
    link: CandidateLink, base_domain: str, config: LinkFilterConfig
) -> bool:
    url = link.url.lower()
    combined = f"{link.text} {link.parent_text}".lower().strip()
    text = link.text.lower()

    if config.same_domain_only and link.domain != base_domain:
        return False

    if any(pattern.lower() in url for pattern in config.exclude_patterns):
        return False

    if _is_navigation_text(combined):
        return False

    if len(link.text) < MIN_LINK_TEXT_LENGTH or text in GENERIC_LINK_WORDS:
        return False

    # An explicit allowlist replaces the heuristics below.
    if config.filter_patterns:
        return any(
            p.lower() in url or p.lower() in combined for p in config.filter_patterns
        )

    if any(k.lower() in url or k.lower() in combined for k in config.story_keywords):
        return True
    if TITLE_LIKE_MIN_LENGTH < len(link.text) < TITLE_LIKE_MAX_LENGTH:
        return True
    return bool(_SEQUENCE_RE.search(combined))


def discover_links(
    soup: BeautifulSoup,
    page_url: str,
    config: Optional[LinkFilterConfig] = None,
) -> DiscoveryResult:
    """Return the filtered, deduplicated, size-limited story links on a page.

    ``total_found`` counts every element with an ``href`` before any
    filtering, malformed ones included.

    Raises:
        ConfigurationError: If *page_url* is not an absolute http(s) URL.
        UnsupportedFilterPattern: If *config* cannot be applied.
    """
    config = config or LinkFilterConfig()
    validate_filter_config(config)
    if resolve_link(page_url or "", page_url or "") is None:
        raise ConfigurationError(f"Page URL must be an absolute http(s) URL, got {page_url!r}")

    base_domain = domain_of(page_url)
    total = 0
    accepted: List[CandidateLink] = []

    for element in soup.select(config.link_selector):
        href = element.get("href")
        if not isinstance(href, str):
            continue
        total += 1
        url = resolve_link(href, page_url)
        if url is None:
            continue
        link = CandidateLink(
            url=url,
            text=inline_text(element),
            parent_text=inline_text(element.parent),
            domain=domain_of(url),
        )
        if _passes_filters(link, base_domain, config):
            accepted.append(link)

    seen: set[str] = set()
    unique: List[CandidateLink] = []
    for link in accepted:
        if link.url in seen:
            continue
        seen.add(link.url)
        unique.append(link)

    result = DiscoveryResult(
        total_found=total,
        unique_count=len(unique),
        links=unique[: config.max_links],
    )
    logger.info(
        "Found %d links on %s, %d unique candidates, keeping %d",
        total, page_url, len(unique), len(result.links),
    )
    return result
