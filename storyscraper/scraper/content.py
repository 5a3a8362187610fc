"""Body-text extraction.

Three stages, each run only when the previous one produced too little text:

1. score every match of :data:`CONTENT_SELECTORS` after boilerplate removal;
2. group consecutive sibling paragraphs and keep the best group;
3. keep the largest block-level container that is not chrome.

The winner is normalised by :func:`clean_content`.  A sparse page may yield
an empty string; that is reported to the caller, not raised.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from storyscraper.scraper.boilerplate import is_likely_boilerplate, remove_boilerplate
from storyscraper.scraper.document import copy_document, element_text, inline_text
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, ExtractionThresholds, TextCandidate
from storyscraper.scraper.scoring import score_content, score_element

logger = logging.getLogger(__name__)

CONTENT_SELECTORS = [
    "article",
    ".story-content", ".story-text", ".story-body",
    ".chapter-content", ".chapter-text", ".chapter-body",
    ".post-content", ".post-body", ".post-text",
    ".content", ".main-content",
    "main",
    ".entry-content",
    "#content",
    ".text-content",
]

BLOCK_CONTAINERS = ["div", "section", "article", "main"]

_LEADING_BOILERPLATE = re.compile(
    r"^(?:home|back to top|skip to content|menu|navigation|share|like|tweet|pin)\b[\s:|>/-]*",
    re.IGNORECASE,
)
# A notice is a copyright mark followed by a year; prose that merely
# mentions copyright has no year right after the mark.
_NOTICE_MARK = r"(?:copyright\s*(?:©|\(c\))?|©|\(c\))\s*\d{4}(?:\s*[-–]\s*\d{4})?"
_LEADING_NOTICE = re.compile(rf"^{_NOTICE_MARK}[^.]{{0,80}}\.\s*", re.IGNORECASE)
_TRAILING_NOTICE = re.compile(rf"(?:^|\s){_NOTICE_MARK}[^©]{{0,100}}$", re.IGNORECASE)
_RIGHTS_RESERVED = re.compile(r"^all rights reserved\.?\s*|\s*\ball rights reserved\.?$", re.IGNORECASE)


def clean_content(content: str) -> str:
    """Collapse whitespace and strip leading chrome phrases.

    Copyright notices are removed only at the very start or end of the
    text; the same words inside the story are left alone.
    """
    if not content:
        return ""
    content = " ".join(content.split())
    previous = None
    while previous != content:
        previous = content
        content = _LEADING_BOILERPLATE.sub("", content).strip()
        content = _LEADING_NOTICE.sub("", content)
        content = _TRAILING_NOTICE.sub("", content)
        content = _RIGHTS_RESERVED.sub("", content).strip()
    return content


def _best_selector_candidate(
    soup: BeautifulSoup, thresholds: ExtractionThresholds
) -> Optional[TextCandidate]:
    best: Optional[TextCandidate] = None
    for selector in CONTENT_SELECTORS:
        for element in soup.select(selector):
            text = element_text(element)
            if len(text) <= thresholds.candidate_min_length:
                continue
            score = score_element(element, text, thresholds)
            if best is None or score > best.score:
                best = TextCandidate(text=text, source=selector, score=score)
    return best


def _paragraph_groups(soup: BeautifulSoup, thresholds: ExtractionThresholds) -> List[List[str]]:
    groups: List[List[str]] = []
    current: List[str] = []
    current_parent: Optional[Tag] = None

    for paragraph in soup.find_all("p"):
        text = inline_text(paragraph)
        if len(text) <= thresholds.paragraph_noise_length:
            if current:
                groups.append(current)
            current, current_parent = [], None
            continue
        if current and paragraph.parent is not current_parent:
            groups.append(current)
            current = []
        current.append(text)
        current_parent = paragraph.parent

    if current:
        groups.append(current)
    return groups


def _best_paragraph_group(
    soup: BeautifulSoup, thresholds: ExtractionThresholds
) -> Optional[TextCandidate]:
    best: Optional[TextCandidate] = None
    for group in _paragraph_groups(soup, thresholds):
        text = "\n\n".join(group)
        score = len(text) + thresholds.paragraph_group_bonus * len(group)
        if best is None or score > best.score:
            best = TextCandidate(text=text, source="p-group", score=score)
    return best


def _largest_block(
    soup: BeautifulSoup, thresholds: ExtractionThresholds
) -> Optional[TextCandidate]:
    best: Optional[TextCandidate] = None
    for element in soup.find_all(BLOCK_CONTAINERS):
        text = element_text(element)
        if len(text) <= thresholds.candidate_min_length:
            continue
        if is_likely_boilerplate(element, text, thresholds):
            continue
        if best is None or len(text) > len(best.text):
            best = TextCandidate(text=text, source=element.name, score=len(text))
    return best


def _largest_paragraph(soup: BeautifulSoup) -> str:
    return max((inline_text(p) for p in soup.find_all("p")), key=len, default="")


def _plain_score(text: str, thresholds: ExtractionThresholds) -> int:
    return score_content(text, thresholds=thresholds)


def extract_content(
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Return the cleaned main body text of the page.

    *soup* is not modified: boilerplate is removed from a copy.
    """
    tree = copy_document(soup)
    remove_boilerplate(tree)

    chosen = _best_selector_candidate(tree, thresholds)
    text = chosen.text if chosen else ""
    if chosen:
        logger.debug("Selector stage picked %r (score %d)", chosen.source, chosen.score)

    if len(text) < thresholds.sufficient_length:
        group = _best_paragraph_group(tree, thresholds)
        if group and len(group.text) > len(text):
            logger.debug("Paragraph stage picked %d chars", len(group.text))
            text = group.text

    if len(text) < thresholds.sufficient_length:
        block = _largest_block(tree, thresholds)
        if block and len(block.text) > len(text):
            logger.debug("Largest-block stage picked <%s> with %d chars", block.source, len(block.text))
            text = block.text

    content = clean_content(text)

    # A single paragraph is the floor: the stages never return less.
    floor = clean_content(_largest_paragraph(tree))
    if _plain_score(floor, thresholds) > _plain_score(content, thresholds):
        logger.debug("Falling back to the largest single paragraph")
        content = floor
    return content
