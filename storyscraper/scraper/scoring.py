"""Additive quality score for body-text candidates."""

from __future__ import annotations

from bs4 import Tag

from storyscraper.scraper.document import average_line_length, class_string
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, ExtractionThresholds

STORY_CLASS_KEYWORDS = ["story", "chapter", "content", "text", "body", "post"]
NAV_CLASS_KEYWORDS = ["nav", "menu", "sidebar", "footer", "header"]


def score_content(
    text: str,
    class_attr: str = "",
    paragraph_count: int = 0,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """Score *text* as body content.

    ``len(text)`` plus a bonus per ``<p>`` child and per story keyword in the
    class attribute, minus a penalty per navigation keyword and a penalty when
    lines are short on average (link lists rather than prose).
    """
    class_attr = class_attr.lower()
    score = len(text) + thresholds.paragraph_bonus * paragraph_count
    score += thresholds.story_class_bonus * sum(k in class_attr for k in STORY_CLASS_KEYWORDS)
    score -= thresholds.nav_class_penalty * sum(k in class_attr for k in NAV_CLASS_KEYWORDS)
    if average_line_length(text) < thresholds.short_line_length:
        score -= thresholds.short_line_penalty
    return score


def score_element(
    element: Tag,
    text: str,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    return score_content(
        text,
        class_attr=class_string(element),
        paragraph_count=len(element.find_all("p")),
        thresholds=thresholds,
    )
