"""Helpers over the parsed page tree (BeautifulSoup).

Every extractor reads the page through these few functions so that text,
class and id handling is identical across title, author, content and link
extraction.
"""

from __future__ import annotations

import copy
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction

# The stdlib parser keeps behaviour identical on every install.
PARSER = "html.parser"

# Elements that start a new line of text when rendered.
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "td", "th", "tr", "ul",
}

# Elements whose text is never visible page text.
INVISIBLE_TAGS = {"script", "style", "noscript", "template"}

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_INLINE_SPACE = re.compile(r"[ \t\r\f\v\xa0]+")


def parse_document(html: str) -> BeautifulSoup:
    """Parse rendered HTML into a queryable tree."""
    return BeautifulSoup(html or "", PARSER)


def copy_document(soup: BeautifulSoup) -> BeautifulSoup:
    """Return an independent copy that can be pruned without side effects."""
    return copy.copy(soup)


def _collect(node: Tag, parts: List[str]) -> None:
    for child in node.children:
        if isinstance(child, Tag):
            if child.name in INVISIBLE_TAGS:
                continue
            block = child.name in BLOCK_TAGS
            if block:
                parts.append("\n")
            _collect(child, parts)
            if block:
                parts.append("\n")
        elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
            parts.append(str(child))


def element_text(node: Optional[Tag]) -> str:
    """Visible text of *node*, one line per block element, trimmed.

    Runs of inline whitespace collapse to a single space and blank lines are
    dropped, so ``len()`` and line counts reflect what a reader sees.
    """
    if node is None:
        return ""
    parts: List[str] = []
    _collect(node, parts)
    lines = (_INLINE_SPACE.sub(" ", line).strip() for line in "".join(parts).split("\n"))
    return "\n".join(line for line in lines if line)


def inline_text(node: Optional[Tag]) -> str:
    """Visible text of *node* on a single line."""
    return " ".join(element_text(node).split())


def class_string(node: Tag) -> str:
    """Lower-cased ``class`` attribute as a single space-separated string."""
    value = node.get("class") or []
    if isinstance(value, str):
        return value.lower()
    return " ".join(value).lower()


def id_string(node: Tag) -> str:
    value = node.get("id") or ""
    return value.lower() if isinstance(value, str) else " ".join(value).lower()


def non_empty_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


def average_line_length(text: str) -> float:
    """``len(text)`` divided by the number of non-empty lines (0 for no lines)."""
    lines = non_empty_lines(text)
    return len(text) / len(lines) if lines else 0.0


def select_first(soup: BeautifulSoup, selector: str) -> Optional[Tag]:
    """First element matching *selector*, or ``None``."""
    return soup.select_one(selector)
