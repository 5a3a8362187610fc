"""Story extraction: turns a :class:`RawPage` into an :class:`ExtractionResult`."""

from __future__ import annotations

from typing import Any

from storyscraper.scraper.author import AUTHOR_SELECTORS, extract_author
from storyscraper.scraper.content import CONTENT_SELECTORS, extract_content
from storyscraper.scraper.document import element_text, inline_text, parse_document
from storyscraper.scraper.links import domain_of
from storyscraper.scraper.models import DEFAULT_THRESHOLDS, ExtractionResult, ExtractionThresholds, RawPage
from storyscraper.scraper.title import TITLE_SELECTORS, extract_title


def extract_story(
    raw: RawPage,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> ExtractionResult:
    """Extract title, body text and author from a rendered page.

    Never raises for sparse pages: the title falls back to ``"Untitled
    Story"``, the author to ``None`` and the content to ``""``
    (``result.is_degenerate``).
    """
    soup = parse_document(raw.html)
    return ExtractionResult(
        url=raw.url,
        title=extract_title(soup, thresholds),
        content=extract_content(soup, thresholds),
        author=extract_author(soup, thresholds),
        domain=domain_of(raw.url),
    )


def debug_extraction(raw: RawPage) -> dict[str, Any]:
    """Explain what each extraction strategy sees on *raw*.

    Lists every selector hit with its text length, the paragraph structure,
    the five largest text blocks and the final result.
    """
    soup = parse_document(raw.html)

    def hits(selectors: list[str]) -> list[dict[str, Any]]:
        found = []
        for selector in selectors:
            element = soup.select_one(selector)
            if element is not None:
                text = inline_text(element)
                found.append({"selector": selector, "length": len(text), "preview": text[:100]})
        return found

    meta = soup.find("meta", attrs={"name": "author"})
    paragraphs = [inline_text(p) for p in soup.find_all("p")]

    blocks = []
    for element in soup.find_all(["div", "section", "article", "main", "p"]):
        text = element_text(element)
        if len(text) > 100:
            blocks.append({
                "tag": element.name,
                "class": " ".join(element.get("class") or []),
                "id": element.get("id") or "",
                "length": len(text),
                "preview": text[:100],
            })
    blocks.sort(key=lambda block: block["length"], reverse=True)

    return {
        "url": raw.url,
        "title": hits(TITLE_SELECTORS),
        "content": hits(CONTENT_SELECTORS),
        "author": {
            "selectors": hits(AUTHOR_SELECTORS),
            "meta": meta.get("content") if meta is not None else None,
        },
        "structure": {
            "paragraphs": len(paragraphs),
            "paragraphChars": sum(len(p) for p in paragraphs),
            "divs": len(soup.find_all("div")),
        },
        "largestBlocks": blocks[:5],
        "result": extract_story(raw).to_dict(),
    }
