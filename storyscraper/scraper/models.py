"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storyscraper.config import settings

UNTITLED = "Untitled Story"

DEFAULT_EXCLUDE_PATTERNS = [
    "/css/", "/js/", "/images/",
    ".jpg", ".png", ".gif", ".pdf", ".zip", ".exe",
    "mailto:", "tel:",
]

DEFAULT_STORY_KEYWORDS = [
    "story", "chapter", "tale", "fiction", "novel", "book", "read",
]


@dataclass
class RawPage:
    """The rendered HTML for a single URL fetch."""

    url: str
    html: str
    status_code: int


@dataclass(frozen=True)
class ExtractionThresholds:
    """Length cutoffs and score weights used by the extractors.

    The defaults are tuned for fiction and blog sites; tests and callers can
    pass a modified copy (``dataclasses.replace``) to any extractor.
    """

    title_min_length: int = 3
    title_max_length: int = 200
    author_min_length: int = 1
    author_max_length: int = 100

    # ContentExtractor stages
    candidate_min_length: int = 100
    sufficient_length: int = 200
    paragraph_noise_length: int = 20
    paragraph_group_bonus: int = 20

    # ContentScorer weights
    paragraph_bonus: int = 50
    story_class_bonus: int = 100
    nav_class_penalty: int = 200
    short_line_penalty: int = 100
    short_line_length: int = 30

    # Boilerplate block heuristic
    boilerplate_line_length: int = 20
    boilerplate_min_lines: int = 5


DEFAULT_THRESHOLDS = ExtractionThresholds()


@dataclass
class TextCandidate:
    """A body-of-text candidate produced during one extraction call."""

    text: str
    source: str
    score: int = 0


@dataclass
class ExtractionResult:
    """Structured record extracted from one story page."""

    url: str
    title: str
    content: str
    author: Optional[str]
    domain: str
    word_count: int = field(init=False)

    def __post_init__(self) -> None:
        self.word_count = len(self.content.split())

    @property
    def is_degenerate(self) -> bool:
        """True when no usable body text was found."""
        return not self.content

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "domain": self.domain,
            "wordCount": self.word_count,
            "degenerate": self.is_degenerate,
        }


@dataclass
class CandidateLink:
    """A link found on a source page that may point to a story."""

    url: str
    text: str
    parent_text: str
    domain: str

    def to_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "text": self.text,
            "parentText": self.parent_text,
            "domain": self.domain,
        }


@dataclass
class DiscoveryResult:
    """Filtered links plus the raw count used for diagnostics."""

    total_found: int
    unique_count: int
    links: List[CandidateLink] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFound": self.total_found,
            "uniqueLinks": self.unique_count,
            "linksToScrape": [link.to_dict() for link in self.links],
        }


class LinkFilterConfig(BaseModel):
    """Options controlling link discovery and the batch crawl.

    Field names accept both the snake_case attribute and the camelCase alias
    used by JSON request bodies.
    """

    model_config = ConfigDict(populate_by_name=True)

    link_selector: str = Field(default="a[href]", alias="linkSelector")
    filter_patterns: List[str] = Field(default_factory=list, alias="filterPatterns")
    exclude_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        alias="excludePatterns",
    )
    same_domain_only: bool = Field(default=True, alias="sameDomainOnly")
    max_links: int = Field(
        default_factory=lambda: settings.max_links, ge=1, alias="maxLinks"
    )
    min_content_length: int = Field(
        default_factory=lambda: settings.min_content_length,
        ge=0,
        alias="minContentLength",
    )
    story_keywords: List[str] = Field(
        default_factory=lambda: list(DEFAULT_STORY_KEYWORDS),
        alias="storyKeywords",
    )


# ---------------------------------------------------------------------------
# Crawl outcomes
# ---------------------------------------------------------------------------

class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    DUPLICATE_URL = "already_exists"
    TOO_SHORT = "content_too_short"


@dataclass
class CrawlOutcome:
    """Terminal state of one candidate link."""

    url: str
    status: OutcomeStatus
    link_text: str = ""
    result: Optional[ExtractionResult] = None
    reason: Optional[SkipReason] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, url: str, result: ExtractionResult, link_text: str = "") -> CrawlOutcome:
        return cls(url=url, status=OutcomeStatus.SUCCESS, link_text=link_text, result=result)

    @classmethod
    def skipped(cls, url: str, reason: SkipReason, link_text: str = "") -> CrawlOutcome:
        return cls(url=url, status=OutcomeStatus.SKIPPED, link_text=link_text, reason=reason)

    @classmethod
    def failed(cls, url: str, error: str, link_text: str = "") -> CrawlOutcome:
        return cls(url=url, status=OutcomeStatus.FAILED, link_text=link_text, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "status": self.status.value,
            "linkText": self.link_text,
        }
        if self.result is not None:
            data["story"] = self.result.to_dict()
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class CrawlSummary:
    successful: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class CrawlReport:
    """Aggregate result of one pipeline run, in processing order."""

    outcomes: List[CrawlOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def summary(self) -> CrawlSummary:
        counts = CrawlSummary()
        for outcome in self.outcomes:
            if outcome.status is OutcomeStatus.SUCCESS:
                counts.successful += 1
            elif outcome.status is OutcomeStatus.SKIPPED:
                counts.skipped += 1
            else:
                counts.failed += 1
        return counts

    def to_dict(self, page_url: str = "", total_links_found: int = 0) -> dict[str, Any]:
        """Render the report in the shape returned by the HTTP layer."""
        return {
            "pageUrl": page_url,
            "totalLinksFound": total_links_found,
            "linksProcessed": len(self.outcomes),
            "results": [
                o.to_dict() for o in self.outcomes if o.status is not OutcomeStatus.FAILED
            ],
            "errors": [
                o.to_dict() for o in self.outcomes if o.status is OutcomeStatus.FAILED
            ],
            "summary": asdict(self.summary),
            "cancelled": self.cancelled,
        }
