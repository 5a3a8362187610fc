"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass
class Story:
    id: int
    url: str
    title: str
    content: str
    author: Optional[str]
    word_count: int
    domain: str
    scraped_at: int
    read_count: int = 0
    last_read: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
