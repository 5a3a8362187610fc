"""Read, search and delete endpoints for stored stories.

Routes
------
GET    /stories                  List all stories (optional ?domain= filter)
POST   /stories/search           Body: {"query": "...", "options": {...}}
GET    /stories/{story_id}       Fetch a single story
POST   /stories/{story_id}/read  Count one read of a story
DELETE /stories/{story_id}       Delete a story
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from storyscraper.db.stories import (
    delete_story,
    get_story,
    list_stories,
    mark_story_read,
    search_stories,
)

router = APIRouter()


class StoryResponse(BaseModel):
    id: int
    url: str
    title: str
    content: str
    author: Optional[str]
    word_count: int
    domain: str
    scraped_at: int
    read_count: int
    last_read: Optional[int]


class SearchOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_title: bool = Field(default=True, alias="searchTitle")
    search_author: bool = Field(default=True, alias="searchAuthor")
    search_content: bool = Field(default=True, alias="searchContent")
    min_word_count: Optional[int] = Field(default=None, ge=0, alias="minWordCount")
    max_word_count: Optional[int] = Field(default=None, ge=0, alias="maxWordCount")
    domain: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=500)


class SearchRequest(BaseModel):
    query: str = ""
    options: SearchOptions = Field(default_factory=SearchOptions)


def _not_found(story_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Story not found: {story_id}")


@router.get("", response_model=list[StoryResponse])
def list_all(request: Request, domain: Optional[str] = None) -> list[dict[str, Any]]:
    """Return all stories, newest first, optionally filtered by ``domain``."""
    conn = request.app.state.db
    return [s.to_dict() for s in list_stories(conn, domain=domain)]


@router.post("/search", response_model=list[StoryResponse])
def search(body: SearchRequest, request: Request) -> list[dict[str, Any]]:
    """Substring search over title, author and content."""
    conn = request.app.state.db
    results = search_stories(conn, body.query, **body.options.model_dump())
    return [s.to_dict() for s in results]


@router.get("/{story_id}", response_model=StoryResponse)
def get_one(story_id: int, request: Request) -> dict[str, Any]:
    conn = request.app.state.db
    story = get_story(conn, story_id)
    if story is None:
        raise _not_found(story_id)
    return story.to_dict()


@router.post("/{story_id}/read", response_model=StoryResponse)
def mark_read(story_id: int, request: Request) -> dict[str, Any]:
    conn = request.app.state.db
    story = mark_story_read(conn, story_id)
    if story is None:
        raise _not_found(story_id)
    return story.to_dict()


@router.delete("/{story_id}")
def remove(story_id: int, request: Request) -> Response:
    conn = request.app.state.db
    if delete_story(conn, story_id) == 0:
        raise _not_found(story_id)
    return Response(status_code=204)
