"""Tests for title extraction and cleaning."""

from __future__ import annotations

import pytest

from storyscraper.scraper.document import parse_document
from storyscraper.scraper.models import UNTITLED
from storyscraper.scraper.title import clean_title, extract_title


class TestCleanTitle:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Moonlight — Read Online Free", "Moonlight"),
            ("The Long Night | FictionHub", "The Long Night"),
            ("Dark Woods - Read Online", "Dark Woods"),
            ("Chapter: The Long Night | FictionHub", "The Long Night"),
            ("Story: A Quiet Place", "A Quiet Place"),
            ("The Lost Key (Complete)", "The Lost Key"),
            ("Moonlight: Free", "Moonlight"),
            ("Moonlight, read online", "Moonlight"),
            ("  The   Harbour\n Lights  ", "The Harbour Lights"),
        ],
    )
    def test_cleans(self, raw: str, expected: str) -> None:
        assert clean_title(raw) == expected

    def test_keeps_hyphenated_words(self) -> None:
        assert clean_title("Spider-Man Returns") == "Spider-Man Returns"

    @pytest.mark.parametrize("raw", ["Born Free", "Set Me Free", "Read Online"])
    def test_qualifier_word_in_title_is_kept(self, raw: str) -> None:
        assert clean_title(raw) == raw

    def test_role_word_without_colon_is_kept(self) -> None:
        assert clean_title("Story of the Year") == "Story of the Year"

    @pytest.mark.parametrize(
        "raw",
        [
            "Moonlight — Read Online Free",
            "Chapter: Part: The Tower (Draft) (v2) - Site",
            "Free (Free) free",
            "Tales (Part 1) | Home — Library",
            "",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        once = clean_title(raw)
        assert clean_title(once) == once

    def test_empty_string(self) -> None:
        assert clean_title("") == ""


class TestExtractTitle:
    def test_prefers_story_title_class(self) -> None:
        soup = parse_document(
            "<html><head><title>Site Name</title></head><body>"
            "<h1>Welcome to Site Name</h1>"
            '<h1 class="story-title">The Midnight Train</h1>'
            "</body></html>"
        )
        assert extract_title(soup) == "The Midnight Train"

    def test_skips_candidates_outside_length_bounds(self) -> None:
        soup = parse_document("<body><h1>Hi</h1><h2>A Proper Heading</h2></body>")
        assert extract_title(soup) == "A Proper Heading"

    def test_falls_back_to_document_title(self) -> None:
        soup = parse_document(
            "<html><head><title>Rainfall | Short Stories Online</title></head>"
            "<body><p>text</p></body></html>"
        )
        assert extract_title(soup) == "Rainfall"

    def test_untitled_when_nothing_qualifies(self) -> None:
        soup = parse_document("<html><body><p>x</p></body></html>")
        assert extract_title(soup) == UNTITLED

    def test_title_is_cleaned(self) -> None:
        soup = parse_document('<h1 class="entry-title">Chapter: Embers (Part 2)</h1>')
        assert extract_title(soup) == "Embers"
