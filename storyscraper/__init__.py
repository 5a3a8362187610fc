"""storyscraper — heuristic story extraction and polite batch crawling."""

__version__ = "0.1.0"
