"""StoryScraper CLI — entry-point for all operations.

Usage:
    storyscraper --help

Command groups:
    db       → database setup
    scrape   → extract one story page
    debug    → show what each extraction strategy sees
    links    → list candidate story links on a page
    crawl    → discover links on a page and scrape them
    stories  → list / search / show / delete stored stories
"""

from __future__ import annotations

import json
from typing import List, Optional

import typer

from storyscraper.config import configure_logging, settings
from storyscraper.db import get_connection, init_db
from storyscraper.db.migrations import current_version
from storyscraper.errors import StoryScraperError

from cli.commands.stories import stories_app

app = typer.Typer(
    name="storyscraper",
    help="StoryScraper CLI.",
    no_args_is_help=True,
)
app.add_typer(stories_app, name="stories")


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="DEBUG | INFO | WARNING."),
) -> None:
    configure_logging(log_level)


def _filter_config(
    selector: str,
    pattern: Optional[List[str]],
    exclude: Optional[List[str]],
    any_domain: bool,
    max_links: Optional[int],
    min_length: Optional[int],
    keyword: Optional[List[str]],
):
    from storyscraper.scraper.models import LinkFilterConfig

    options: dict = {"link_selector": selector, "same_domain_only": not any_domain}
    if pattern:
        options["filter_patterns"] = pattern
    if exclude:
        options["exclude_patterns"] = exclude
    if max_links is not None:
        options["max_links"] = max_links
    if min_length is not None:
        options["min_content_length"] = min_length
    if keyword:
        options["story_keywords"] = keyword
    return LinkFilterConfig(**options)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    try:
        init_db(conn)
        version = current_version(conn)
    finally:
        conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path} (schema v{version})")


# ---------------------------------------------------------------------------
# Extraction commands
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="Story URL to scrape."),
    renderer: Optional[str] = typer.Option(None, help="browser | http"),
) -> None:
    """Scrape one story page, store it, and print the extracted text."""
    from storyscraper.crawl.pipeline import open_context, scrape_one

    typer.echo(f"[scrape] Fetching {url!r} …")
    try:
        with open_context(renderer=renderer) as ctx:
            outcome = scrape_one(url, ctx)
    except StoryScraperError as exc:
        typer.echo(f"[scrape] Error: {exc}")
        raise typer.Exit(1)

    if outcome.error:
        typer.echo(f"[scrape] Failed: {outcome.error}")
        raise typer.Exit(1)
    if outcome.reason:
        typer.echo(f"[scrape] Skipped: {outcome.reason.value}")
        return

    story = outcome.result
    typer.echo(f"[scrape] Title  : {story.title}")
    typer.echo(f"[scrape] Author : {story.author or '(none)'}")
    typer.echo(f"[scrape] Words  : {story.word_count}")
    typer.echo("")
    typer.echo(story.content)


@app.command("debug")
def debug(
    url: str = typer.Option(..., help="Page URL to inspect."),
    renderer: Optional[str] = typer.Option(None, help="browser | http"),
) -> None:
    """Print every title/content/author candidate found on a page as JSON."""
    from storyscraper.scraper.extractor import debug_extraction
    from storyscraper.scraper.fetcher import make_renderer

    try:
        with make_renderer(renderer) as session:
            page = session.render(url)
    except StoryScraperError as exc:
        typer.echo(f"[debug] Error: {exc}")
        raise typer.Exit(1)
    typer.echo(json.dumps(debug_extraction(page), indent=2))


# ---------------------------------------------------------------------------
# Link discovery / batch crawl
# ---------------------------------------------------------------------------
_SELECTOR = typer.Option("a[href]", "--selector", help="CSS selector for link elements.")
_PATTERN = typer.Option(None, "--pattern", help="Only keep links containing this text (repeatable).")
_EXCLUDE = typer.Option(None, "--exclude", help="Drop URLs containing this text (repeatable).")
_ANY_DOMAIN = typer.Option(False, "--any-domain", help="Also follow links to other domains.")
_MAX_LINKS = typer.Option(None, "--max-links", help="Maximum links to keep.")
_MIN_LENGTH = typer.Option(None, "--min-length", help="Skip stories shorter than this (chars).")
_KEYWORD = typer.Option(None, "--keyword", help="Story keyword (repeatable).")


@app.command("links")
def links(
    url: str = typer.Option(..., help="Listing page URL."),
    selector: str = _SELECTOR,
    pattern: Optional[List[str]] = _PATTERN,
    exclude: Optional[List[str]] = _EXCLUDE,
    any_domain: bool = _ANY_DOMAIN,
    max_links: Optional[int] = _MAX_LINKS,
    keyword: Optional[List[str]] = _KEYWORD,
    renderer: Optional[str] = typer.Option(None, help="browser | http"),
) -> None:
    """List the story links that a crawl of URL would visit."""
    from storyscraper.crawl.pipeline import find_links, open_context

    config = _filter_config(selector, pattern, exclude, any_domain, max_links, None, keyword)
    try:
        with open_context(renderer=renderer) as ctx:
            found = find_links(url, config, ctx)
    except StoryScraperError as exc:
        typer.echo(f"[links] Error: {exc}")
        raise typer.Exit(1)

    typer.echo(
        f"[links] {found.total_found} links found, {found.unique_count} candidates, "
        f"showing {len(found.links)}"
    )
    for i, link in enumerate(found.links, start=1):
        typer.echo(f"  {i}. {link.text or 'Untitled'}")
        typer.echo(f"     {link.url}")


@app.command("crawl")
def crawl(
    url: str = typer.Option(..., help="Listing page URL."),
    selector: str = _SELECTOR,
    pattern: Optional[List[str]] = _PATTERN,
    exclude: Optional[List[str]] = _EXCLUDE,
    any_domain: bool = _ANY_DOMAIN,
    max_links: Optional[int] = _MAX_LINKS,
    min_length: Optional[int] = _MIN_LENGTH,
    keyword: Optional[List[str]] = _KEYWORD,
    delay: Optional[float] = typer.Option(None, help="Seconds to wait between requests."),
    renderer: Optional[str] = typer.Option(None, help="browser | http"),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON."),
) -> None:
    """Discover story links on URL and scrape each of them in turn."""
    from storyscraper.crawl.pipeline import discover_and_crawl, open_context

    config = _filter_config(selector, pattern, exclude, any_domain, max_links, min_length, keyword)
    try:
        with open_context(renderer=renderer, delay=delay) as ctx:
            batch = discover_and_crawl(url, config, ctx)
    except StoryScraperError as exc:
        typer.echo(f"[crawl] Error: {exc}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(batch.to_dict(), indent=2))
        return

    for outcome in batch.report.outcomes:
        detail = outcome.reason.value if outcome.reason else outcome.error or ""
        typer.echo(f"  [{outcome.status.value}] {outcome.url} {detail}".rstrip())
    summary = batch.report.summary
    typer.echo(
        f"[crawl] {summary.successful} successful, {summary.skipped} skipped, "
        f"{summary.failed} failed"
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
