"""Commands for browsing, searching and pruning stored stories."""

import typer

from storyscraper.db import get_connection, init_db
from storyscraper.db.stories import (
    delete_story,
    list_stories,
    mark_story_read,
    search_stories,
)

stories_app = typer.Typer(help="List, search, show and delete stored stories.", no_args_is_help=True)


def _echo_rows(stories) -> None:
    if not stories:
        typer.echo("No stories found.")
        return
    for s in stories:
        author = f" by {s.author}" if s.author else ""
        typer.echo(f" - [{s.id}] {s.title}{author} ({s.word_count} words, {s.domain})")


@stories_app.command("list")
def stories_list(
    domain: str = typer.Option(None, "--domain", help="Only show stories from this domain."),
) -> None:
    """List stored stories, newest first."""
    conn = get_connection()
    init_db(conn)

    try:
        _echo_rows(list_stories(conn, domain=domain))
    finally:
        conn.close()


@stories_app.command("search")
def stories_search(
    query: str = typer.Argument("", help="Text to find in title, author or content."),
    domain: str = typer.Option(None, "--domain", help="Only stories whose domain contains this."),
    min_words: int = typer.Option(None, "--min-words", help="Minimum word count."),
    max_words: int = typer.Option(None, "--max-words", help="Maximum word count."),
    limit: int = typer.Option(50, "--limit", help="Maximum results."),
    titles_only: bool = typer.Option(False, "--titles-only", help="Search titles only."),
) -> None:
    """Search stored stories, newest first."""
    conn = get_connection()
    init_db(conn)

    try:
        results = search_stories(
            conn,
            query,
            search_author=not titles_only,
            search_content=not titles_only,
            min_word_count=min_words,
            max_word_count=max_words,
            domain=domain,
            limit=limit,
        )
        _echo_rows(results)
    finally:
        conn.close()


@stories_app.command("show")
def stories_show(
    story_id: int = typer.Argument(..., help="Story id."),
) -> None:
    """Print one story in full and count it as read."""
    conn = get_connection()
    init_db(conn)

    try:
        story = mark_story_read(conn, story_id)
        if story is None:
            typer.echo(f"Story not found: {story_id}")
            raise typer.Exit(code=1)

        typer.echo(story.title)
        if story.author:
            typer.echo(f"by {story.author}")
        typer.echo(f"{story.url} (read {story.read_count}x)")
        typer.echo("")
        typer.echo(story.content)
    finally:
        conn.close()


@stories_app.command("delete")
def stories_delete(
    story_id: int = typer.Argument(..., help="Story id."),
) -> None:
    """Delete a stored story so its URL can be scraped again."""
    conn = get_connection()
    init_db(conn)

    try:
        if delete_story(conn, story_id) == 0:
            typer.echo(f"Story not found: {story_id}")
            raise typer.Exit(code=1)
        typer.echo(f"Deleted story {story_id}")
    finally:
        conn.close()
