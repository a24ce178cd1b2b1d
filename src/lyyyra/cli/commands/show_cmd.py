# ABOUTME: The `lyyyra show` command for printing a song's verses.
# ABOUTME: Prints verse text, or the projection payload as JSON with --projection.

import json

import click
from rich.console import Console
from rich.markup import escape

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig
from lyyyra.db.queries import VERSE_SEPARATOR

console = Console()


@click.command("show")
@click.argument("song_id", type=int)
@click.option(
    "--projection",
    is_flag=True,
    default=False,
    help="Print the verse order and named verses as JSON.",
)
@click.pass_obj
def show(config: AppConfig, song_id: int, projection: bool) -> None:
    """Show the verses of a song by ID."""
    with running_app(config, console) as app:
        if projection:
            payload = app.get_projection(song_id)
        else:
            verses = app.get_verses(song_id)

    if projection:
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not verses:
        console.print(f"[red]Song {song_id} not found.[/red]")
        raise SystemExit(1)

    for index, verse in enumerate(verses.split(VERSE_SEPARATOR)):
        if index:
            console.print()
        console.print(escape(verse))
