# ABOUTME: The `lyyyra ls` command for listing and searching songs.
# ABOUTME: Displays a Rich table with entry, title, and authors for each matching song.

import click
from rich.console import Console
from rich.table import Table

from lyyyra.cli.options import running_app, search_option, sort_option
from lyyyra.config import AppConfig

console = Console()


@click.command("ls")
@sort_option
@search_option
@click.pass_obj
def ls(config: AppConfig, sort_key: str | None, search_text: str) -> None:
    """List songs, optionally filtered by a search text."""
    with running_app(config, console) as app:
        songs = app.list_songs(sort_key or app.status.sorting, search_text)

    if not songs:
        console.print("[yellow]No songs found.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=5)
    table.add_column("Book", width=4)
    table.add_column("Entry", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Music")
    table.add_column("Lyrics")

    for song in songs:
        table.add_row(
            str(song.id),
            song.songbook_acronym or "",
            song.entry_text or str(song.entry),
            song.title,
            song.author_music or "",
            song.author_lyric or "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(songs)} song(s)[/dim]")
