# ABOUTME: The `lyyyra headers` command for the lightweight song index.
# ABOUTME: Lists entry, title, and verse order without loading verse text.

import click
from rich.console import Console
from rich.table import Table

from lyyyra.cli.options import running_app, search_option, sort_option
from lyyyra.config import AppConfig

console = Console()


@click.command("headers")
@sort_option
@search_option
@click.pass_obj
def headers(config: AppConfig, sort_key: str | None, search_text: str) -> None:
    """List song headers sorted by title or entry."""
    with running_app(config, console) as app:
        rows = app.list_song_headers(sort_key or app.status.sorting, search_text)

    if not rows:
        console.print("[yellow]No songs found.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=5)
    table.add_column("Book", width=4)
    table.add_column("Entry", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Order", style="dim")

    for header in rows:
        table.add_row(
            str(header.id),
            header.songbook_acronym,
            header.entry_text or str(header.entry),
            header.title,
            header.verse_order,
        )

    console.print(table)
    console.print(f"\n[dim]{len(rows)} song(s)[/dim]")
