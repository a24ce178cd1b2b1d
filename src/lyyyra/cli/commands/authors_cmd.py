# ABOUTME: The `lyyyra authors` command for listing a song's author credits.

import click
from rich.console import Console
from rich.table import Table

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("authors")
@click.argument("song_id", type=int)
@click.pass_obj
def authors(config: AppConfig, song_id: int) -> None:
    """Show the authors of a song by ID."""
    with running_app(config, console) as app:
        author_credits = app.get_authors(song_id)

    if not author_credits:
        console.print(f"[yellow]No authors recorded for song {song_id}.[/yellow]")
        return

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Role", style="bold", width=8)
    table.add_column("Author")
    for credit in author_credits:
        table.add_row(credit.role, credit.value)
    console.print(table)
