# ABOUTME: The `lyyyra reset` command for wiping stored data and preparing it again.

import click
from rich.console import Console

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("reset")
@click.confirmation_option(prompt="Delete all downloaded songs, PDFs, and the database?")
@click.pass_obj
def reset(config: AppConfig) -> None:
    """Delete the data directory, then download and import everything again."""
    with running_app(config, console) as app:
        with console.status("Resetting song data..."):
            result = app.reset_data()

    added = result.added if result is not None else 0
    console.print(f"[green]Data reset.[/green] Imported {added} song(s).")
