# ABOUTME: The `lyyyra sort` command for saving the default song list order.

import click
from rich.console import Console

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("sort")
@click.argument("option")
@click.pass_obj
def sort(config: AppConfig, option: str) -> None:
    """Save the default sort order (entry, title, authorMusic, authorLyric).

    Unsupported values fall back to entry.
    """
    with running_app(config, console) as app:
        saved = app.save_sorting(option)
    console.print(f"Sorting set to [bold]{saved.value}[/bold]")
