# ABOUTME: The `lyyyra download` command for fetching and importing all song data.
# ABOUTME: Runs only the stages whose readiness flags are not yet set.

import click
from rich.console import Console

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("download")
@click.pass_obj
def download(config: AppConfig) -> None:
    """Download song archives and PDFs, then import songs as needed."""
    with running_app(config, console) as app:
        app.startup()
        with console.status("Preparing song data..."):
            result = app.prepare_data()
        current = app.get_status()

    if result is not None:
        console.print(f"Imported [bold]{result.added}[/bold] song(s)", end="")
        if result.errors:
            console.print(f", [red]{result.errors}[/red] error(s)", end="")
        console.print()
    if current.songs_ready and current.database_ready and current.web_resources_ready:
        console.print("[green]All song data ready.[/green]")
