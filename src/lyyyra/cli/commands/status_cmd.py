# ABOUTME: The `lyyyra status` command for showing readiness flags and preferences.
# ABOUTME: Reconciles the stored status with disk and database before printing it.

import click
from rich.console import Console
from rich.table import Table

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


def _flag(value: bool) -> str:
    return "[green]yes[/green]" if value else "[red]no[/red]"


@click.command("status")
@click.pass_obj
def status(config: AppConfig) -> None:
    """Show whether songs, database, and PDFs are ready."""
    with running_app(config, console) as app:
        current = app.get_status()

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=16)
    table.add_column("Value")

    table.add_row("Data dir", str(config.app_dir))
    table.add_row("Songs", _flag(current.songs_ready))
    table.add_row("Database", _flag(current.database_ready))
    table.add_row("PDFs", _flag(current.web_resources_ready))
    table.add_row("Sorting", current.sorting)
    if current.is_progress:
        table.add_row("Progress", f"{current.progress_message} {current.progress_percent}%")
    if current.last_save:
        table.add_row("Last save", current.last_save)
    table.add_row("Version", current.build_version)

    console.print(table)
