# ABOUTME: The `lyyyra import` command for loading songbook XML files into the database.
# ABOUTME: Rebuilds the song tables from the songbook directories already on disk.

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("import")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress per-file error output.")
@click.pass_obj
def import_songs(config: AppConfig, quiet: bool) -> None:
    """Re-import every songbook found under the songbook directory."""
    with running_app(config, console) as app:
        app.startup()
        with Progress(console=console, transient=True) as progress:
            task = progress.add_task("Importing songs", total=100)

            def report(message: str, percent: int) -> None:
                progress.update(task, completed=percent, description=message)

            result = app.fill_database(progress=report)
        app.refresh_status()

    if not quiet:
        for path, error in result.error_details:
            console.print(f"  [red]Error:[/red] {escape(path.name)}: {escape(error)}")
    for acronym in result.missing_songbooks:
        console.print(f"[yellow]Songbook {acronym} not present, skipped.[/yellow]")

    summary = f"[bold]{result.added}[/bold] added"
    if result.errors:
        summary += f", [red]{result.errors}[/red] error(s)"
    console.print(f"\n{summary} ({', '.join(result.songbooks) or 'no songbooks'})")
