# ABOUTME: The `lyyyra init` command for creating or migrating the song database.
# ABOUTME: Safe to run repeatedly; reports the resulting schema version.

import click
from rich.console import Console

from lyyyra.cli.options import running_app
from lyyyra.config import AppConfig

console = Console()


@click.command("init")
@click.pass_obj
def init(config: AppConfig) -> None:
    """Create the database or migrate it to the current schema."""
    with running_app(config, console) as app:
        version = app.startup()
    console.print(f"[green]Database ready at schema version {version}:[/green] {config.db_path}")
