# ABOUTME: CLI package for Lyyyra, built on Click.
# ABOUTME: Defines the root command group, builds the app config, and registers subcommands.

from pathlib import Path

import click

from lyyyra.cli.commands import (
    authors_cmd,
    download_cmd,
    headers_cmd,
    import_cmd,
    init_cmd,
    ls_cmd,
    reset_cmd,
    show_cmd,
    sort_cmd,
    status_cmd,
)
from lyyyra.config import AppConfig
from lyyyra.log import configure_logging


@click.group()
@click.version_option(package_name="lyyyra")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (default: ~/Lyyyra/<site>).",
)
@click.option(
    "--test-run",
    is_flag=True,
    default=False,
    help="Accept any non-empty songbook and cap imports at 25 files per directory.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, test_run: bool, verbose: bool) -> None:
    """Lyyyra - a songbook library with accent-insensitive search."""
    if data_dir is not None:
        config = AppConfig.for_directory(data_dir, test_run=test_run)
    else:
        config = AppConfig.from_home(test_run=test_run)
    configure_logging(config.log_file, verbose=verbose)
    ctx.obj = config


cli.add_command(init_cmd.init)
cli.add_command(import_cmd.import_songs)
cli.add_command(ls_cmd.ls)
cli.add_command(headers_cmd.headers)
cli.add_command(show_cmd.show)
cli.add_command(authors_cmd.authors)
cli.add_command(status_cmd.status)
cli.add_command(sort_cmd.sort)
cli.add_command(download_cmd.download)
cli.add_command(reset_cmd.reset)
