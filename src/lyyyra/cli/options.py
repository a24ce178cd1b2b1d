# ABOUTME: Shared Click options and helpers for Lyyyra CLI commands.
# ABOUTME: Provides the sort/search listing options and app construction from the context config.

from collections.abc import Iterator
from contextlib import contextmanager

import click
from rich.console import Console
from rich.markup import escape

from lyyyra.app import SongbookApp
from lyyyra.config import AppConfig
from lyyyra.errors import LyyyraError

sort_option = click.option(
    "--sort",
    "sort_key",
    default=None,
    help="Sort order: entry, title, authorMusic, authorLyric (default: saved preference).",
)

search_option = click.option(
    "--search",
    "-s",
    "search_text",
    default="",
    help="Entry number, or at least 3 characters of title, author, or lyrics.",
)


@contextmanager
def running_app(config: AppConfig, console: Console) -> Iterator[SongbookApp]:
    """Yield an app for one command; Lyyyra errors print in red and exit 1."""
    app = SongbookApp(config)
    try:
        yield app
    except LyyyraError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc
    finally:
        app.close()
