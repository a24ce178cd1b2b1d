# ABOUTME: Logging setup for the command line: Rich console output plus an append-only log file.
# ABOUTME: Library modules only create loggers; handlers are installed here once.

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_file: Path | None = None, *, verbose: bool = False) -> None:
    """Install console and file handlers on the lyyyra logger."""
    logger = logging.getLogger("lyyyra")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot open log file %s: %s; logging to console only", log_file, exc)
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            logger.addHandler(file_handler)
