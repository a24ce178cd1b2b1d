# ABOUTME: Ingestion pipeline that fills the song database from per-songbook XML directories.
# ABOUTME: Dispatches each songbook to its parser and stores songs file by file.

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from lyyyra.config import TEST_RUN_FILE_LIMIT, AppConfig, SongbookSource
from lyyyra.db.catalog import SongCatalog
from lyyyra.errors import LyyyraError
from lyyyra.formats.ez import parse_ez_file
from lyyyra.formats.kk import parse_kk_file
from lyyyra.formats.xmlfile import ParseError
from lyyyra.songs.types import ParsedSong

logger = logging.getLogger(__name__)

SongParser = Callable[[Path], ParsedSong]

# Progress callback: (message, percent 0-100)
ProgressFn = Callable[[str, int], None]

PARSERS: dict[str, SongParser] = {
    "EZ": parse_ez_file,
    "KK": parse_kk_file,
}

_PROGRESS_EVERY = 10


class IngestError(LyyyraError):
    """Raised when a songbook directory cannot be imported at all."""


@dataclass
class ImportResult:
    """Summary of an ingestion run."""

    added: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)
    songbooks: list[str] = field(default_factory=list)
    missing_songbooks: list[str] = field(default_factory=list)


def list_song_files(directory: Path, *, limit: int | None = None) -> list[Path]:
    """Files directly inside a songbook directory, sorted by name.

    Subdirectories are ignored.

    Raises:
        IngestError: If the directory cannot be read or holds no files.
    """
    try:
        files = sorted(path for path in directory.iterdir() if path.is_file())
    except OSError as exc:
        raise IngestError(f"Cannot read songbook directory {directory}: {exc}") from exc

    if not files:
        logger.warning("No XML files in directory %s", directory)
        raise IngestError(f"No XML files found in {directory}")

    if limit is not None:
        files = files[:limit]
    return files


def _register_songbook(catalog: SongCatalog, source: SongbookSource) -> str:
    try:
        return catalog.get_or_create_songbook(source.acronym, source.name)
    except (ValueError, sqlite3.Error) as exc:
        raise IngestError(f"Failed to register songbook {source.acronym}: {exc}") from exc


def _import_file(
    path: Path, parser: SongParser, catalog: SongCatalog, acronym: str, result: ImportResult
) -> None:
    try:
        song = parser(path)
        catalog.add_song(song, acronym)
    except (ParseError, sqlite3.Error) as exc:
        logger.error("Failed to process %s song file %s: %s", acronym, path.name, exc)
        result.errors += 1
        result.error_details.append((path, str(exc)))
        return

    result.added += 1
    logger.debug("%s data inserted: entry=%s title=%s file=%s", acronym, song.entry_text, song.title, path.name)


def import_songbooks(
    config: AppConfig,
    catalog: SongCatalog,
    *,
    progress: ProgressFn | None = None,
) -> ImportResult:
    """Import every configured songbook whose directory is present.

    Each songbook is registered before its files are read. A file that
    fails to parse or insert is logged and counted; the run continues.
    Progress is split evenly across the songbooks being imported.

    Args:
        config: Installation layout and songbook sources.
        catalog: Catalog to write songs into.
        progress: Optional callback receiving (message, percent).

    Returns:
        ImportResult with counts and per-file error details.

    Raises:
        IngestError: If a required songbook is missing (outside test runs),
            a present directory holds no files, no parser handles a
            songbook, or a songbook cannot be registered.
    """
    result = ImportResult()

    present: list[SongbookSource] = []
    for source in config.songbooks:
        if config.songbook_path(source).is_dir():
            present.append(source)
            continue
        if source.required and not config.test_run:
            raise IngestError(f"Songbook directory not found: {config.songbook_path(source)}")
        logger.info("%s directory not found, skipping import", source.acronym)
        result.missing_songbooks.append(source.acronym)

    if not present:
        return result

    span = 100 // len(present)
    limit = TEST_RUN_FILE_LIMIT if config.test_run else None

    for index, source in enumerate(present):
        parser = PARSERS.get(source.acronym)
        if parser is None:
            raise IngestError(f"No parser registered for songbook {source.acronym}")

        files = list_song_files(config.songbook_path(source), limit=limit)
        acronym = _register_songbook(catalog, source)

        base = index * span
        total = len(files)
        for position, path in enumerate(files, start=1):
            if progress is not None and (position % _PROGRESS_EVERY == 1 or position == total):
                percent = base + int(position / total * span)
                progress(f"Importing {acronym} songs... ({position}/{total})", percent)
            _import_file(path, parser, catalog, acronym, result)

        result.songbooks.append(acronym)
        logger.info("Imported songbook %s from %d file(s)", acronym, total)

    return result
