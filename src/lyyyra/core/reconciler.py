# ABOUTME: Status reconciliation against what is actually on disk and in the database.
# ABOUTME: Recomputes readiness flags so a restarted app reflects the real data state.

import logging
import sqlite3
from dataclasses import dataclass

from lyyyra.config import AppConfig
from lyyyra.core.status import AppStatus
from lyyyra.db.connection import connect
from lyyyra.db.sorting import SortOption, is_valid_sort_option

logger = logging.getLogger(__name__)


@dataclass
class ReadinessCheck:
    """Readiness flags derived from files and the database."""

    songs_ready: bool
    database_ready: bool
    web_resources_ready: bool


def _count_matches(config: AppConfig, count: int, what: str) -> bool:
    if config.test_run:
        return count > 0
    if count != config.expected_song_count:
        logger.warning(
            "Unexpected number of %s: found %d, expected %d",
            what, count, config.expected_song_count,
        )
        return False
    return True


def has_downloaded_songs(config: AppConfig) -> bool:
    """Whether the primary songbook directory holds the expected XML files.

    Falls back to the songbook root for the older flat layout.
    """
    primary = config.songbooks[0] if config.songbooks else None
    candidates = [config.songbook_dir]
    if primary is not None:
        candidates.insert(0, config.songbook_path(primary))

    for directory in candidates:
        if directory.is_dir():
            count = sum(
                1
                for entry in directory.iterdir()
                if entry.is_file() and entry.suffix.lower() == ".xml"
            )
            return _count_matches(config, count, "XML files")

    logger.warning("Songbook directory %s does not exist", config.songbook_dir)
    return False


def has_database_content(config: AppConfig) -> bool:
    """Whether the database exists and holds the expected number of songs."""
    if not config.db_path.exists():
        return False

    try:
        with connect(config.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM songs").fetchone()[0]
    except sqlite3.Error as exc:
        logger.warning("Failed to verify database contents: %s", exc)
        return False

    return _count_matches(config, count, "songs in database")


def has_pdf_sources(config: AppConfig) -> bool:
    """Whether every supplemental PDF is present in the PDF directory."""
    for pdf in config.supplemental_pdfs:
        target = config.pdf_dir / pdf.target_name
        if not target.is_file():
            logger.warning("Missing supplemental PDF %s", target)
            return False
    return True


def check_readiness(config: AppConfig) -> ReadinessCheck:
    """Inspect disk and database state."""
    return ReadinessCheck(
        songs_ready=has_downloaded_songs(config),
        database_ready=has_database_content(config),
        web_resources_ready=has_pdf_sources(config),
    )


def reconcile_status(config: AppConfig, status: AppStatus) -> bool:
    """Overwrite stored readiness flags with the observed state.

    Also resets an invalid sort preference to entry order.

    Returns:
        True if the status was changed and should be saved.
    """
    observed = check_readiness(config)
    updated = False

    if (
        observed.songs_ready != status.songs_ready
        or observed.database_ready != status.database_ready
        or observed.web_resources_ready != status.web_resources_ready
    ):
        logger.info(
            "Reconciling stored status flags: songs_ready=%s database_ready=%s "
            "web_resources_ready=%s",
            observed.songs_ready, observed.database_ready, observed.web_resources_ready,
        )
        status.songs_ready = observed.songs_ready
        status.database_ready = observed.database_ready
        status.web_resources_ready = observed.web_resources_ready
        updated = True

    if not is_valid_sort_option(status.sorting):
        logger.info("Resetting invalid sorting option %r", status.sorting)
        status.sorting = SortOption.ENTRY.value
        updated = True

    return updated
