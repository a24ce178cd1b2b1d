# ABOUTME: Shared pytest fixtures for Lyyyra tests.
# ABOUTME: Provides EZ/KK song files, a test-run config, and databases populated from fixtures.

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from lyyyra.config import AppConfig
from lyyyra.core.importer import import_songbooks
from lyyyra.db.catalog import SongCatalog
from lyyyra.db.connection import open_songbook_db
from tests.fixtures.song_xml import (
    EZ_SONG_XML,
    KK_SONG_XML,
    MALFORMED_XML,
    write_sample_songbooks,
    write_song,
)


@pytest.fixture
def ez_song_file(tmp_path: Path) -> Path:
    """A single EZ song file (entry 288, two verses, two authors)."""
    return write_song(tmp_path / "EZ", "288.xml", EZ_SONG_XML)


@pytest.fixture
def kk_song_file(tmp_path: Path) -> Path:
    """A single KK song file (hymn 065, three verse markers)."""
    return write_song(tmp_path / "KK", "065.xml", KK_SONG_XML)


@pytest.fixture
def malformed_song_file(tmp_path: Path) -> Path:
    """A song file that is not well-formed XML."""
    return write_song(tmp_path / "broken", "broken.xml", MALFORMED_XML)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    """Test-run config rooted in tmp_path, with no supplemental PDFs."""
    return AppConfig.for_directory(
        tmp_path / "data", test_run=True, supplemental_pdfs=(), version="test"
    )


@pytest.fixture
def sample_songbooks(config: AppConfig) -> AppConfig:
    """Config whose songbook directory holds three EZ and two KK songs."""
    config.ensure_directories()
    write_sample_songbooks(config.songbook_dir)
    return config


@pytest.fixture
def conn(config: AppConfig) -> Iterator[sqlite3.Connection]:
    """Open connection to a fresh, fully migrated database."""
    connection = open_songbook_db(config.db_path)
    yield connection
    connection.close()


@pytest.fixture
def populated_conn(sample_songbooks: AppConfig) -> Iterator[sqlite3.Connection]:
    """Connection to a database filled from the sample songbooks."""
    connection = open_songbook_db(sample_songbooks.db_path)
    import_songbooks(sample_songbooks, SongCatalog(connection))
    yield connection
    connection.close()
