# ABOUTME: Integration tests for importing songbook directories into the database.
# ABOUTME: Exercises parsing, dispatch per songbook, error tolerance, progress, and queries end to end.

import logging
import shutil
import sqlite3
from dataclasses import replace
from pathlib import Path

import pytest

from lyyyra.config import AppConfig
from lyyyra.core.importer import IngestError, import_songbooks, list_song_files
from lyyyra.db.catalog import SongCatalog
from lyyyra.db.queries import SongQueries
from tests.fixtures.song_xml import EZ_SONG_XML, MALFORMED_XML, ez_song_xml, write_song


@pytest.fixture()
def catalog(conn: sqlite3.Connection) -> SongCatalog:
    return SongCatalog(conn)


class TestListSongFiles:
    """Tests for list_song_files()."""

    def test_sorted_files_only(self, tmp_path: Path) -> None:
        """Files are sorted by name and subdirectories are skipped."""
        write_song(tmp_path, "b.xml", "<song/>")
        write_song(tmp_path, "a.xml", "<song/>")
        (tmp_path / "nested").mkdir()
        assert [p.name for p in list_song_files(tmp_path)] == ["a.xml", "b.xml"]

    def test_limit(self, tmp_path: Path) -> None:
        """A limit keeps the first files by name."""
        for i in range(5):
            write_song(tmp_path, f"{i}.xml", "<song/>")
        assert [p.name for p in list_song_files(tmp_path, limit=2)] == ["0.xml", "1.xml"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        """A directory with no files raises IngestError."""
        (tmp_path / "nested").mkdir()
        with pytest.raises(IngestError, match="No XML files"):
            list_song_files(tmp_path)

    def test_missing_directory(self, tmp_path: Path) -> None:
        """An unreadable directory raises IngestError."""
        with pytest.raises(IngestError, match="Cannot read"):
            list_song_files(tmp_path / "missing")


class TestImportSongbooks:
    """Tests for import_songbooks() over both dialects."""

    def test_imports_both_songbooks(self, sample_songbooks: AppConfig, catalog: SongCatalog) -> None:
        """Every sample song is stored under its songbook."""
        result = import_songbooks(sample_songbooks, catalog)
        assert result.added == 5
        assert result.errors == 0
        assert result.songbooks == ["EZ", "KK"]
        assert catalog.count_songs("EZ") == 3
        assert catalog.count_songs("KK") == 2

    def test_registers_songbooks(self, sample_songbooks: AppConfig, catalog: SongCatalog) -> None:
        """The KK songbook is registered with its display name."""
        import_songbooks(sample_songbooks, catalog)
        assert ("KK", "Katolický kancionál") in catalog.list_songbooks()

    def test_kk_rows(self, sample_songbooks: AppConfig, conn: sqlite3.Connection) -> None:
        """KK songs keep the raw hymn number and lose the title prefix."""
        import_songbooks(sample_songbooks, SongCatalog(conn))
        row = conn.execute(
            "SELECT entry, entry_text, title FROM songs WHERE songbook_acronym = 'KK' ORDER BY entry"
        ).fetchall()
        assert [tuple(r) for r in row] == [
            (65, "065", "Litanie k nejsvětějšímu Srdci Ježíšovu"),
            (511, "511A", "Bůh náš silná skála"),
        ]

    def test_kk_has_no_authors(self, sample_songbooks: AppConfig, conn: sqlite3.Connection) -> None:
        """Only EZ songs contribute author rows."""
        import_songbooks(sample_songbooks, SongCatalog(conn))
        count = conn.execute(
            "SELECT COUNT(*) FROM authors a JOIN songs s ON s.id = a.song_id "
            "WHERE s.songbook_acronym = 'KK'"
        ).fetchone()[0]
        assert count == 0

    def test_bad_file_skipped(
        self,
        sample_songbooks: AppConfig,
        catalog: SongCatalog,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A malformed file is logged and counted; the rest still import."""
        write_song(sample_songbooks.songbook_dir / "EZ", "100.xml", MALFORMED_XML)

        with caplog.at_level(logging.ERROR, logger="lyyyra"):
            result = import_songbooks(sample_songbooks, catalog)

        assert result.added == 5
        assert result.errors == 1
        assert result.error_details[0][0].name == "100.xml"
        assert "Failed to process EZ song file 100.xml" in caplog.text

    def test_missing_optional_songbook(self, sample_songbooks: AppConfig, catalog: SongCatalog) -> None:
        """A missing KK directory is skipped and reported."""
        shutil.rmtree(sample_songbooks.songbook_dir / "KK")
        result = import_songbooks(sample_songbooks, catalog)
        assert result.songbooks == ["EZ"]
        assert result.missing_songbooks == ["KK"]
        assert result.added == 3

    def test_missing_required_songbook(self, sample_songbooks: AppConfig, catalog: SongCatalog) -> None:
        """Outside test runs a missing EZ directory is an error."""
        shutil.rmtree(sample_songbooks.songbook_dir / "EZ")
        with pytest.raises(IngestError, match="not found"):
            import_songbooks(replace(sample_songbooks, test_run=False), catalog)

    def test_missing_required_tolerated_in_test_run(
        self, sample_songbooks: AppConfig, catalog: SongCatalog
    ) -> None:
        """Test runs import whatever is present."""
        shutil.rmtree(sample_songbooks.songbook_dir / "EZ")
        result = import_songbooks(sample_songbooks, catalog)
        assert result.songbooks == ["KK"]
        assert result.missing_songbooks == ["EZ"]

    def test_empty_songbook_directory(self, sample_songbooks: AppConfig, catalog: SongCatalog) -> None:
        """A present but empty directory raises IngestError."""
        kk_dir = sample_songbooks.songbook_dir / "KK" / "Kancional"
        shutil.rmtree(kk_dir)
        kk_dir.mkdir()
        with pytest.raises(IngestError, match="No XML files"):
            import_songbooks(sample_songbooks, catalog)

    def test_no_songbooks_present(self, config: AppConfig, catalog: SongCatalog) -> None:
        """With nothing on disk a test run imports nothing."""
        result = import_songbooks(config, catalog)
        assert result.added == 0
        assert result.missing_songbooks == ["EZ", "KK"]

    def test_test_run_caps_files(self, config: AppConfig, catalog: SongCatalog) -> None:
        """Test runs import at most 25 files per directory."""
        ez_dir = config.songbook_dir / "EZ"
        for i in range(30):
            write_song(ez_dir, f"{i:03}.xml", ez_song_xml(f"Song {i}", str(i), [("v1", "text")]))

        assert import_songbooks(config, catalog).added == 25
        assert import_songbooks(replace(config, test_run=False), catalog).added == 30

    def test_progress_split_across_songbooks(
        self, sample_songbooks: AppConfig, catalog: SongCatalog
    ) -> None:
        """Each songbook gets an equal share of the percentage range."""
        seen: list[int] = []
        import_songbooks(sample_songbooks, catalog, progress=lambda message, percent: seen.append(percent))
        assert seen == [16, 50, 75, 100]

    def test_progress_single_songbook(self, config: AppConfig, catalog: SongCatalog) -> None:
        """A single songbook spans the whole range."""
        write_song(config.songbook_dir / "EZ", "288.xml", EZ_SONG_XML)
        seen: list[tuple[str, int]] = []
        import_songbooks(config, catalog, progress=lambda message, percent: seen.append((message, percent)))
        assert seen == [("Importing EZ songs... (1/1)", 100)]


class TestImportThenQuery:
    """End-to-end: import a fixture, then search it."""

    def test_accented_title_found_by_folded_search(
        self, config: AppConfig, conn: sqlite3.Connection
    ) -> None:
        """One EZ song is listed and found by its diacritics-free title."""
        write_song(config.songbook_dir / "EZ", "288.xml", EZ_SONG_XML)
        import_songbooks(config, SongCatalog(conn))
        queries = SongQueries(conn)

        songs = queries.list_songs("entry", "")
        assert [s.title for s in songs] == ["ABCčDďE"]
        assert [s.title for s in queries.list_songs("entry", "abccdde")] == ["ABCčDďE"]

    def test_reimport_after_reset(self, sample_songbooks: AppConfig, conn: sqlite3.Connection) -> None:
        """Resetting the tables and importing again gives the same songs."""
        catalog = SongCatalog(conn)
        import_songbooks(sample_songbooks, catalog)
        catalog.reset_songs()
        import_songbooks(sample_songbooks, catalog)
        assert catalog.count_songs() == 5
        assert [s.entry for s in SongQueries(conn).list_songs("entry", "")] == [20, 65, 202, 288, 511]
