# ABOUTME: Integration tests for the SongbookApp facade.
# ABOUTME: Runs prepare/reset against file:// archives and checks status flags and query errors.

import base64
import zipfile
from collections.abc import Iterator
from dataclasses import replace
from pathlib import Path

import pytest

from lyyyra.app import SongbookApp
from lyyyra.config import AppConfig, SongbookSource, SupplementalPdf
from lyyyra.core.downloader import DownloadError
from lyyyra.core.status import load_status
from lyyyra.db.queries import QueryError
from lyyyra.db.sorting import SortOption
from tests.fixtures.song_xml import EZ_SONG_XML, KK_SONG_XML, ez_song_xml


@pytest.fixture()
def sources(tmp_path: Path) -> Path:
    """Archives and a PDF standing in for the remote downloads."""
    directory = tmp_path / "sources"
    directory.mkdir()
    with zipfile.ZipFile(directory / "ez.zip", "w") as zf:
        zf.writestr("EZ/288.xml", EZ_SONG_XML)
        zf.writestr("EZ/202.xml", ez_song_xml("Aj, hle, Kristus", "202", [("v1", "Aj, hle")]))
    with zipfile.ZipFile(directory / "kk.zip", "w") as zf:
        zf.writestr("Kancional/065.xml", KK_SONG_XML)
    (directory / "kytara.pdf").write_bytes(b"%PDF-1.4 guitar chords")
    return directory


@pytest.fixture()
def app_config(config: AppConfig, sources: Path) -> AppConfig:
    """Test-run config whose downloads come from local files."""
    return replace(
        config,
        songbooks=(
            SongbookSource("EZ", "Evangelický zpěvník 2021", "EZ", archive_url=(sources / "ez.zip").as_uri()),
            SongbookSource(
                "KK",
                "Katolický kancionál",
                "KK/Kancional",
                archive_url=(sources / "kk.zip").as_uri(),
                archive_dir="KK",
                required=False,
            ),
        ),
        supplemental_pdfs=(SupplementalPdf((sources / "kytara.pdf").as_uri(), "kytara.pdf"),),
    )


@pytest.fixture()
def app(app_config: AppConfig) -> Iterator[SongbookApp]:
    songbook_app = SongbookApp(app_config)
    yield songbook_app
    songbook_app.close()


@pytest.fixture()
def prepared_app(app: SongbookApp) -> SongbookApp:
    app.startup()
    app.prepare_data()
    return app


class TestStartup:
    """Tests for construction and startup()."""

    def test_fresh_status(self, app: SongbookApp) -> None:
        """Nothing is ready on a fresh data directory."""
        status = app.get_status()
        assert not status.songs_ready
        assert not status.database_ready
        assert not status.web_resources_ready
        assert status.build_version == "test"

    @pytest.mark.parametrize("raw", ["5", "on"])
    def test_non_string_sorting_in_status_file(self, app_config: AppConfig, raw: str) -> None:
        """A status file whose sorting parses as a number or boolean is repaired on load."""
        app_config.ensure_directories()
        app_config.status_path.write_text(f"sorting: {raw}\nsongs_ready: true\n", encoding="utf-8")

        songbook_app = SongbookApp(app_config)
        try:
            assert songbook_app.get_status().sorting == "entry"
            assert not songbook_app.get_status().songs_ready
        finally:
            songbook_app.close()

        assert load_status(app_config.status_path).sorting == "entry"

    def test_startup_creates_schema(self, app: SongbookApp) -> None:
        """startup() brings the database to the current version, repeatedly."""
        assert app.startup() == 2
        assert app.startup() == 2
        assert app.config.db_path.exists()


class TestPrepareData:
    """Tests for prepare_data()."""

    def test_all_stages_run(self, app: SongbookApp) -> None:
        """Archives are unpacked, songs imported, and the PDF fetched."""
        app.startup()
        result = app.prepare_data()

        assert result is not None
        assert result.added == 3
        assert result.songbooks == ["EZ", "KK"]
        status = app.get_status()
        assert status.songs_ready and status.database_ready and status.web_resources_ready
        assert not status.is_progress
        assert (app.config.pdf_dir / "kytara.pdf").exists()

    def test_status_persisted(self, prepared_app: SongbookApp) -> None:
        """The status file reflects the finished pipeline."""
        stored = load_status(prepared_app.config.status_path)
        assert stored.database_ready
        assert not stored.is_progress
        assert stored.progress_message == ""

    def test_second_run_does_nothing(self, prepared_app: SongbookApp) -> None:
        """With every flag set, no stage runs again."""
        assert prepared_app.prepare_data() is None

    def test_restart_reconciles_from_disk(self, prepared_app: SongbookApp, app_config: AppConfig) -> None:
        """A new app instance sees the prepared data as ready."""
        restarted = SongbookApp(app_config)
        try:
            status = restarted.get_status()
            assert status.songs_ready and status.database_ready and status.web_resources_ready
            assert restarted.prepare_data() is None
        finally:
            restarted.close()

    def test_missing_required_archive(self, app: SongbookApp, sources: Path) -> None:
        """A failed download raises and leaves no progress indicator."""
        (sources / "ez.zip").unlink()
        app.startup()
        with pytest.raises(DownloadError):
            app.prepare_data()
        assert not app.status.songs_ready
        assert not app.status.is_progress

    def test_database_rebuilt_when_not_ready(self, prepared_app: SongbookApp) -> None:
        """Clearing the database flag re-imports from the unpacked songs."""
        prepared_app.status.database_ready = False
        result = prepared_app.prepare_data()
        assert result is not None and result.added == 3
        assert len(prepared_app.list_songs("entry", "")) == 3


class TestQueries:
    """Tests for the query operations on the facade."""

    def test_list_songs(self, prepared_app: SongbookApp) -> None:
        """Songs from both songbooks are listed."""
        songs = prepared_app.list_songs("entry", "")
        assert [(s.songbook_acronym, s.entry) for s in songs] == [("KK", 65), ("EZ", 202), ("EZ", 288)]

    def test_search(self, prepared_app: SongbookApp) -> None:
        """Folded searches work through the facade."""
        assert [s.title for s in prepared_app.list_songs("title", "abccdde")] == ["ABCčDďE"]
        assert [h.entry for h in prepared_app.list_song_headers("title", "202")] == [202]

    def test_song_details(self, prepared_app: SongbookApp) -> None:
        """Authors, verses, and projection come back for a listed song."""
        song_id = prepared_app.list_songs("entry", "288")[0].id
        assert [a.role for a in prepared_app.get_authors(song_id)] == ["music", "words"]
        assert "===" in prepared_app.get_verses(song_id)
        projection = prepared_app.get_projection(song_id)
        assert projection["verse_order"] == "v1 v2 v1"
        assert len(projection["verses"]) == 2

    def test_missing_song_details(self, prepared_app: SongbookApp) -> None:
        """Unknown ids give empty results, not errors."""
        assert prepared_app.get_verses(999) == ""
        assert prepared_app.get_projection(999) == {"verse_order": "", "verses": []}
        assert prepared_app.status.database_ready

    def test_query_error_clears_database_flag(self, app: SongbookApp) -> None:
        """A failed query raises QueryError and marks the database not ready."""
        app.status.database_ready = True
        with pytest.raises(QueryError):
            app.list_songs("entry", "")
        assert not app.status.database_ready

    def test_unreachable_database_clears_flag(self, app: SongbookApp) -> None:
        """An unopenable database file surfaces as QueryError."""
        app.config.db_path.mkdir(parents=True)
        app.status.database_ready = True
        with pytest.raises(QueryError):
            app.get_verses(1)
        assert not app.status.database_ready


class TestPreferencesAndFiles:
    """Tests for save_sorting() and get_pdf_file()."""

    def test_save_sorting(self, app: SongbookApp) -> None:
        """A valid option is stored and persisted."""
        assert app.save_sorting("authorLyric") is SortOption.AUTHOR_LYRIC
        assert load_status(app.config.status_path).sorting == "authorLyric"

    def test_invalid_sorting_becomes_entry(self, app: SongbookApp) -> None:
        """Unsupported options are saved as entry."""
        assert app.save_sorting("bogus") is SortOption.ENTRY
        assert app.status.sorting == "entry"

    def test_pdf_data_url(self, prepared_app: SongbookApp) -> None:
        """A stored PDF is returned as a base64 data URL."""
        url = prepared_app.get_pdf_file("kytara.pdf")
        prefix = "data:application/pdf;base64,"
        assert url.startswith(prefix)
        assert base64.b64decode(url[len(prefix):]) == b"%PDF-1.4 guitar chords"

    def test_pdf_missing(self, app: SongbookApp) -> None:
        """Missing names and files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="No filename"):
            app.get_pdf_file("")
        with pytest.raises(FileNotFoundError, match="not found"):
            app.get_pdf_file("nope.pdf")


class TestResetData:
    """Tests for reset_data()."""

    def test_reset_rebuilds_everything(self, prepared_app: SongbookApp) -> None:
        """Reset wipes the data directory and prepares it again."""
        prepared_app.save_sorting("authorMusic")
        marker = prepared_app.config.songbook_dir / "stale.txt"
        marker.write_text("old", encoding="utf-8")

        result = prepared_app.reset_data()

        assert result is not None and result.added == 3
        assert not marker.exists()
        status = prepared_app.get_status()
        assert status.songs_ready and status.database_ready and status.web_resources_ready
        assert status.sorting == "title"
        assert len(prepared_app.list_songs("entry", "")) == 3
