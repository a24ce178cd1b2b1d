# ABOUTME: Application facade exposing the song operations a front end calls.
# ABOUTME: Opens the database per operation and keeps the status side file in sync.

import base64
import logging
import shutil
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from lyyyra.config import AppConfig
from lyyyra.core.downloader import (
    DownloadError,
    SupplementalDownload,
    create_client,
    download_songbook_archives,
)
from lyyyra.core.importer import ImportResult, ProgressFn, import_songbooks
from lyyyra.core.reconciler import reconcile_status
from lyyyra.core.status import AppStatus, load_status
from lyyyra.core.status import save_status as write_status_file
from lyyyra.db.catalog import SongCatalog
from lyyyra.db.connection import connect, initialize_database
from lyyyra.db.mapping import SongHeader, SongSummary
from lyyyra.db.queries import QueryError, SongQueries
from lyyyra.db.sorting import SortOption, normalize_sort_option
from lyyyra.songs.types import AuthorCredit

logger = logging.getLogger(__name__)


class SongbookApp:
    """Owns the configuration and status and runs the core flows.

    Every database operation opens its own connection and closes it when
    done; SQLite's file locking serializes access.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        client_factory: Callable[[], httpx.Client] = create_client,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        config.ensure_directories()
        self.status = load_status(config.status_path)
        self.status.build_version = config.version
        self._supplemental = SupplementalDownload(config, client_factory)

        self.refresh_status()

    # --- status ---

    def save_status(self) -> None:
        try:
            write_status_file(self.config.status_path, self.status)
        except OSError as exc:
            logger.error("Error writing status file %s: %s", self.config.status_path, exc)

    def refresh_status(self) -> bool:
        """Reconcile readiness flags with disk and database; save if changed."""
        changed = reconcile_status(self.config, self.status)
        if changed:
            self.save_status()
        return changed

    def get_status(self) -> AppStatus:
        self.status.build_version = self.config.version
        return self.status

    def _progress(self, message: str, percent: int) -> None:
        self.status.update_progress(message, percent)
        self.save_status()

    def save_sorting(self, sorting: str) -> SortOption:
        """Persist a sort preference, normalizing unsupported values to entry."""
        normalized = normalize_sort_option(sorting)
        if normalized.value != sorting:
            logger.warning("Unsupported sorting option %r, defaulting to %s", sorting, normalized.value)
        if normalized.value != self.status.sorting:
            logger.info("Sorting changed from %s to %s", self.status.sorting, normalized.value)
            self.status.sorting = normalized.value
            self.save_status()
        return normalized

    # --- lifecycle ---

    def startup(self) -> int:
        """Create or migrate the database schema. Safe on every start."""
        logger.info("Initializing database %s", self.config.db_path)
        with connect(self.config.db_path) as conn:
            return initialize_database(conn)

    def fill_database(self, progress: ProgressFn | None = None) -> ImportResult:
        """Recreate the song tables and import every available songbook.

        Progress is persisted to the status file and also passed to progress.
        """

        def report(message: str, percent: int) -> None:
            self._progress(message, percent)
            if progress is not None:
                progress(message, percent)

        report("Filling database...", 0)
        with connect(self.config.db_path, migrate=True) as conn:
            catalog = SongCatalog(conn)
            catalog.reset_songs()
            result = import_songbooks(self.config, catalog, progress=report)

        logger.info(
            "Import finished: %d added, %d error(s)", result.added, result.errors
        )
        return result

    def _start_supplemental(self) -> bool:
        if self.status.web_resources_ready or not self.config.supplemental_pdfs:
            return False
        self._supplemental.start()
        return True

    def prepare_data(self) -> ImportResult | None:
        """Download, import, and fetch supplemental PDFs as needed.

        Each stage runs only when its readiness flag is false. The
        supplemental PDF fetch runs in the background and is joined last.

        Returns:
            The import result when the database was (re)filled, else None.

        Raises:
            DownloadError: If the song archive or the PDFs cannot be fetched.
            IngestError: If a songbook directory cannot be imported.
        """
        self.status.start_progress("Preparing data...")
        self.save_status()
        supplemental = self._start_supplemental()
        result = None

        try:
            if not self.status.songs_ready:
                with self._client_factory() as client:
                    download_songbook_archives(self.config, client, progress=self._progress)
                self.status.songs_ready = True
                self.status.database_ready = False
                self.save_status()

            if not self.status.database_ready:
                result = self.fill_database()
                self.status.database_ready = True
                self.save_status()

            if supplemental:
                self._supplemental.result()
                self.status.web_resources_ready = True
                self.save_status()
        finally:
            self.status.clear_progress()
            self.save_status()

        return result

    def reset_data(self) -> ImportResult | None:
        """Delete all stored data, recreate the schema, and prepare data again."""
        self.status.start_progress("Deleting stored data...")
        try:
            self._supplemental.result()
        except DownloadError as exc:
            logger.warning("Previous supplemental download failed: %s", exc)

        shutil.rmtree(self.config.app_dir, ignore_errors=True)
        self.config.ensure_directories()

        self.status = AppStatus(build_version=self.config.version)
        self.save_status()

        self.startup()
        return self.prepare_data()

    def close(self) -> None:
        """Flush the status and stop the background worker."""
        self._supplemental.shutdown()
        self.save_status()

    # --- queries ---

    @contextmanager
    def _queries(self) -> Iterator[SongQueries]:
        """Query context; any failure marks the database as not ready."""
        try:
            with connect(self.config.db_path) as conn:
                yield SongQueries(conn)
        except (QueryError, sqlite3.Error, OSError) as exc:
            self.status.database_ready = False
            if isinstance(exc, QueryError):
                raise
            logger.error("Error opening database %s: %s", self.config.db_path, exc)
            raise QueryError(str(exc)) from exc

    def list_songs(self, sort_key: str = "", search: str = "") -> list[SongSummary]:
        with self._queries() as queries:
            return queries.list_songs(sort_key, search)

    def list_song_headers(self, sort_key: str = "", search: str = "") -> list[SongHeader]:
        with self._queries() as queries:
            return queries.list_song_headers(sort_key, search)

    def get_authors(self, song_id: int) -> list[AuthorCredit]:
        with self._queries() as queries:
            return queries.get_authors(song_id)

    def get_verses(self, song_id: int) -> str:
        with self._queries() as queries:
            return queries.get_verses(song_id)

    def get_projection(self, song_id: int) -> dict[str, Any]:
        """Projection payload: {"verse_order": str, "verses": [{"name", "lines"}]}."""
        with self._queries() as queries:
            return queries.get_projection(song_id).to_dict()

    # --- files ---

    def get_pdf_file(self, file_name: str) -> str:
        """A PDF from the PDF directory as a base64 data URL.

        Raises:
            FileNotFoundError: If no name is given or the file does not exist.
        """
        if not file_name:
            raise FileNotFoundError("No filename provided")
        path = self.config.pdf_dir / file_name
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_name}")
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        return "data:application/pdf;base64," + encoded
