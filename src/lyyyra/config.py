# ABOUTME: Explicit application configuration passed to the pipeline, reconciler, and downloader.
# ABOUTME: Holds data directory layout, songbook sources, and the supplemental PDF list.

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from lyyyra import __version__

PDF_INDEX_URL = "https://www.evangelickyzpevnik.cz/zpevnik/kapitoly-a-pisne/"
EXPECTED_SONG_COUNT_EZ = 789

# Directory files are capped to in test-run mode.
TEST_RUN_FILE_LIMIT = 25


@dataclass(frozen=True)
class SongbookSource:
    """Where one songbook's XML files come from and where they live on disk.

    archive_dir is where the downloaded archive is unpacked, xml_dir is the
    flat directory of song files, both relative to the songbook root.
    """

    acronym: str
    name: str
    xml_dir: str
    archive_url: str | None = None
    archive_dir: str = ""
    required: bool = True


@dataclass(frozen=True)
class SupplementalPdf:
    """A sheet-music PDF fetched next to the song archive."""

    url: str
    file_name: str = ""

    @property
    def target_name(self) -> str:
        """Local file name; falls back to the last URL path segment."""
        return self.file_name or PurePosixPath(urlparse(self.url).path).name


DEFAULT_SONGBOOKS: tuple[SongbookSource, ...] = (
    SongbookSource(
        acronym="EZ",
        name="Evangelický zpěvník 2021",
        xml_dir="EZ",
        archive_url="https://www.evangelickyzpevnik.cz.www.e-cirkev.cz/res/archive/001/000243.zip?download",
    ),
    SongbookSource(
        acronym="KK",
        name="Katolický kancionál",
        xml_dir="KK/Kancional",
        archive_url="https://stahuj.kancional.cz/opensong/pisne.zip",
        archive_dir="KK",
        required=False,
    ),
)

DEFAULT_SUPPLEMENTAL_PDFS: tuple[SupplementalPdf, ...] = (
    SupplementalPdf(
        url="https://www.evangelickyzpevnik.cz.www.e-cirkev.cz/res/archive/001/000234.pdf",
        file_name="kytara.pdf",
    ),
    SupplementalPdf(
        url="https://www.evangelickyzpevnik.cz.www.e-cirkev.cz/res/archive/001/000208.pdf",
        file_name="choralnik.pdf",
    ),
)


def build_version() -> str:
    """Version string reported in the status; dev builds carry a timestamp."""
    if __version__ and __version__ != "dev":
        return __version__
    return "dev " + datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _data_dir_name(url: str) -> str:
    return urlparse(url).netloc.replace(":", "_")


@dataclass(frozen=True)
class AppConfig:
    """Paths and sources for one Lyyyra installation."""

    app_dir: Path
    log_file: Path
    songbooks: tuple[SongbookSource, ...] = DEFAULT_SONGBOOKS
    supplemental_pdfs: tuple[SupplementalPdf, ...] = DEFAULT_SUPPLEMENTAL_PDFS
    expected_song_count: int = EXPECTED_SONG_COUNT_EZ
    test_run: bool = False
    version: str = field(default_factory=build_version)

    @classmethod
    def from_home(cls, home: Path | None = None, **overrides: object) -> "AppConfig":
        """Default layout: ~/Lyyyra/<pdf site host>/ plus ~/Lyyyra/app.log."""
        root = (home or Path.home()) / "Lyyyra"
        return cls(
            app_dir=root / _data_dir_name(PDF_INDEX_URL),
            log_file=root / "app.log",
            **overrides,  # type: ignore[arg-type]
        )

    @classmethod
    def for_directory(cls, app_dir: Path, **overrides: object) -> "AppConfig":
        """Layout rooted at an explicit data directory (tests, --data-dir)."""
        return cls(app_dir=app_dir, log_file=app_dir / "app.log", **overrides)  # type: ignore[arg-type]

    @property
    def db_path(self) -> Path:
        return self.app_dir / "Songs.db"

    @property
    def songbook_dir(self) -> Path:
        return self.app_dir / "SongBook"

    @property
    def pdf_dir(self) -> Path:
        return self.app_dir / "PdfSources"

    @property
    def status_path(self) -> Path:
        return self.app_dir / "status.yaml"

    def songbook_path(self, source: SongbookSource) -> Path:
        """Absolute directory holding a songbook's XML files."""
        return self.songbook_dir / source.xml_dir

    def ensure_directories(self) -> None:
        """Create the data, songbook, and PDF directories."""
        for directory in (self.app_dir, self.songbook_dir, self.pdf_dir):
            directory.mkdir(parents=True, exist_ok=True)
