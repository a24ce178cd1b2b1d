# ABOUTME: Fetches song archives and supplemental PDFs and unpacks the archives.
# ABOUTME: Uses httpx for HTTP(S), copies file:// URLs locally, and runs the PDF fetch in the background.

import logging
import shutil
import threading
import zipfile
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from lyyyra import __version__
from lyyyra.config import AppConfig
from lyyyra.errors import LyyyraError

logger = logging.getLogger(__name__)

# zip general-purpose flag bit 11: file name is UTF-8 encoded
_UTF8_NAME_FLAG = 0x800


class DownloadError(LyyyraError):
    """Raised when a file cannot be fetched or an archive cannot be unpacked."""


def create_client(*, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """HTTP client used for all downloads."""
    client_kwargs: dict[str, Any] = {
        "headers": {"User-Agent": f"lyyyra/{__version__}"},
        "timeout": 60.0,
        "follow_redirects": True,
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    return httpx.Client(**client_kwargs)


def download_file(client: httpx.Client, url: str, dest: Path) -> Path:
    """Fetch url into dest, replacing any existing file.

    file:// URLs are copied from the local filesystem.

    Raises:
        DownloadError: On a non-200 response, a transport error, or an I/O error.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    parsed = urlparse(url)

    try:
        if parsed.scheme == "file":
            source = Path(url2pathname(parsed.netloc + parsed.path))
            shutil.copyfile(source, dest)
        else:
            with client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise DownloadError(f"HTTP {response.status_code} from {url}")
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
    except (httpx.HTTPError, OSError) as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Download failed: {url}: {exc}") from exc
    except DownloadError:
        dest.unlink(missing_ok=True)
        raise

    logger.info("Downloaded %s to %s", url, dest)
    return dest


def _entry_name(info: zipfile.ZipInfo) -> str:
    """Member name, re-decoding legacy names as CP852 (common in Czech archives)."""
    if info.flag_bits & _UTF8_NAME_FLAG:
        return info.filename
    try:
        return info.filename.encode("cp437").decode("cp852")
    except UnicodeError:
        return info.filename


def unzip(archive: Path, destination: Path) -> list[Path]:
    """Extract an archive, returning the paths of extracted files.

    Raises:
        DownloadError: If the archive is corrupt or an entry would land
            outside the destination.
    """
    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()
    extracted: list[Path] = []

    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                target = (destination / _entry_name(info)).resolve()
                if target != root and root not in target.parents:
                    raise DownloadError(f"Archive entry escapes destination: {info.filename}")

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                extracted.append(target)
    except (zipfile.BadZipFile, OSError) as exc:
        raise DownloadError(f"Failed to unpack {archive}: {exc}") from exc

    return extracted


def download_songbook_archives(
    config: AppConfig,
    client: httpx.Client,
    *,
    progress: Callable[[str, int], None] | None = None,
) -> list[str]:
    """Download and unpack the archive of every songbook that has one.

    Optional songbooks that fail are logged and skipped.

    Returns:
        Acronyms of the songbooks that were unpacked.

    Raises:
        DownloadError: If a required songbook cannot be fetched or unpacked.
    """
    sources = [source for source in config.songbooks if source.archive_url]
    unpacked: list[str] = []

    for index, source in enumerate(sources):
        if progress is not None:
            progress(f"Downloading {source.acronym} songs...", index * 100 // len(sources))

        archive = config.app_dir / f"{source.acronym}.zip"
        try:
            download_file(client, source.archive_url, archive)  # type: ignore[arg-type]
            unzip(archive, config.songbook_dir / source.archive_dir)
        except DownloadError as exc:
            if source.required:
                raise
            logger.warning("Skipping optional songbook %s: %s", source.acronym, exc)
            continue
        finally:
            archive.unlink(missing_ok=True)

        unpacked.append(source.acronym)

    return unpacked


def download_supplemental_pdfs(config: AppConfig, client: httpx.Client) -> None:
    """Fetch every supplemental PDF not already present in the PDF directory.

    Raises:
        DownloadError: On the first file that cannot be fetched.
    """
    config.pdf_dir.mkdir(parents=True, exist_ok=True)
    for pdf in config.supplemental_pdfs:
        target = config.pdf_dir / pdf.target_name
        if target.exists():
            logger.info("Supplemental PDF already present: %s", target)
            continue
        download_file(client, pdf.url, target)


class SupplementalDownload:
    """Fetches the supplemental PDFs on a single background worker.

    start() is idempotent while a fetch is in flight; result() waits for it
    and re-raises its error.
    """

    def __init__(
        self,
        config: AppConfig,
        client_factory: Callable[[], httpx.Client] = create_client,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="supplemental-pdf")
        self._lock = threading.Lock()
        self._future: Future[None] | None = None

    def _run(self) -> None:
        with self._client_factory() as client:
            download_supplemental_pdfs(self._config, client)

    def start(self) -> Future[None]:
        with self._lock:
            if self._future is None or self._future.done():
                self._future = self._executor.submit(self._run)
            return self._future

    def result(self) -> None:
        """Wait for the running fetch. No-op if none was started."""
        future = self._future
        if future is not None:
            future.result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
