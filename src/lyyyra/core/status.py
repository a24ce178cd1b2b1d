# ABOUTME: Application status side file: readiness flags, progress, and sort preference.
# ABOUTME: Persisted as YAML next to the database and reloaded on startup.

import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from pathlib import Path

import yaml

from lyyyra.db.sorting import SortOption

logger = logging.getLogger(__name__)


@dataclass
class AppStatus:
    """Pipeline readiness and UI preferences shared with the front end."""

    web_resources_ready: bool = False
    songs_ready: bool = False
    database_ready: bool = False
    is_progress: bool = False
    progress_message: str = ""
    progress_percent: int = 0
    last_save: str = ""
    sorting: str = SortOption.TITLE.value
    search_pattern: str = ""
    build_version: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AppStatus":
        """Build a status from loaded YAML, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def start_progress(self, message: str) -> None:
        self.is_progress = True
        self.update_progress(message, 0)

    def update_progress(self, message: str, percent: int) -> None:
        self.progress_message = message
        self.progress_percent = percent

    def clear_progress(self) -> None:
        self.is_progress = False
        self.progress_message = ""
        self.progress_percent = 0


def load_status(path: Path) -> AppStatus:
    """Read the status file; a missing or unreadable file gives defaults."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.info("No usable status file at %s (%s); using defaults", path, exc)
        return AppStatus()

    if not isinstance(data, dict):
        return AppStatus()
    return AppStatus.from_dict(data)


def save_status(path: Path, status: AppStatus) -> None:
    """Stamp last_save and write the status as YAML.

    Raises:
        OSError: If the file cannot be written.
    """
    status.last_save = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(status), f, allow_unicode=True, sort_keys=False)
    logger.debug("Status saved to %s", path)
