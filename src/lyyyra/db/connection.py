# ABOUTME: SQLite connection management and schema versioning for the song database.
# ABOUTME: Detects the on-disk schema version, creates it fresh, or applies ordered migrations.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from lyyyra.db.schema import CURRENT_SCHEMA_VERSION, MIGRATIONS, SCHEMA_V1
from lyyyra.errors import LyyyraError

logger = logging.getLogger(__name__)


class MigrationError(LyyyraError):
    """Raised when the schema cannot be created or migrated to the target version."""


def _table_exists(conn: sqlite3.Connection, name: str) -> bool:
    cursor = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?", (name,)
    )
    return cursor.fetchone()[0] > 0


def detect_schema_version(conn: sqlite3.Connection) -> int:
    """Detect the schema version of an open database.

    Returns:
        The highest version in the schema_version ledger when it exists
        (1 if the ledger is empty), 1 for a legacy database that only has a
        songs table, and 0 for a database with no tables.
    """
    if _table_exists(conn, "schema_version"):
        row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 1

    if _table_exists(conn, "songs"):
        return 1

    return 0


def _check_reachable(start: int, target: int) -> None:
    """Make sure a migration exists for every step from start to target."""
    known = {version for version, _ in MIGRATIONS}
    for version in range(start + 1, target + 1):
        if version not in known:
            raise MigrationError(f"Unknown migration version: {version}")


def _apply_migration(conn: sqlite3.Connection, version: int) -> None:
    """Run one migration and record it in the ledger, atomically."""
    migration = dict(MIGRATIONS)[version]
    try:
        conn.execute("BEGIN")
        migration(conn)
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise MigrationError(f"Failed to migrate to version {version}: {exc}") from exc


def initialize_database(
    conn: sqlite3.Connection, target: int = CURRENT_SCHEMA_VERSION
) -> int:
    """Bring the database schema up to the target version.

    A fresh database gets the version 1 tables first; then every pending
    migration runs in order, each recorded in the schema_version ledger
    before the next starts. Already-current databases return immediately,
    so this is safe to call on every startup.

    Args:
        conn: Open database connection.
        target: Schema version to reach.

    Returns:
        The schema version after initialization.

    Raises:
        MigrationError: If a step has no migration or any DDL fails.
    """
    try:
        current = detect_schema_version(conn)
    except sqlite3.Error as exc:
        raise MigrationError(f"Failed to detect schema version: {exc}") from exc

    logger.info("Current schema version: %d, expected: %d", current, target)
    if current >= target:
        return current

    _check_reachable(max(current, 1), target)

    if current == 0:
        logger.info("Creating new database with schema v1")
        try:
            conn.executescript(SCHEMA_V1)
        except sqlite3.Error as exc:
            raise MigrationError(f"Failed to create schema v1: {exc}") from exc
        current = 1

    for version in range(current + 1, target + 1):
        logger.info("Applying migration to version %d", version)
        _apply_migration(conn, version)
        current = version

    return current


def open_songbook_db(path: Path, *, migrate: bool = True) -> sqlite3.Connection:
    """Open or create the song database.

    Creates parent directories as needed, enables foreign keys (cascading
    deletes depend on it) and uses sqlite3.Row for column access by name.

    Args:
        path: Path to the database file.
        migrate: Run initialize_database() after opening.

    Returns:
        A configured sqlite3.Connection.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")

    if migrate:
        try:
            initialize_database(conn)
        except MigrationError:
            conn.close()
            raise

    return conn


@contextmanager
def connect(path: Path, *, migrate: bool = False) -> Iterator[sqlite3.Connection]:
    """Open a connection for one logical operation and always close it."""
    conn = open_songbook_db(path, migrate=migrate)
    try:
        yield conn
    finally:
        conn.close()
