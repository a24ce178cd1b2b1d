# ABOUTME: Versioned schema descriptions, DDL, and ordered migrations for the song database.
# ABOUTME: Version 1 is the legacy single-songbook layout; version 2 adds songbooks and a ledger.

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

CURRENT_SCHEMA_VERSION = 2

# Songbook that legacy (version 1) rows belonged to before multi-songbook support.
DEFAULT_SONGBOOK_ACRONYM = "EZ"
DEFAULT_SONGBOOK_NAME = "Evangelický zpěvník 2021"

MAX_ACRONYM_LENGTH = 10


@dataclass(frozen=True)
class SchemaDescription:
    """Tables and their columns (name -> declared type) at one schema version."""

    version: int
    tables: dict[str, dict[str, str]]

    def columns(self, table: str) -> set[str]:
        return set(self.tables.get(table, {}))


_AUTHORS_COLUMNS = {
    "id": "INTEGER",
    "song_id": "INTEGER",
    "author_type": "TEXT",
    "author_value": "TEXT",
    "author_value_d": "TEXT",
}

_VERSES_COLUMNS = {
    "id": "INTEGER",
    "song_id": "INTEGER",
    "name": "TEXT",
    "lines": "TEXT",
    "lines_d": "TEXT",
}

_SONGS_V1_COLUMNS = {
    "id": "INTEGER",
    "entry": "INTEGER",
    "title": "TEXT",
    "title_d": "TEXT",
    "verse_order": "TEXT",
    "kytara_file": "TEXT",
}

SCHEMAS: dict[int, SchemaDescription] = {
    1: SchemaDescription(
        version=1,
        tables={
            "songs": _SONGS_V1_COLUMNS,
            "authors": _AUTHORS_COLUMNS,
            "verses": _VERSES_COLUMNS,
        },
    ),
    2: SchemaDescription(
        version=2,
        tables={
            "songs": {
                **_SONGS_V1_COLUMNS,
                "songbook_acronym": "TEXT REFERENCES songbooks(songbook_acronym)",
                "entry_text": "TEXT",
                "notes_file": "TEXT",
            },
            "authors": _AUTHORS_COLUMNS,
            "verses": _VERSES_COLUMNS,
            "songbooks": {"songbook_acronym": "TEXT", "name": "TEXT"},
            "schema_version": {"version": "INTEGER", "applied_at": "TEXT"},
        },
    ),
}

SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS songs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    entry       INTEGER,
    title       TEXT,
    title_d     TEXT,
    verse_order TEXT,
    kytara_file TEXT
);

CREATE TABLE IF NOT EXISTS authors (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    song_id        INTEGER,
    author_type    TEXT,
    author_value   TEXT,
    author_value_d TEXT,
    FOREIGN KEY(song_id) REFERENCES songs(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS verses (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    song_id INTEGER,
    name    TEXT,
    lines   TEXT,
    lines_d TEXT,
    FOREIGN KEY(song_id) REFERENCES songs(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_songs_entry ON songs(entry);
CREATE INDEX IF NOT EXISTS idx_songs_title_d ON songs(title_d);
CREATE INDEX IF NOT EXISTS idx_authors_song_id ON authors(song_id);
CREATE INDEX IF NOT EXISTS idx_authors_value_d ON authors(author_value_d);
CREATE INDEX IF NOT EXISTS idx_verses_song_id ON verses(song_id);
CREATE INDEX IF NOT EXISTS idx_verses_lines_d ON verses(lines_d);
"""

# Working tables at the current version, used when a full re-import recreates them.
SONG_TABLES_V2 = """
CREATE TABLE IF NOT EXISTS songs (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    songbook_acronym TEXT REFERENCES songbooks(songbook_acronym),
    entry            INTEGER,
    entry_text       TEXT,
    title            TEXT,
    title_d          TEXT,
    verse_order      TEXT,
    kytara_file      TEXT,
    notes_file       TEXT
);

CREATE TABLE IF NOT EXISTS authors (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    song_id        INTEGER,
    author_type    TEXT,
    author_value   TEXT,
    author_value_d TEXT,
    FOREIGN KEY(song_id) REFERENCES songs(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS verses (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    song_id INTEGER,
    name    TEXT,
    lines   TEXT,
    lines_d TEXT,
    FOREIGN KEY(song_id) REFERENCES songs(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_songs_entry ON songs(entry);
CREATE INDEX IF NOT EXISTS idx_songs_title_d ON songs(title_d);
CREATE INDEX IF NOT EXISTS idx_songs_songbook_acronym ON songs(songbook_acronym);
CREATE INDEX IF NOT EXISTS idx_songs_entry_text ON songs(entry_text);
CREATE INDEX IF NOT EXISTS idx_authors_song_id ON authors(song_id);
CREATE INDEX IF NOT EXISTS idx_authors_value_d ON authors(author_value_d);
CREATE INDEX IF NOT EXISTS idx_verses_song_id ON verses(song_id);
CREATE INDEX IF NOT EXISTS idx_verses_lines_d ON verses(lines_d);
"""

_V2_TABLES = f"""
CREATE TABLE IF NOT EXISTS songbooks (
    songbook_acronym TEXT PRIMARY KEY NOT NULL,
    name             TEXT NOT NULL,
    CHECK(length(songbook_acronym) <= {MAX_ACRONYM_LENGTH})
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);
"""

_V2_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_songs_songbook_acronym ON songs(songbook_acronym);
CREATE INDEX IF NOT EXISTS idx_songs_entry_text ON songs(entry_text);
"""


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    """Column names currently present on a table (empty if the table is missing)."""
    cursor = conn.execute("SELECT name FROM pragma_table_info(?)", (table,))
    return {row[0] for row in cursor.fetchall()}


def _add_missing_columns(conn: sqlite3.Connection, schema: SchemaDescription, table: str) -> None:
    """ALTER a table until it has every column the schema description lists."""
    present = table_columns(conn, table)
    for column, declared_type in schema.tables[table].items():
        if column not in present:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {declared_type}")


def _run_statements(conn: sqlite3.Connection, script: str) -> None:
    """Execute a multi-statement DDL script inside the caller's transaction.

    executescript() would commit first, so statements run one by one.
    """
    for statement in script.split(";"):
        if statement.strip():
            conn.execute(statement)


def migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Add multi-songbook support to a version 1 database.

    Creates the songbooks and schema_version tables, adds the songbook,
    entry-text, and notes-file columns to songs when missing, and assigns
    existing songs to the default songbook.
    """
    _run_statements(conn, _V2_TABLES)
    _add_missing_columns(conn, SCHEMAS[2], "songs")
    _run_statements(conn, _V2_INDEXES)
    conn.execute(
        "INSERT OR IGNORE INTO songbooks (songbook_acronym, name) VALUES (?, ?)",
        (DEFAULT_SONGBOOK_ACRONYM, DEFAULT_SONGBOOK_NAME),
    )
    conn.execute(
        "UPDATE songs SET songbook_acronym = ? WHERE songbook_acronym IS NULL",
        (DEFAULT_SONGBOOK_ACRONYM,),
    )


Migration = Callable[[sqlite3.Connection], None]

# Ordered by the version each migration produces.
MIGRATIONS: list[tuple[int, Migration]] = [
    (2, migrate_to_v2),
]


def recreate_song_tables(conn: sqlite3.Connection) -> None:
    """Drop and recreate songs, authors, and verses for a full re-import.

    Songbooks and the schema ledger are left untouched.
    """
    conn.executescript(
        "DROP TABLE IF EXISTS authors;"
        "DROP TABLE IF EXISTS verses;"
        "DROP TABLE IF EXISTS songs;"
        + SONG_TABLES_V2
    )
