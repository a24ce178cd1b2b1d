# ABOUTME: Write-side operations for the song database.
# ABOUTME: Registers songbooks and stores songs with their authors and verses in one transaction.

import sqlite3

from lyyyra.db.schema import MAX_ACRONYM_LENGTH, recreate_song_tables
from lyyyra.songs.diacritics import remove_diacritics
from lyyyra.songs.types import ParsedSong


class SongCatalog:
    """Wraps a sqlite3 connection and provides typed writes for song data."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get_or_create_songbook(self, acronym: str, name: str) -> str:
        """Return the acronym of an existing songbook, creating it if needed.

        Raises:
            ValueError: If the acronym is longer than the allowed maximum.
        """
        if len(acronym) > MAX_ACRONYM_LENGTH:
            raise ValueError(
                f"Songbook acronym must be {MAX_ACRONYM_LENGTH} characters or less: {acronym!r}"
            )

        row = self._conn.execute(
            "SELECT songbook_acronym FROM songbooks WHERE songbook_acronym = ?",
            (acronym,),
        ).fetchone()
        if row is not None:
            return row[0]

        self._conn.execute(
            "INSERT INTO songbooks (songbook_acronym, name) VALUES (?, ?)",
            (acronym, name),
        )
        self._conn.commit()
        return acronym

    def list_songbooks(self) -> list[tuple[str, str]]:
        """All registered songbooks as (acronym, name), ordered by acronym."""
        cursor = self._conn.execute(
            "SELECT songbook_acronym, name FROM songbooks ORDER BY songbook_acronym"
        )
        return [(row[0], row[1]) for row in cursor.fetchall()]

    def add_song(self, song: ParsedSong, songbook_acronym: str) -> int:
        """Store a parsed song with its authors and verses.

        Normalized columns are derived here from their source values. The
        song and its child rows are written in a single transaction, so a
        failure leaves no partial song behind.

        Returns:
            The row ID of the inserted song.
        """
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO songs (songbook_acronym, title, title_d, verse_order, "
                "entry, entry_text, kytara_file, notes_file) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    songbook_acronym,
                    song.title,
                    remove_diacritics(song.title),
                    song.verse_order,
                    song.entry_number,
                    song.entry_text,
                    song.kytara_file,
                    song.notes_file,
                ),
            )
            song_id = cursor.lastrowid

            self._conn.executemany(
                "INSERT INTO authors (song_id, author_type, author_value, author_value_d) "
                "VALUES (?, ?, ?, ?)",
                [
                    (song_id, author.role, author.value, remove_diacritics(author.value))
                    for author in song.authors
                ],
            )
            self._conn.executemany(
                "INSERT INTO verses (song_id, name, lines, lines_d) VALUES (?, ?, ?, ?)",
                [
                    (song_id, verse.name, verse.lines, remove_diacritics(verse.lines))
                    for verse in song.verses
                ],
            )

        return song_id  # type: ignore[return-value]

    def count_songs(self, songbook_acronym: str | None = None) -> int:
        """Number of stored songs, optionally limited to one songbook."""
        if songbook_acronym is None:
            cursor = self._conn.execute("SELECT COUNT(*) FROM songs")
        else:
            cursor = self._conn.execute(
                "SELECT COUNT(*) FROM songs WHERE songbook_acronym = ?",
                (songbook_acronym,),
            )
        return cursor.fetchone()[0]

    def reset_songs(self) -> None:
        """Drop and recreate the song tables ahead of a full re-import."""
        recreate_song_tables(self._conn)
