# ABOUTME: Query layer for listing, searching, and sorting songs.
# ABOUTME: Builds parameterized SQL with diacritics-insensitive matching and fetches verse payloads.

import logging
import re
import sqlite3
from dataclasses import dataclass, field

from lyyyra.db.mapping import (
    Projection,
    SongHeader,
    SongSummary,
    row_to_header,
    row_to_summary,
)
from lyyyra.db.sorting import header_order_column, normalize_sort_option, song_order_column
from lyyyra.errors import LyyyraError
from lyyyra.songs.diacritics import remove_diacritics
from lyyyra.songs.types import AuthorCredit, VerseText

logger = logging.getLogger(__name__)

VERSE_SEPARATOR = "==="

# Text searches shorter than this are ignored and return every song.
MIN_TEXT_SEARCH_LENGTH = 3

_NUMERIC_RE = re.compile(r"[0-9]+")
_LIKE_SPECIAL_RE = re.compile(r"([\\%_])")


def _casefold(value: object) -> object:
    """SQL casefold(); SQLite's LIKE alone ignores case for ASCII letters only."""
    return value.casefold() if isinstance(value, str) else value


class QueryError(LyyyraError):
    """Raised when a read query cannot be executed or its rows cannot be read."""


@dataclass
class SearchFilter:
    """A WHERE clause fragment and its parameters."""

    clause: str = ""
    params: list[str] = field(default_factory=list)


def _like_pattern(text: str) -> str:
    return "%" + _LIKE_SPECIAL_RE.sub(r"\\\1", text) + "%"


def build_search_filter(search_text: str | None) -> SearchFilter:
    """Translate user search text into a filter on songs aliased as "s".

    - Empty text: no filter.
    - Digits only: exact match on the entry number as text.
    - Three or more characters otherwise: diacritics-stripped LIKE on
      title, any author, or any verse, or an exact entry match.
    - One or two non-digit characters: no filter.

    Length counts characters, not UTF-8 bytes, so "čš" is too short to
    search even though it encodes to four bytes. Text matching folds case
    with str.casefold on both sides, so non-ASCII letters that survive
    diacritic stripping (Ł, Ø, Æ) match regardless of case.
    """
    pattern = (search_text or "").strip()
    if not pattern:
        return SearchFilter()

    if _NUMERIC_RE.fullmatch(pattern):
        return SearchFilter("WHERE CAST(s.entry AS TEXT) = ?", [pattern])

    if len(pattern) < MIN_TEXT_SEARCH_LENGTH:
        return SearchFilter()

    like = _like_pattern(remove_diacritics(pattern).casefold())
    clause = (
        "WHERE casefold(s.title_d) LIKE ? ESCAPE '\\' "
        "OR EXISTS (SELECT 1 FROM authors a "
        "WHERE a.song_id = s.id AND casefold(a.author_value_d) LIKE ? ESCAPE '\\') "
        "OR EXISTS (SELECT 1 FROM verses vs "
        "WHERE vs.song_id = s.id AND casefold(vs.lines_d) LIKE ? ESCAPE '\\') "
        "OR CAST(s.entry AS TEXT) = ?"
    )
    return SearchFilter(clause, [like, like, like, pattern])


_SONGS_SELECT = """
SELECT s.id,
       s.entry,
       COALESCE(s.entry_text, '') AS entry_text,
       s.title,
       (SELECT GROUP_CONCAT(lines, char(10, 10))
          FROM (SELECT lines FROM verses WHERE song_id = s.id ORDER BY id)) AS all_verses,
       COALESCE((SELECT author_value FROM authors
                  WHERE song_id = s.id AND author_type = 'music'
                  ORDER BY id LIMIT 1), '') AS authorMusic,
       COALESCE((SELECT author_value FROM authors
                  WHERE song_id = s.id AND author_type = 'words'
                  ORDER BY id LIMIT 1), '') AS authorLyric,
       COALESCE(s.kytara_file, '') AS kytara_file,
       COALESCE(s.songbook_acronym, '') AS songbook_acronym,
       MIN(v.id) AS first_verse_id
  FROM songs s
  JOIN verses v ON s.id = v.song_id
"""

_HEADERS_SELECT = """
SELECT DISTINCT s.id,
       s.entry,
       s.entry_text,
       s.title,
       s.title_d,
       s.verse_order,
       s.kytara_file,
       s.songbook_acronym
  FROM songs s
"""


class SongQueries:
    """Read-only queries over a sqlite3 connection to the song database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        conn.create_function("casefold", 1, _casefold, deterministic=True)

    def _fetch(self, sql: str, params: list | tuple = ()) -> list[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error querying data: %s", exc)
            raise QueryError(str(exc)) from exc

    def list_songs(self, sort_key: str | None = None, search_text: str | None = None) -> list[SongSummary]:
        """List songs with concatenated verses, filtered and sorted.

        Only songs that have at least one verse are listed. Unknown sort
        keys sort by entry; ties keep insertion order.

        Raises:
            QueryError: If the query fails.
        """
        search = build_search_filter(search_text)
        order = song_order_column(normalize_sort_option(sort_key))
        sql = (
            _SONGS_SELECT
            + search.clause
            + f"\nGROUP BY s.id\nORDER BY {order}, first_verse_id"
        )
        return [row_to_summary(row) for row in self._fetch(sql, search.params)]

    def list_song_headers(
        self, sort_key: str | None = None, search_text: str | None = None
    ) -> list[SongHeader]:
        """List one header row per song, without verse text.

        Sorting only distinguishes title; every other key sorts by entry.

        Raises:
            QueryError: If the query fails.
        """
        search = build_search_filter(search_text)
        order = header_order_column(normalize_sort_option(sort_key))
        sql = _HEADERS_SELECT + search.clause + f"\nORDER BY {order}, s.id"
        return [row_to_header(row) for row in self._fetch(sql, search.params)]

    def get_authors(self, song_id: int) -> list[AuthorCredit]:
        """Distinct author credits for a song, ordered by role."""
        rows = self._fetch(
            "SELECT DISTINCT author_type, author_value FROM authors "
            "WHERE song_id = ? ORDER BY author_type",
            (song_id,),
        )
        return [AuthorCredit(role=row[0], value=row[1]) for row in rows]

    def _verse_rows(self, song_id: int) -> list[sqlite3.Row]:
        return self._fetch(
            "SELECT name, lines FROM verses WHERE song_id = ? ORDER BY id", (song_id,)
        )

    def get_verses(self, song_id: int) -> str:
        """All verse texts of a song joined by "===". Unknown songs give ""."""
        return VERSE_SEPARATOR.join(row["lines"] or "" for row in self._verse_rows(song_id))

    def get_projection(self, song_id: int) -> Projection:
        """Verse order and named verses for presentation.

        A missing song yields an empty verse order and no verses.
        """
        rows = self._fetch("SELECT verse_order FROM songs WHERE id = ?", (song_id,))
        verse_order = (rows[0]["verse_order"] or "") if rows else ""
        verses = [
            VerseText(name=row["name"] or "", lines=row["lines"] or "")
            for row in self._verse_rows(song_id)
        ]
        return Projection(verse_order=verse_order, verses=verses)
