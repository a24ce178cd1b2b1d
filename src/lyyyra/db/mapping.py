# ABOUTME: Read-side data shapes returned by the query layer.
# ABOUTME: Converts sqlite3 rows to SongSummary, SongHeader, and Projection payloads.

from dataclasses import dataclass, field
from typing import Any

from lyyyra.songs.types import VerseText


@dataclass
class SongSummary:
    """One song in the full listing, with all verse text concatenated."""

    id: int
    entry: int
    entry_text: str
    title: str
    verses: str
    author_music: str
    author_lyric: str
    kytara_file: str
    songbook_acronym: str


@dataclass
class SongHeader:
    """One song in the lightweight listing (no verse text)."""

    id: int
    entry: int
    entry_text: str
    title: str
    title_d: str
    verse_order: str
    kytara_file: str
    songbook_acronym: str


@dataclass
class Projection:
    """Presentation payload: verse order plus named verses in insertion order."""

    verse_order: str = ""
    verses: list[VerseText] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "verse_order": self.verse_order,
            "verses": [{"name": v.name, "lines": v.lines} for v in self.verses],
        }


def row_to_summary(row: Any) -> SongSummary:
    """Convert a listing row to a SongSummary."""
    return SongSummary(
        id=row["id"],
        entry=row["entry"] or 0,
        entry_text=row["entry_text"],
        title=row["title"] or "",
        verses=row["all_verses"] or "",
        author_music=row["authorMusic"],
        author_lyric=row["authorLyric"],
        kytara_file=row["kytara_file"],
        songbook_acronym=row["songbook_acronym"],
    )


def row_to_header(row: Any) -> SongHeader:
    """Convert a header row to a SongHeader. NULL text columns become ""."""
    return SongHeader(
        id=row["id"],
        entry=row["entry"] or 0,
        entry_text=row["entry_text"] or "",
        title=row["title"] or "",
        title_d=row["title_d"] or "",
        verse_order=row["verse_order"] or "",
        kytara_file=row["kytara_file"] or "",
        songbook_acronym=row["songbook_acronym"] or "",
    )
