# ABOUTME: Parsed song records produced by the EZ and KK XML parsers.
# ABOUTME: ParsedSong is the interchange shape between parsing and ingestion.

from dataclasses import dataclass, field


@dataclass
class AuthorCredit:
    """A single author credit. Role is "words" or "music" in EZ files."""

    role: str
    value: str


@dataclass
class VerseText:
    """One verse: its name (e.g. "v1", "c") and its lines joined by newlines."""

    name: str
    lines: str


@dataclass
class ParsedSong:
    """A song as read from one XML file, before normalization and storage.

    entry_number is the integer used for sorting and numeric search;
    entry_text keeps the identifier exactly as the source wrote it
    ("288", "511A", "067b").
    """

    title: str
    entry_number: int
    entry_text: str
    verse_order: str = ""
    authors: list[AuthorCredit] = field(default_factory=list)
    verses: list[VerseText] = field(default_factory=list)
    kytara_file: str | None = None
    notes_file: str | None = None

    @property
    def verse_names(self) -> list[str]:
        """Verse names in document order."""
        return [verse.name for verse in self.verses]
