# ABOUTME: Song data package: parsed song records and search-key normalization.
# ABOUTME: Exports the record types shared by both XML dialects.

from lyyyra.songs.diacritics import remove_diacritics
from lyyyra.songs.types import AuthorCredit, ParsedSong, VerseText

__all__ = [
    "AuthorCredit",
    "ParsedSong",
    "VerseText",
    "remove_diacritics",
]
