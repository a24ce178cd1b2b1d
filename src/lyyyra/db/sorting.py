# ABOUTME: Sort preference handling for song listings.
# ABOUTME: Normalizes free-form sort keys to a fixed set and maps them to ORDER BY columns.

from enum import Enum


class SortOption(str, Enum):
    """Supported song list orderings. Values match the stored preference strings."""

    ENTRY = "entry"
    TITLE = "title"
    AUTHOR_MUSIC = "authorMusic"
    AUTHOR_LYRIC = "authorLyric"


def normalize_sort_option(raw: object) -> SortOption:
    """Map a raw sort key to a SortOption, falling back to ENTRY.

    Anything that is not a string, such as a number or boolean read back
    from a hand-edited status file, also falls back to ENTRY.
    """
    if not isinstance(raw, str):
        return SortOption.ENTRY
    trimmed = raw.strip()
    for option in SortOption:
        if option.value == trimmed:
            return option
    return SortOption.ENTRY


def is_valid_sort_option(raw: object) -> bool:
    """True when raw is exactly one of the supported values."""
    if not isinstance(raw, str) or not raw:
        return False
    return normalize_sort_option(raw).value == raw


_SONG_ORDER_COLUMNS = {
    SortOption.ENTRY: "entry",
    SortOption.TITLE: "title",
    SortOption.AUTHOR_MUSIC: "authorMusic",
    SortOption.AUTHOR_LYRIC: "authorLyric",
}


def song_order_column(option: SortOption) -> str:
    """ORDER BY column for the full song listing."""
    return _SONG_ORDER_COLUMNS[option]


def header_order_column(option: SortOption) -> str:
    """ORDER BY column for the header listing, which only sorts by title or entry."""
    return "title" if option is SortOption.TITLE else "entry"
