# ABOUTME: Parser for KK songbook files (OpenSong XML dialect).
# ABOUTME: Parses hymn numbers, strips numeric title prefixes, and splits [Vn] verse markers.

import re
from pathlib import Path

from lyyyra.formats.xmlfile import element_text, load_xml
from lyyyra.songs.types import ParsedSong, VerseText

_LEADING_DIGITS_RE = re.compile(r"[0-9]*")
# A title prefix is a whitespace-free token starting with a digit, followed by a space.
_TITLE_NUMBER_RE = re.compile(r"^([0-9][^ ]*) (.*)$", re.DOTALL)


def parse_hymn_number(hymn_number: str) -> int:
    """Extract the leading digits of a hymn number as an integer.

    Examples: "511A" -> 511, "067b" -> 67, "2.4" -> 2, "abc" -> 0, "" -> 0.
    """
    digits = _LEADING_DIGITS_RE.match(hymn_number.strip()).group(0)
    return int(digits) if digits else 0


def strip_title_number(title: str) -> str:
    """Remove a leading song-number token from a title.

    "065 Litanie" -> "Litanie", "511A Viděl jsem" -> "Viděl jsem".
    Titles that do not start with a digit-led token and a space are
    returned unchanged.
    """
    match = _TITLE_NUMBER_RE.match(title)
    if match is None:
        return title
    return match.group(2).strip()


def _is_verse_marker(line: str) -> bool:
    return line.startswith("[V") and "]" in line


def split_verse_markers(lyrics: str) -> list[VerseText]:
    """Split an OpenSong lyrics blob on [Vn] markers.

    Each marker opens a verse named after it in lower case ("[V2]" -> "v2").
    Lines are trimmed, blank lines dropped, and the remaining lines joined
    with a newline. Text before the first marker and markers with no lines
    produce no verse.
    """
    verses: list[VerseText] = []
    name: str | None = None
    lines: list[str] = []

    def flush() -> None:
        if name is not None and lines:
            verses.append(VerseText(name=name, lines="\n".join(lines)))

    for raw_line in lyrics.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if _is_verse_marker(line):
            flush()
            name = line[1 : line.index("]")].lower()
            lines = []
        elif name is not None:
            lines.append(line)

    flush()
    return verses


def parse_kk_file(path: Path) -> ParsedSong:
    """Parse one KK song file.

    The raw hymn number is kept as entry_text; the numeric prefix is removed
    from the title. KK files carry no verse order and no author credits.

    Raises:
        ParseError: If the file cannot be read or is not well-formed XML.
    """
    root = load_xml(path)

    hymn_number = element_text(root.find("hymn_number"))
    lyrics = root.findtext("lyrics") or ""

    return ParsedSong(
        title=strip_title_number(element_text(root.find("title"))),
        entry_number=parse_hymn_number(hymn_number),
        entry_text=hymn_number,
        verses=split_verse_markers(lyrics),
    )
