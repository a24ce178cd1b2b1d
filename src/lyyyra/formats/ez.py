# ABOUTME: Parser for EZ songbook files (OpenLyrics XML dialect).
# ABOUTME: Extracts title, entry, verse order, authors, and verses with line breaks.

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from lyyyra.formats.xmlfile import element_text, load_xml
from lyyyra.songs.types import AuthorCredit, ParsedSong, VerseText

_LINE_BREAK_MARKERS = ("<br />", "<br/>")
_WRAPPER_TAGS_RE = re.compile(r"</?lines>")
_HORIZONTAL_SPACE_RE = re.compile(r"[ \t]{2,}")
_ENTRY_RE = re.compile(r"\d+", re.ASCII)


def _render_lines(element: ET.Element) -> str:
    """Flatten a <lines> element, turning <br/> children into newlines.

    Other inline markup (chords, comments) contributes only its text.
    """
    parts = [element.text or ""]
    for child in element:
        if child.tag == "br":
            parts.append("\n")
        else:
            parts.append(_render_lines(child))
        parts.append(child.tail or "")
    return "".join(parts)


def clean_verse_lines(raw: str) -> str:
    """Normalize verse text the way it is stored and displayed.

    Literal line-break markers become newlines, literal <lines> wrapper tags
    are removed, and runs of two or more spaces/tabs collapse into a single
    space. Newlines are preserved.
    """
    text = raw.strip()
    for marker in _LINE_BREAK_MARKERS:
        text = text.replace(marker, "\n")
    text = _WRAPPER_TAGS_RE.sub("", text)
    return _HORIZONTAL_SPACE_RE.sub(" ", text)


def _parse_entry(entry_text: str) -> int:
    """Entry attribute as an integer; anything not purely numeric yields 0."""
    stripped = entry_text.strip()
    return int(stripped) if _ENTRY_RE.fullmatch(stripped) else 0


def parse_ez_file(path: Path) -> ParsedSong:
    """Parse one EZ song file.

    Args:
        path: Path to an OpenLyrics XML file.

    Returns:
        ParsedSong with authors and discrete verses.

    Raises:
        ParseError: If the file cannot be read or is not well-formed XML.
    """
    root = load_xml(path)

    title = element_text(root.find("properties/titles/title"))

    songbook = root.find("properties/songbooks/songbook")
    entry_text = songbook.get("entry", "").strip() if songbook is not None else ""

    authors = [
        AuthorCredit(role=author.get("type", ""), value=element_text(author))
        for author in root.iterfind("properties/authors/author")
    ]

    verses = []
    for verse in root.iterfind("lyrics/verse"):
        raw = "\n".join(_render_lines(lines) for lines in verse.iterfind("lines"))
        verses.append(VerseText(name=verse.get("name", ""), lines=clean_verse_lines(raw)))

    return ParsedSong(
        title=title,
        entry_number=_parse_entry(entry_text),
        entry_text=entry_text,
        verse_order=element_text(root.find("properties/verseOrder")),
        authors=authors,
        verses=verses,
    )
