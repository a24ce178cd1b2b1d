# ABOUTME: XML song dialect parsers (EZ OpenLyrics and KK OpenSong).
# ABOUTME: Each parser is a free function returning a ParsedSong.

from lyyyra.formats.ez import parse_ez_file
from lyyyra.formats.kk import parse_kk_file
from lyyyra.formats.xmlfile import ParseError

__all__ = [
    "ParseError",
    "parse_ez_file",
    "parse_kk_file",
]
