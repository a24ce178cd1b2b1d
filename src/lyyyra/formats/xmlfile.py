# ABOUTME: Shared XML loading for the song parsers.
# ABOUTME: Reads a file into an ElementTree with namespace prefixes removed from tags.

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from lyyyra.errors import LyyyraError

logger = logging.getLogger(__name__)


class ParseError(LyyyraError):
    """Raised when a song file cannot be read or is not well-formed XML."""


def _strip_namespaces(root: ET.Element) -> None:
    """Drop "{namespace}" prefixes so lookups work with plain tag names."""
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith("{"):
            element.tag = element.tag.split("}", 1)[1]


def load_xml(path: Path) -> ET.Element:
    """Parse an XML file and return its root element.

    Raises:
        ParseError: If the file is missing, unreadable, or malformed.
    """
    try:
        tree = ET.parse(path)
    except ET.ParseError as exc:
        logger.error("Error unmarshalling XML in file %s: %s", path, exc)
        raise ParseError(f"Malformed XML: {path}: {exc}") from exc
    except OSError as exc:
        logger.error("Error reading XML file %s: %s", path, exc)
        raise ParseError(f"Failed to read XML file: {path}: {exc}") from exc

    root = tree.getroot()
    _strip_namespaces(root)
    return root


def element_text(element: ET.Element | None) -> str:
    """Return the stripped text of an element, or "" when absent."""
    if element is None or element.text is None:
        return ""
    return element.text.strip()
