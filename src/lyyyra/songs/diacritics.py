# ABOUTME: Diacritics stripping used to build accent-insensitive search keys.
# ABOUTME: Pure Unicode decomposition; no locale tables involved.

import unicodedata


def remove_diacritics(text: str) -> str:
    """Strip combining marks from text, keeping case and everything else.

    Decomposes to NFD, drops non-spacing marks (category Mn), and recomposes
    to NFC. Characters without a decomposition ("ß", ligatures, ASCII) pass
    through unchanged, so the function is idempotent.

    Example:
        >>> remove_diacritics("Příliš žluťoučký kůň")
        'Prilis zlutoucky kun'
    """
    if not text:
        return text
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped)
