"""
Canonical string folding for player names and search queries.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_INITIAL_PREFIX = re.compile(r"^([a-z])\.\s*")


def normalize(value) -> str:
    """
    Folds a raw string into its comparable form: lowercased, diacritics
    stripped, whitespace trimmed and collapsed to single spaces.

    Never raises; None or empty input yields "". Idempotent.
    """
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", str(value).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    # Folding can expose characters with their own lowercase/decomposed forms
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", text).strip()


def canonical_initial(text: str) -> str:
    """
    Rewrites an initial-style name or query to "j. rest" spacing.

    "j.bell", "j.  bell" and "j. bell" all become "j. bell"; a bare "j."
    is returned as-is. Other strings pass through unchanged.
    """
    match = _INITIAL_PREFIX.match(text)
    if not match:
        return text
    rest = text[match.end():]
    return f"{match.group(1)}. {rest}" if rest else f"{match.group(1)}."


def surname_of(name: str) -> str:
    """
    Returns the surname part of a short name: the text after the first
    period ("j. bellingham" -> "bellingham"), or the whole name for bare
    surnames and mononyms.
    """
    if not name:
        return ""
    if "." in name:
        surname = name.split(".", 1)[1].strip()
        if surname:
            return surname
    return name.strip()
