"""Name normalization and edit-distance similarity."""

import re

from rapidfuzz.distance import Levenshtein

_NON_NAME_CHARS = re.compile(r"[^a-z0-9 ]")


def normalize(text: str | None) -> str:
    """
    Canonicalize a name for comparison.

    Lower-cases, drops everything except a-z, 0-9 and spaces, and trims the
    result. Accented letters are removed rather than transliterated.

    Examples:
        "  O'Brien " -> "obrien"
        "LAURAN WHITE" -> "lauran white"
        None -> ""
    """
    return _NON_NAME_CHARS.sub("", (text or "").lower().strip()).strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit costs for insert, delete and substitute."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Score two normalized strings in [0, 1], where 1.0 means identical.

    The distance is scaled by the longer string. Two empty strings are
    identical.
    """
    return Levenshtein.normalized_similarity(a, b)
