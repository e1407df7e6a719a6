"""
Person matching for intake and legacy imports.

This module handles:
- Name normalization and edit-distance similarity
- Fuzzy duplicate checks before a new intake is created
- Exact name resolution for legacy log imports
- Type-ahead client search and whole-population duplicate scans
"""

from streetreach.matching.duplicate_checker import (
    check_for_duplicates,
    find_duplicate_groups,
)
from streetreach.matching.exact_match import find_exact_match
from streetreach.matching.models import (
    DuplicateCheckResult,
    DuplicateGroup,
    MatchCandidate,
    MatchResult,
    MatchType,
    PersonRecord,
)
from streetreach.matching.normalize import normalize, similarity
from streetreach.matching.search import search_persons

__all__ = [
    "DuplicateCheckResult",
    "DuplicateGroup",
    "MatchCandidate",
    "MatchResult",
    "MatchType",
    "PersonRecord",
    "check_for_duplicates",
    "find_duplicate_groups",
    "find_exact_match",
    "normalize",
    "search_persons",
    "similarity",
]
