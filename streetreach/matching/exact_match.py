"""
Exact name resolution for legacy log imports.

Historical log rows carry a free-text name. Attaching a row to the wrong
person is worse than leaving it unmatched, so this resolver never scores
fuzzily: it walks the population once, in fetch order, and returns the
first person that satisfies any of these rules (tried in order per person):

1. Full name (first, middle, last) equals the log name
2. First + last equals the log name (middle name stored but not logged)
3. Log name is exactly two tokens equal to first and last
4. AKA or nickname equals the log name
5. Log name is a single token equal to the first name of a person with no
   last name
"""

from collections.abc import Iterable

from streetreach.matching.models import MatchResult, MatchType, PersonRecord
from streetreach.matching.normalize import normalize

# Known misspellings in the legacy export (normalized log name -> normalized name)
SPELLING_FIXES: dict[str, str] = {
    "lauran white": "lauren white",
}


def full_name(person: PersonRecord) -> str:
    """First, middle and last name joined by single spaces, blanks omitted."""
    parts = [person.first_name, person.middle_name, person.last_name]
    return " ".join(part for part in parts if part)


def correct_spelling(normalized_name: str) -> str:
    return SPELLING_FIXES.get(normalized_name, normalized_name)


def _match_person(
    person: PersonRecord, query: str, tokens: list[str]
) -> MatchType | None:
    first = normalize(person.first_name)
    last = normalize(person.last_name)

    if normalize(full_name(person)) == query:
        return MatchType.EXACT_FULL

    if first and last and f"{first} {last}" == query:
        return MatchType.FIRST_LAST

    if len(tokens) == 2 and first == tokens[0] and last == tokens[1]:
        return MatchType.FIRST_LAST_PARTS

    if normalize(person.aka) == query or normalize(person.nickname) == query:
        return MatchType.AKA_NICKNAME

    if len(tokens) == 1 and first == tokens[0] and not last:
        return MatchType.FIRST_ONLY

    return None


def find_exact_match(
    log_name: str | None, population: Iterable[PersonRecord]
) -> MatchResult | None:
    """
    Resolve a legacy log name to a single person.

    Args:
        log_name: Name as written in the legacy log
        population: Person records in their natural fetch order

    Returns:
        MatchResult for the first person satisfying any rule, or None
    """
    query = correct_spelling(normalize(log_name))
    if not query:
        # A blank name would otherwise equal every missing alias
        return None
    tokens = query.split()

    for person in population:
        match_type = _match_person(person, query, tokens)
        if match_type is not None:
            return MatchResult(person=person, match_type=match_type)

    return None
