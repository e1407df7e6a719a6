"""
Fuzzy duplicate detection for client intake.

A field worker entering a new client is warned when the population already
holds someone with a very similar name, or a similar name and the same date
of birth. The check is advisory: it never raises for odd input and the
caller treats a failed population fetch as "no duplicates".

Decision rule, per existing record:
1. Average the first-name and last-name similarities of the normalized names
2. Flag when the average exceeds 0.85
3. Also flag when both sides share a date of birth and the average exceeds 0.6
"""

from collections.abc import Iterable
from datetime import date

from streetreach.matching.models import (
    DuplicateCheckResult,
    DuplicateGroup,
    MatchCandidate,
    PersonRecord,
)
from streetreach.matching.normalize import normalize, similarity

# High enough that "Steven Smith" does not flag "Stanley Smith"
NAME_SIMILARITY_CUTOFF = 0.85
SAME_DOB_SIMILARITY_CUTOFF = 0.6
MAX_SIMILAR_PERSONS = 5
DEFAULT_THRESHOLD = 0.3


def _dob_key(value: date | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return value.strip()


def name_similarity(
    first_a: str | None,
    last_a: str | None,
    first_b: str | None,
    last_b: str | None,
) -> float:
    """Mean of first-name and last-name similarity after normalization."""
    first = similarity(normalize(first_a), normalize(first_b))
    last = similarity(normalize(last_a), normalize(last_b))
    return (first + last) / 2


def same_date_of_birth(a: date | str | None, b: date | str | None) -> bool:
    """True only when both dates are present and exactly equal."""
    key_a = _dob_key(a)
    key_b = _dob_key(b)
    return bool(key_a) and bool(key_b) and key_a == key_b


def is_potential_duplicate(average_similarity: float, same_dob: bool) -> bool:
    return average_similarity > NAME_SIMILARITY_CUTOFF or (
        same_dob and average_similarity > SAME_DOB_SIMILARITY_CUTOFF
    )


def check_for_duplicates(
    first_name: str,
    last_name: str,
    date_of_birth: date | str | None = None,
    threshold: float = DEFAULT_THRESHOLD,
    *,
    population: Iterable[PersonRecord],
) -> DuplicateCheckResult:
    """
    Find existing persons that may be the client being entered.

    Args:
        first_name: First name typed on the intake form
        last_name: Last name typed on the intake form (may be empty)
        date_of_birth: Optional date of birth, compared exactly
        threshold: Accepted for API compatibility; the decision uses the
            fixed cutoffs above
        population: Existing person records, in fetch order

    Returns:
        DuplicateCheckResult with at most five candidates, best first
    """
    query_first = normalize(first_name)
    query_last = normalize(last_name)

    matches: list[MatchCandidate] = []
    for person in population:
        first = similarity(query_first, normalize(person.first_name))
        last = similarity(query_last, normalize(person.last_name))
        average = (first + last) / 2
        same_dob = same_date_of_birth(date_of_birth, person.date_of_birth)

        if is_potential_duplicate(average, same_dob):
            matches.append(
                MatchCandidate(
                    person=person,
                    similarity_score=average,
                    last_encounter_date=person.last_contact,
                )
            )

    # sorted() is stable, so equal scores keep population order
    ranked = sorted(matches, key=lambda m: m.similarity_score, reverse=True)
    similar = ranked[:MAX_SIMILAR_PERSONS]

    return DuplicateCheckResult(
        has_potential_duplicates=len(similar) > 0,
        similar_persons=similar,
    )


def find_duplicate_groups(population: Iterable[PersonRecord]) -> list[DuplicateGroup]:
    """
    Group likely duplicates across the whole population.

    Each record is compared with every later record that has not already
    been grouped. A record joins at most one group, anchored on the earliest
    record it matched. Only groups with two or more members are returned.
    """
    persons = list(population)
    grouped: set[str] = set()
    groups: list[DuplicateGroup] = []

    for i, anchor in enumerate(persons):
        if anchor.id in grouped:
            continue

        members = [anchor]
        best_score = 0.0
        for other in persons[i + 1 :]:
            if other.id in grouped:
                continue

            average = name_similarity(
                anchor.first_name, anchor.last_name, other.first_name, other.last_name
            )
            same_dob = same_date_of_birth(anchor.date_of_birth, other.date_of_birth)
            if is_potential_duplicate(average, same_dob):
                members.append(other)
                grouped.add(other.id)
                best_score = max(best_score, average)

        if len(members) > 1:
            grouped.add(anchor.id)
            groups.append(DuplicateGroup(persons=members, similarity_score=best_score))

    return groups
