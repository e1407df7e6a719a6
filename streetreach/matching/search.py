"""Type-ahead client search over the loaded population."""

from collections.abc import Iterable

from rapidfuzz import fuzz, utils

from streetreach.matching.models import PersonRecord

# Field weights: names count more than aliases and the display id
SEARCH_FIELDS: dict[str, float] = {
    "first_name": 0.4,
    "last_name": 0.4,
    "nickname": 0.3,
    "aka": 0.3,
    "client_id": 0.3,
}
MIN_SEARCH_SCORE = 0.6
MIN_QUERY_LENGTH = 2

_MAX_WEIGHT = max(SEARCH_FIELDS.values())


def score_person(query: str, person: PersonRecord) -> float:
    """Best weighted partial-match score across the searchable fields."""
    best = 0.0
    for field_name, weight in SEARCH_FIELDS.items():
        value = getattr(person, field_name)
        if not value:
            continue
        ratio = fuzz.partial_ratio(query, value, processor=utils.default_process)
        best = max(best, (ratio / 100) * (weight / _MAX_WEIGHT))
    return best


def search_persons(
    term: str | None,
    population: Iterable[PersonRecord],
    limit: int | None = None,
) -> list[PersonRecord]:
    """
    Filter and rank persons by a free-text search term.

    A blank term returns the population unchanged. Terms shorter than two
    characters after trimming match nothing.
    """
    persons = list(population)
    if not term or not term.strip():
        return persons[:limit] if limit is not None else persons

    query = term.strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    scored = [(score_person(query, person), person) for person in persons]
    hits = [pair for pair in scored if pair[0] >= MIN_SEARCH_SCORE]
    hits.sort(key=lambda pair: pair[0], reverse=True)

    results = [person for _, person in hits]
    return results[:limit] if limit is not None else results
