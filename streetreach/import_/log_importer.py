"""
Importer for legacy outreach log interactions.

Orchestrates the log import flow:
1. Load the person population in creation order
2. Resolve each name in a row's People cell with find_exact_match
3. Build an encounter per resolved person from the row and its sub type
4. Insert encounters, then recompute contact counts for everyone
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from streetreach.exceptions import StoreError
from streetreach.import_.log_csv_parser import ParsedLogEntry
from streetreach.matching import MatchResult, PersonRecord, find_exact_match
from streetreach.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Vista"
DEFAULT_WORKER = "Unknown"

ENCOUNTER_FLAGS = (
    "co_occurring_mh_sud",
    "transportation_provided",
    "shower_trailer",
    "placement_made",
    "refused_shelter",
    "refused_services",
    "shelter_unavailable",
    "high_utilizer_contact",
)


@dataclass
class LogImportReport:
    """Counts and unmatched names from a log import."""

    total_rows: int = 0
    imported: int = 0
    skipped: int = 0
    no_match: int = 0
    errors: int = 0
    persons_updated: int = 0
    dry_run: bool = False
    unmatched_names: list[str] = field(default_factory=list)
    subtype_counts: dict[str, int] = field(default_factory=dict)


class NameResolver:
    """Resolves log names against a fixed population, caching by lower-cased name."""

    def __init__(self, population: list[PersonRecord]):
        self.population = population
        self._cache: dict[str, Optional[MatchResult]] = {}

    def resolve(self, name: str) -> Optional[MatchResult]:
        key = name.lower()
        if key not in self._cache:
            self._cache[key] = find_exact_match(name, self.population)
        return self._cache[key]


def build_encounter(entry: ParsedLogEntry, person_id: str) -> dict[str, Any]:
    """Encounter row for one person named in a log entry."""
    assert entry.service_date is not None
    encounter: dict[str, Any] = {
        "person_id": person_id,
        "service_date": entry.service_date.isoformat(),
        "outreach_location": entry.location or DEFAULT_LOCATION,
        "latitude": entry.latitude,
        "longitude": entry.longitude,
        "outreach_worker": entry.worker or DEFAULT_WORKER,
        "case_management_notes": entry.notes,
        "service_subtype": entry.subtype,
        "log_id": entry.log_id,
        "other_services": entry.fields.get("other_services"),
        "placement_location": entry.fields.get("placement_location"),
        "placement_location_other": entry.fields.get("placement_location_other"),
    }
    for flag in ENCOUNTER_FLAGS:
        encounter[flag] = bool(entry.fields.get(flag, False))
    return encounter


def check_log_names(
    entries: Iterable[ParsedLogEntry], population: list[PersonRecord]
) -> tuple[list[str], list[str]]:
    """
    Resolve every distinct name in the log without writing anything.

    Returns:
        (matched names, unmatched names), each in first-seen order
    """
    resolver = NameResolver(population)
    seen: set[str] = set()
    matched: list[str] = []
    unmatched: list[str] = []

    for entry in entries:
        for name in entry.people:
            # Same key as the resolver cache
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            if resolver.resolve(name) is None:
                unmatched.append(name)
            else:
                matched.append(name)

    return matched, unmatched


async def import_log_entries(
    entries: list[ParsedLogEntry],
    store: RecordStore,
    dry_run: bool = False,
    replace: bool = False,
) -> LogImportReport:
    """
    Import parsed log entries as encounters.

    Args:
        entries: Parsed log rows
        store: Record store to read persons from and write encounters to
        dry_run: Resolve and count without writing
        replace: Delete every existing encounter before importing

    Returns:
        LogImportReport with counts and the distinct unmatched names
    """
    report = LogImportReport(total_rows=len(entries), dry_run=dry_run)

    population = await store.fetch_persons()
    resolver = NameResolver(population)

    if replace and not dry_run:
        logger.info("Deleting existing encounters before import")
        await store.delete_all_encounters()

    for entry in entries:
        if not entry.people:
            report.skipped += 1
            continue

        if entry.subtype:
            report.subtype_counts[entry.subtype] = (
                report.subtype_counts.get(entry.subtype, 0) + 1
            )

        for name in entry.people:
            match = resolver.resolve(name)
            if match is None:
                report.no_match += 1
                if name not in report.unmatched_names:
                    report.unmatched_names.append(name)
                continue

            if entry.service_date is None:
                logger.warning(
                    "Row %d: unreadable date %r", entry.row_number, entry.raw_date
                )
                report.errors += 1
                continue

            if dry_run:
                report.imported += 1
                continue

            try:
                await store.insert_encounter(build_encounter(entry, match.person.id))
            except StoreError as e:
                logger.error(
                    "Row %d: failed to insert encounter for %s: %s",
                    entry.row_number,
                    name,
                    e,
                )
                report.errors += 1
                continue

            report.imported += 1
            if report.imported % 500 == 0:
                logger.info("Imported %d interactions...", report.imported)

    if not dry_run and report.imported:
        report.persons_updated = await store.recalculate_contact_counts()

    return report
