"""
Importer for the legacy client roster export.

Roster columns: First Name, Middle, Last Name, AKA, Gender, Ethnicity, Age,
Height, Weight, Hair, Eyes, Description, Notes, Last Contact, Contacts,
Date Created. Rows without a first name are skipped.
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from streetreach.exceptions import StoreError
from streetreach.services.record_store import RecordStore

logger = logging.getLogger(__name__)

_ROSTER_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y")


@dataclass
class RosterImportReport:
    """Counts from a roster import."""

    total_rows: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0


def parse_roster_date(value: str | None) -> Optional[str]:
    """ISO date for a roster date cell; "Never" and unreadable values are None."""
    if not value or value.strip() in ("", "Never"):
        return None

    text = value.strip().split(" ")[0].split("T")[0]
    for fmt in _ROSTER_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def _parse_int(value: str | None) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(float(value.strip()))
    except ValueError:
        return None


def _cell(row: dict[str, Any], column: str) -> Optional[str]:
    value = row.get(column)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def roster_row_to_person(
    row: dict[str, Any], today: date | None = None
) -> Optional[dict[str, Any]]:
    """Person row for a roster line, or None when it has no first name."""
    first_name = _cell(row, "First Name")
    if not first_name:
        return None

    aka = _cell(row, "AKA")
    enrollment = parse_roster_date(_cell(row, "Date Created"))

    return {
        "first_name": first_name,
        "middle_name": _cell(row, "Middle"),
        "last_name": _cell(row, "Last Name"),
        "nickname": aka,
        "aka": aka,
        "gender": _cell(row, "Gender"),
        "ethnicity": _cell(row, "Ethnicity"),
        "age": _parse_int(_cell(row, "Age")),
        "height": _cell(row, "Height"),
        "weight": _cell(row, "Weight"),
        "hair_color": _cell(row, "Hair"),
        "eye_color": _cell(row, "Eyes"),
        "physical_description": _cell(row, "Description"),
        "notes": _cell(row, "Notes"),
        "last_contact": parse_roster_date(_cell(row, "Last Contact")),
        "contact_count": _parse_int(_cell(row, "Contacts")) or 0,
        "enrollment_date": enrollment or (today or date.today()).isoformat(),
        "race": "Unknown",
        "living_situation": "Unknown",
        "veteran_status": False,
        "disability_status": False,
        "chronic_homeless": False,
    }


async def import_roster(
    csv_content: str,
    store: RecordStore,
    dry_run: bool = False,
) -> RosterImportReport:
    """Insert one person per roster row that has a first name."""
    rows = list(csv.DictReader(io.StringIO(csv_content)))
    report = RosterImportReport(total_rows=len(rows))

    for row_num, row in enumerate(rows, start=2):
        person = roster_row_to_person(row)
        if person is None:
            report.skipped += 1
            continue

        if dry_run:
            report.imported += 1
            continue

        try:
            await store.create_person(person)
        except StoreError as e:
            logger.error(
                "Row %d: failed to import %s: %s", row_num, person["first_name"], e
            )
            report.errors += 1
            continue

        report.imported += 1
        if report.imported % 100 == 0:
            logger.info("Imported %d clients...", report.imported)

    return report
