"""
CSV parser for legacy outreach log exports.

Each row of the log is one outreach contact that may name several people.
Columns: Date, People, Location, Latitude, Longitude, User, Notes,
Sub Type, Log ID.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

LOG_TIMEZONE = ZoneInfo("America/Los_Angeles")

_PEOPLE_SEPARATOR = re.compile(r"[,|]")
_LOG_DATE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})(?:\s+(\d{1,2}):(\d{2})\s*([AaPp][Mm])?)?$"
)

# Lower-cased variants seen in the log -> canonical sub type
SUBTYPE_NAMES = {
    "chronic/ high utilizer": "Chronic/High Utilizer",
    "chronic/high utilizer": "Chronic/High Utilizer",
    "no shelter available": "No Shelter Available",
    "in the process for qualifying for housing": "In Process for Housing",
    "vital documents (id)": "Vital Documents",
    "health appointment (mental & physical)": "Health Appointment",
    "benefits (health/income)": "Benefits",
    "emergency services (pert, hospital)": "Emergency Services",
    "basic needs (food, clothes)": "Basic Needs (Food, Clothes)",
    "street case management": "Street Case Management",
    "transportation": "Transportation",
    "phone assistance": "Phone Assistance",
    "phone assessment": "Phone Assessment",
    "refused shelter": "Refused Shelter",
    "refused services": "Refused Services",
    "referral": "Referral",
    "bcnc": "BCNC",
    "shelter": "Shelter",
    "bridge housing": "Bridge Housing",
    "relocate": "Relocate",
    "housed": "Housed",
    "veteran services": "Veteran Services",
    "family reunification": "Family Reunification",
    "animal services": "Animal Services",
    "aod services": "AOD Services",
    "return to residence": "Return to Residence",
}

# Canonical sub type -> encounter fields it implies
SUBTYPE_FIELDS: dict[str, dict[str, Any]] = {
    "Street Case Management": {},
    "Basic Needs (Food, Clothes)": {"other_services": "Food/Clothes provided"},
    "Chronic/High Utilizer": {"high_utilizer_contact": True},
    "No Shelter Available": {"shelter_unavailable": True},
    "Transportation": {"transportation_provided": True},
    "Phone Assistance": {"other_services": "Phone assistance"},
    "In Process for Housing": {"other_services": "Housing qualification in process"},
    "Refused Shelter": {"refused_shelter": True},
    "Refused Services": {"refused_services": True},
    "Referral": {"other_services": "Referral provided"},
    "Vital Documents": {"other_services": "ID/vital documents assistance"},
    "BCNC": {"placement_made": True, "placement_location": "BCNC"},
    "Shelter": {"placement_made": True},
    "Bridge Housing": {
        "placement_made": True,
        "placement_location": "Other",
        "placement_location_other": "Bridge Housing",
    },
    "Phone Assessment": {"other_services": "Phone assessment"},
    "Relocate": {
        "transportation_provided": True,
        "other_services": "Relocation assistance",
    },
    "Housed": {
        "placement_made": True,
        "placement_location": "Other",
        "placement_location_other": "Housed",
    },
    "Benefits": {"other_services": "Benefits assistance"},
    "Emergency Services": {"other_services": "Emergency services"},
    "Health Appointment": {
        "other_services": "Health appointment",
        "co_occurring_mh_sud": True,
    },
    "Veteran Services": {"other_services": "Veteran services"},
    "Family Reunification": {"other_services": "Family reunification"},
    "Animal Services": {"other_services": "Animal services"},
    "AOD Services": {"other_services": "AOD services"},
    "Return to Residence": {
        "placement_made": True,
        "placement_location": "Other",
        "placement_location_other": "Return to residence",
    },
}


@dataclass
class ParsedLogEntry:
    """One row of the legacy log."""

    row_number: int
    people: list[str]
    service_date: Optional[datetime]
    location: Optional[str]
    latitude: float
    longitude: float
    worker: Optional[str]
    notes: Optional[str]
    subtype: Optional[str]
    log_id: Optional[str]
    raw_date: str = ""
    fields: dict[str, Any] = field(default_factory=dict)


def parse_log_csv(csv_content: str) -> list[ParsedLogEntry]:
    """
    Parse legacy log CSV content.

    Rows are never rejected here; a missing People value yields an entry
    with no people and an unreadable Date yields service_date None, so the
    importer can count them.
    """
    reader = csv.DictReader(io.StringIO(csv_content))
    return [_parse_row(row, row_num) for row_num, row in enumerate(reader, start=2)]


def _cell(row: dict[str, Any], column: str) -> str:
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""


def _parse_row(row: dict[str, Any], row_number: int) -> ParsedLogEntry:
    raw_date = _cell(row, "Date")
    subtype = normalize_subtype(_cell(row, "Sub Type"))

    return ParsedLogEntry(
        row_number=row_number,
        people=split_people(_cell(row, "People")),
        service_date=parse_log_date(raw_date),
        location=_cell(row, "Location") or None,
        latitude=_parse_coordinate(_cell(row, "Latitude")),
        longitude=_parse_coordinate(_cell(row, "Longitude")),
        worker=_cell(row, "User") or None,
        notes=_cell(row, "Notes") or None,
        subtype=subtype,
        log_id=_cell(row, "Log ID") or None,
        raw_date=raw_date,
        fields=map_subtype(subtype),
    )


def split_people(people: str | None) -> list[str]:
    """Split a People cell on commas and pipes, dropping blanks."""
    if not people:
        return []
    return [name.strip() for name in _PEOPLE_SEPARATOR.split(people) if name.strip()]


def parse_log_date(value: str | None) -> Optional[datetime]:
    """
    Parse a log timestamp such as "7/1/25 7:32 AM" in Pacific time.

    Two-digit years are in the 2000s. A missing time means midnight.
    Returns None when the value cannot be read.
    """
    if not value:
        return None

    match = _LOG_DATE.match(value.strip())
    if not match:
        return None

    month, day, year, hour, minute, meridiem = match.groups()
    full_year = int(year) + 2000 if len(year) == 2 else int(year)
    hours = int(hour) if hour else 0
    minutes = int(minute) if minute else 0

    if meridiem:
        meridiem = meridiem.upper()
        if meridiem == "PM" and hours != 12:
            hours += 12
        elif meridiem == "AM" and hours == 12:
            hours = 0

    try:
        return datetime(
            full_year, int(month), int(day), hours, minutes, tzinfo=LOG_TIMEZONE
        )
    except ValueError:
        return None


def normalize_subtype(subtype: str | None) -> Optional[str]:
    """Map a sub type as written in the log to its canonical name."""
    if not subtype or not subtype.strip():
        return None
    return SUBTYPE_NAMES.get(subtype.strip().lower(), subtype.strip())


def map_subtype(subtype: str | None) -> dict[str, Any]:
    """Encounter fields implied by a canonical sub type."""
    if not subtype:
        return {}
    return dict(SUBTYPE_FIELDS.get(subtype, {}))


def _parse_coordinate(value: str) -> float:
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0
