"""
CSV export of clients, encounters and summary metrics.

Column headings match the reports the outreach team already files.
"""

import csv
import io
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from typing import Any

PERSON_COLUMNS = [
    "Client ID",
    "First Name",
    "Last Name",
    "Nickname",
    "Age",
    "Date of Birth",
    "Gender",
    "Race",
    "Ethnicity",
    "Living Situation",
    "Length Homeless",
    "Veteran",
    "Chronic Homeless",
    "Enrollment Date",
    "Case Manager",
    "Referral Source",
]

ENCOUNTER_COLUMNS = [
    "Service Date",
    "Client ID",
    "Location",
    "Latitude",
    "Longitude",
    "Outreach Worker",
    "Language Preference",
    "Co-Occurring MH/SUD",
    "Co-Occurring Type",
    "Transportation",
    "Shower Trailer",
    "Placement Made",
    "Placement Location",
    "Refused Shelter",
    "Refused Services",
    "Shelter Unavailable",
    "High Utilizer Contact",
    "Service Subtype",
    "Other Services",
    "Case Notes",
]


def yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_day(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).split("T")[0])
    except ValueError:
        return None


def calculate_age(date_of_birth: Any, today: date | None = None) -> int | None:
    """Whole years between a date of birth and today."""
    born = _parse_day(date_of_birth)
    if born is None:
        return None

    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def format_persons(
    persons: Iterable[Mapping[str, Any]], today: date | None = None
) -> list[dict[str, Any]]:
    rows = []
    for p in persons:
        age = calculate_age(p.get("date_of_birth"), today)
        if age is None:
            age = p.get("age")

        rows.append(
            {
                "Client ID": _text(p.get("client_id")),
                "First Name": _text(p.get("first_name")),
                "Last Name": _text(p.get("last_name")),
                "Nickname": _text(p.get("nickname")),
                "Age": _text(age),
                "Date of Birth": _text(p.get("date_of_birth")),
                "Gender": _text(p.get("gender")),
                "Race": _text(p.get("race")),
                "Ethnicity": _text(p.get("ethnicity")),
                "Living Situation": _text(p.get("living_situation")),
                "Length Homeless": _text(p.get("length_of_time_homeless")),
                "Veteran": yes_no(p.get("veteran_status")),
                "Chronic Homeless": yes_no(p.get("chronic_homeless")),
                "Enrollment Date": _text(p.get("enrollment_date")),
                "Case Manager": _text(p.get("case_manager")),
                "Referral Source": _text(p.get("referral_source")),
            }
        )
    return rows


def format_encounters(
    encounters: Iterable[Mapping[str, Any]],
    client_ids: Mapping[str, str | None] | None = None,
) -> list[dict[str, Any]]:
    """
    Format encounter rows for export.

    Args:
        encounters: Encounter rows from the store
        client_ids: Optional person id -> client id lookup; encounters of
            persons without a client id are labelled with the person id
    """
    client_ids = client_ids or {}
    rows = []
    for e in encounters:
        person_id = _text(e.get("person_id"))
        placement = e.get("placement_location")
        if placement == "Other" and e.get("placement_location_other"):
            placement = e.get("placement_location_other")

        rows.append(
            {
                "Service Date": _text(e.get("service_date")),
                "Client ID": client_ids.get(person_id) or person_id,
                "Location": _text(e.get("outreach_location")),
                "Latitude": _text(e.get("latitude")),
                "Longitude": _text(e.get("longitude")),
                "Outreach Worker": _text(e.get("outreach_worker")),
                "Language Preference": _text(e.get("language_preference")),
                "Co-Occurring MH/SUD": yes_no(e.get("co_occurring_mh_sud")),
                "Co-Occurring Type": _text(e.get("co_occurring_type")),
                "Transportation": yes_no(e.get("transportation_provided")),
                "Shower Trailer": yes_no(e.get("shower_trailer")),
                "Placement Made": yes_no(e.get("placement_made")),
                "Placement Location": _text(placement),
                "Refused Shelter": yes_no(e.get("refused_shelter")),
                "Refused Services": yes_no(e.get("refused_services")),
                "Shelter Unavailable": yes_no(e.get("shelter_unavailable")),
                "High Utilizer Contact": yes_no(e.get("high_utilizer_contact")),
                "Service Subtype": _text(e.get("service_subtype")),
                "Other Services": _text(e.get("other_services")),
                "Case Notes": _text(e.get("case_management_notes")),
            }
        )
    return rows


def build_metrics(
    persons: list[Mapping[str, Any]],
    encounters: list[Mapping[str, Any]],
    start_date: date | None = None,
    end_date: date | None = None,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Summary counts for the reporting period, as a single CSV row."""
    generated_at = generated_at or datetime.now(timezone.utc)

    def count(rows: list[Mapping[str, Any]], flag: str) -> int:
        return sum(1 for row in rows if row.get(flag))

    return {
        "Report Generated": generated_at.isoformat(),
        "Date Range Start": start_date.isoformat() if start_date else "All time",
        "Date Range End": end_date.isoformat() if end_date else "All time",
        "Total Clients": len(persons),
        "Total Interactions": len(encounters),
        "Co-Occurring Conditions": count(encounters, "co_occurring_mh_sud"),
        "Transportation Provided": count(encounters, "transportation_provided"),
        "Shower Trailer Services": count(encounters, "shower_trailer"),
        "Placements Made": count(encounters, "placement_made"),
        "Refused Shelter": count(encounters, "refused_shelter"),
        "High Utilizer Contacts": count(encounters, "high_utilizer_contact"),
        "Veterans": count(persons, "veteran_status"),
        "Chronically Homeless": count(persons, "chronic_homeless"),
    }


def to_csv(rows: list[dict[str, Any]], columns: list[str] | None = None) -> str:
    """
    Render rows as CSV text with a header row.

    Values containing commas, quotes or newlines are quoted.
    """
    if columns is None:
        columns = list(rows[0]) if rows else []

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()
