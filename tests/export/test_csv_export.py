"""Tests for CSV export formatting."""

from datetime import date, datetime, timezone

import pytest

from streetreach.export.csv_export import (
    ENCOUNTER_COLUMNS,
    PERSON_COLUMNS,
    build_metrics,
    calculate_age,
    format_encounters,
    format_persons,
    to_csv,
)

TODAY = date(2026, 10, 19)


class TestCalculateAge:
    """Tests for calculate_age()."""

    @pytest.mark.parametrize(
        ("dob", "expected"),
        [
            ("1975-03-14", 51),
            ("1975-10-19", 51),
            ("1975-10-20", 50),
            ("1975-10-20T00:00:00", 50),
            (date(2000, 1, 1), 26),
            ("", None),
            (None, None),
            ("not a date", None),
        ],
    )
    def test_age(self, dob: object, expected: int | None) -> None:
        assert calculate_age(dob, TODAY) == expected


class TestFormatPersons:
    """Tests for format_persons()."""

    def test_row(self) -> None:
        rows = format_persons(
            [
                {
                    "client_id": "CL-0001",
                    "first_name": "Maria",
                    "last_name": "Garcia",
                    "date_of_birth": "1975-03-14",
                    "veteran_status": False,
                    "chronic_homeless": True,
                }
            ],
            today=TODAY,
        )

        assert list(rows[0]) == PERSON_COLUMNS
        assert rows[0]["Age"] == "51"
        assert rows[0]["Nickname"] == ""
        assert rows[0]["Veteran"] == "No"
        assert rows[0]["Chronic Homeless"] == "Yes"

    def test_stored_age_without_dob(self) -> None:
        rows = format_persons([{"first_name": "Bob", "age": 60}], today=TODAY)

        assert rows[0]["Age"] == "60"


class TestFormatEncounters:
    """Tests for format_encounters()."""

    def test_other_placement_uses_free_text(self) -> None:
        rows = format_encounters(
            [
                {
                    "person_id": "p1",
                    "placement_made": True,
                    "placement_location": "Other",
                    "placement_location_other": "Bridge Housing",
                }
            ],
            {"p1": "CL-0001"},
        )

        assert list(rows[0]) == ENCOUNTER_COLUMNS
        assert rows[0]["Client ID"] == "CL-0001"
        assert rows[0]["Placement Made"] == "Yes"
        assert rows[0]["Placement Location"] == "Bridge Housing"
        assert rows[0]["Refused Shelter"] == "No"

    def test_without_client_ids(self) -> None:
        rows = format_encounters([{"person_id": "p9", "placement_location": "BCNC"}])

        assert rows[0]["Client ID"] == "p9"
        assert rows[0]["Placement Location"] == "BCNC"


class TestBuildMetrics:
    """Tests for build_metrics()."""

    def test_counts(self) -> None:
        persons = [
            {"veteran_status": True, "chronic_homeless": True},
            {"veteran_status": False},
        ]
        encounters = [
            {"co_occurring_mh_sud": True, "refused_shelter": True},
            {"shower_trailer": True, "refused_shelter": True},
            {"high_utilizer_contact": True},
        ]
        generated = datetime(2026, 10, 19, 16, 0, tzinfo=timezone.utc)

        metrics = build_metrics(
            persons, encounters, date(2026, 7, 1), None, generated_at=generated
        )

        assert metrics["Report Generated"] == "2026-10-19T16:00:00+00:00"
        assert metrics["Date Range Start"] == "2026-07-01"
        assert metrics["Date Range End"] == "All time"
        assert metrics["Total Clients"] == 2
        assert metrics["Total Interactions"] == 3
        assert metrics["Co-Occurring Conditions"] == 1
        assert metrics["Shower Trailer Services"] == 1
        assert metrics["Refused Shelter"] == 2
        assert metrics["High Utilizer Contacts"] == 1
        assert metrics["Placements Made"] == 0
        assert metrics["Veterans"] == 1
        assert metrics["Chronically Homeless"] == 1


class TestToCsv:
    """Tests for to_csv()."""

    def test_quotes_special_values(self) -> None:
        text = to_csv(
            [{"Name": "Garcia, Maria", "Notes": 'Said "hi"'}], ["Name", "Notes"]
        )

        assert text == 'Name,Notes\n"Garcia, Maria","Said ""hi"""\n'

    def test_columns_from_first_row(self) -> None:
        assert to_csv([{"A": 1, "B": 2}]) == "A,B\n1,2\n"

    def test_empty(self) -> None:
        assert to_csv([], ["A"]) == "A\n"
