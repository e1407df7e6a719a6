"""Tests for the legacy outreach log importer."""

from unittest.mock import AsyncMock

import pytest

from streetreach.exceptions import StoreError
from streetreach.import_.log_csv_parser import ParsedLogEntry, parse_log_csv
from streetreach.import_.log_importer import (
    NameResolver,
    build_encounter,
    check_log_names,
    import_log_entries,
)
from streetreach.matching import MatchType, PersonRecord
from tests.conftest import make_person

LOG = """Date,People,Location,Latitude,Longitude,User,Notes,Sub Type,Log ID
7/1/25 7:32 AM,"Maria Garcia, Unknown Person",Oceanside,33.19,-117.37,Dana,Gave ride,Transportation,L-1
7/2/25 8:00 AM,,Vista,,,,,,L-2
bad date,LAURAN WHITE,Vista,,,,,,L-3
7/3/25 9:00 AM,Bobby | Unknown Person,,,,,,Shelter,L-4
"""


@pytest.fixture
def entries() -> list[ParsedLogEntry]:
    return parse_log_csv(LOG)


class TestNameResolver:
    """Tests for NameResolver."""

    def test_caches_case_insensitively(
        self, sample_population: list[PersonRecord]
    ) -> None:
        resolver = NameResolver(sample_population)

        first = resolver.resolve("Bobby")
        again = resolver.resolve("BOBBY")

        assert first is not None
        assert first.person.id == "p4"
        assert first.match_type == MatchType.AKA_NICKNAME
        assert again is first

    def test_caches_misses(self, sample_population: list[PersonRecord]) -> None:
        population = list(sample_population)
        resolver = NameResolver(population)

        assert resolver.resolve("Zed Zulu") is None
        population.append(make_person("p7", "Zed", "Zulu"))

        assert resolver.resolve("Zed Zulu") is None


class TestBuildEncounter:
    """Tests for build_encounter()."""

    def test_row_and_subtype_fields(self, entries: list[ParsedLogEntry]) -> None:
        encounter = build_encounter(entries[0], "p1")

        assert encounter["person_id"] == "p1"
        assert encounter["service_date"] == "2025-07-01T07:32:00-07:00"
        assert encounter["outreach_location"] == "Oceanside"
        assert encounter["outreach_worker"] == "Dana"
        assert encounter["case_management_notes"] == "Gave ride"
        assert encounter["service_subtype"] == "Transportation"
        assert encounter["log_id"] == "L-1"
        assert encounter["transportation_provided"] is True
        assert encounter["placement_made"] is False

    def test_defaults(self, entries: list[ParsedLogEntry]) -> None:
        encounter = build_encounter(entries[3], "p4")

        assert encounter["outreach_location"] == "Vista"
        assert encounter["outreach_worker"] == "Unknown"
        assert encounter["latitude"] == 0.0
        assert encounter["placement_made"] is True


def test_check_log_names(
    entries: list[ParsedLogEntry], sample_population: list[PersonRecord]
) -> None:
    matched, unmatched = check_log_names(entries, sample_population)

    assert matched == ["Maria Garcia", "LAURAN WHITE", "Bobby"]
    assert unmatched == ["Unknown Person"]


def test_check_log_names_ignores_case_when_deduplicating(
    sample_population: list[PersonRecord],
) -> None:
    log = (
        "Date,People,Location\n"
        '7/1/25 7:32 AM,"Bobby, zed zulu",Vista\n'
        '7/2/25 7:32 AM,"bobby | Zed Zulu",Vista\n'
    )

    matched, unmatched = check_log_names(parse_log_csv(log), sample_population)

    assert matched == ["Bobby"]
    assert unmatched == ["zed zulu"]


class TestImportLogEntries:
    """Tests for import_log_entries()."""

    @pytest.mark.anyio
    async def test_import(
        self,
        entries: list[ParsedLogEntry],
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.recalculate_contact_counts.return_value = 2

        report = await import_log_entries(entries, mock_record_store)

        assert report.total_rows == 4
        assert report.imported == 2
        assert report.skipped == 1
        assert report.no_match == 2
        assert report.errors == 1
        assert report.persons_updated == 2
        assert report.unmatched_names == ["Unknown Person"]
        assert report.subtype_counts == {"Transportation": 1, "Shelter": 1}

        inserted = [
            call.args[0] for call in mock_record_store.insert_encounter.await_args_list
        ]
        assert [e["person_id"] for e in inserted] == ["p1", "p4"]
        mock_record_store.delete_all_encounters.assert_not_awaited()
        mock_record_store.recalculate_contact_counts.assert_awaited_once()

    @pytest.mark.anyio
    async def test_dry_run_writes_nothing(
        self,
        entries: list[ParsedLogEntry],
        mock_record_store: AsyncMock,
    ) -> None:
        report = await import_log_entries(
            entries, mock_record_store, dry_run=True, replace=True
        )

        assert report.dry_run is True
        assert report.imported == 2
        mock_record_store.insert_encounter.assert_not_awaited()
        mock_record_store.delete_all_encounters.assert_not_awaited()
        mock_record_store.recalculate_contact_counts.assert_not_awaited()

    @pytest.mark.anyio
    async def test_replace_deletes_existing_encounters(
        self,
        entries: list[ParsedLogEntry],
        mock_record_store: AsyncMock,
    ) -> None:
        await import_log_entries(entries, mock_record_store, replace=True)

        mock_record_store.delete_all_encounters.assert_awaited_once()

    @pytest.mark.anyio
    async def test_insert_failures_are_counted(
        self,
        entries: list[ParsedLogEntry],
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.insert_encounter.side_effect = StoreError("down")

        report = await import_log_entries(entries, mock_record_store)

        assert report.imported == 0
        assert report.errors == 3
        mock_record_store.recalculate_contact_counts.assert_not_awaited()

    @pytest.mark.anyio
    async def test_population_failure_propagates(
        self,
        entries: list[ParsedLogEntry],
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.fetch_persons.side_effect = StoreError("down")

        with pytest.raises(StoreError):
            await import_log_entries(entries, mock_record_store)
