"""Tests for encounter endpoints."""

from datetime import date
from typing import Any
from unittest.mock import AsyncMock

import pytest

from streetreach.exceptions import NotFoundError
from tests.conftest import TEST_USER_ID, ClientFactory


def encounter_body(**overrides: Any) -> dict[str, Any]:
    body = {
        "service_date": "2026-10-01",
        "outreach_location": "Vista",
        "outreach_worker": "Dana",
        "latitude": 33.2,
        "longitude": -117.24,
        "shower_trailer": True,
    }
    body.update(overrides)
    return body


class TestCreateEncounter:
    """Tests for POST /persons/{person_id}/encounters."""

    @pytest.mark.anyio
    async def test_records_encounter_at_local_noon(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.record_encounter.return_value = {"id": "e1", "person_id": "p1"}

        async with client_factory() as client:
            response = await client.post("/persons/p1/encounters", json=encounter_body())

        assert response.status_code == 201
        assert response.json()["id"] == "e1"
        person_id, values = mock_record_store.record_encounter.await_args.args
        assert person_id == "p1"
        assert values["service_date"] == "2026-10-01T12:00:00-08:00"
        assert values["shower_trailer"] is True
        assert values["placement_made"] is False
        assert values["support_services"] == []
        assert values["created_by"] == TEST_USER_ID

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"outreach_location": ""},
            {"outreach_worker": "  "},
            {"latitude": 91},
            {"longitude": -181},
            {"service_date": "10/01/2026"},
        ],
    )
    async def test_invalid_encounter(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
        overrides: dict[str, Any],
    ) -> None:
        async with client_factory() as client:
            response = await client.post(
                "/persons/p1/encounters", json=encounter_body(**overrides)
            )

        assert response.status_code == 422
        mock_record_store.record_encounter.assert_not_awaited()

    @pytest.mark.anyio
    async def test_unknown_person(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.record_encounter.side_effect = NotFoundError("Person x not found")

        async with client_factory() as client:
            response = await client.post("/persons/x/encounters", json=encounter_body())

        assert response.status_code == 404


class TestListEncounters:
    """Tests for GET /persons/{person_id}/encounters."""

    @pytest.mark.anyio
    async def test_date_range(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.list_encounters.return_value = [{"id": "e1"}, {"id": "e2"}]

        async with client_factory() as client:
            response = await client.get(
                "/persons/p1/encounters",
                params={"start_date": "2026-01-01", "end_date": "2026-03-31"},
            )

        assert response.status_code == 200
        assert response.json() == {"total": 2, "encounters": [{"id": "e1"}, {"id": "e2"}]}
        mock_record_store.list_encounters.assert_awaited_once_with(
            "p1", date(2026, 1, 1), date(2026, 3, 31)
        )


class TestUpdateEncounter:
    """Tests for PUT /persons/{person_id}/encounters/{encounter_id}."""

    @pytest.mark.anyio
    async def test_update(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.update_encounter.return_value = {"id": "e1"}

        async with client_factory() as client:
            response = await client.put(
                "/persons/p1/encounters/e1",
                json=encounter_body(case_management_notes="Follow up Friday"),
            )

        assert response.status_code == 200
        encounter_id, values = mock_record_store.update_encounter.await_args.args
        assert encounter_id == "e1"
        assert values["case_management_notes"] == "Follow up Friday"
