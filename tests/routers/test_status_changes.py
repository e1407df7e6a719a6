"""Tests for program exit and return-to-active endpoints."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from streetreach.exceptions import StoreError, ValidationError
from tests.conftest import TEST_USER_ID, ClientFactory


class TestExit:
    """Tests for POST /persons/{person_id}/exit."""

    @pytest.mark.anyio
    async def test_exit(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.exit_program.return_value = {
            "id": "s1",
            "change_type": "exit",
        }

        async with client_factory() as client:
            response = await client.post(
                "/persons/p1/exit",
                json={
                    "exit_date": "2026-10-01",
                    "exit_destination": "Safe Haven",
                    "exit_notes": "Moved in",
                },
            )

        assert response.status_code == 201
        assert response.json()["status_change"]["change_type"] == "exit"
        mock_record_store.exit_program.assert_awaited_once_with(
            "p1",
            date(2026, 10, 1),
            "Safe Haven",
            notes="Moved in",
            created_by=TEST_USER_ID,
        )

    @pytest.mark.anyio
    async def test_unknown_destination(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        async with client_factory() as client:
            response = await client.post(
                "/persons/p1/exit",
                json={"exit_date": "2026-10-01", "exit_destination": "Somewhere"},
            )

        assert response.status_code == 422
        mock_record_store.exit_program.assert_not_awaited()

    @pytest.mark.anyio
    async def test_store_unavailable(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.exit_program.side_effect = StoreError("down")

        async with client_factory() as client:
            response = await client.post(
                "/persons/p1/exit",
                json={"exit_date": "2026-10-01", "exit_destination": "Deceased"},
            )

        assert response.status_code == 503


class TestReturnToActive:
    """Tests for POST /persons/{person_id}/return-to-active."""

    @pytest.mark.anyio
    async def test_return(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.return_to_active.return_value = {
            "change_type": "return_to_active"
        }

        async with client_factory() as client:
            response = await client.post(
                "/persons/p6/return-to-active", json={"return_date": "2026-10-10"}
            )

        assert response.status_code == 201
        mock_record_store.return_to_active.assert_awaited_once_with(
            "p6", date(2026, 10, 10), notes=None, created_by=TEST_USER_ID
        )

    @pytest.mark.anyio
    async def test_person_not_exited(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        mock_record_store.return_to_active.side_effect = ValidationError(
            "Person p1 has not exited the program"
        )

        async with client_factory() as client:
            response = await client.post(
                "/persons/p1/return-to-active", json={"return_date": "2026-10-10"}
            )

        assert response.status_code == 400
        assert response.json()["detail"] == "Person p1 has not exited the program"


class TestStatusHistory:
    """Tests for GET /persons/{person_id}/status-changes."""

    @pytest.mark.anyio
    async def test_history(
        self,
        client_factory: ClientFactory,
        mock_record_store: AsyncMock,
    ) -> None:
        history = [{"change_type": "return_to_active"}, {"change_type": "exit"}]
        mock_record_store.list_status_changes.return_value = history

        async with client_factory() as client:
            response = await client.get("/persons/p6/status-changes")

        assert response.status_code == 200
        assert response.json() == history
