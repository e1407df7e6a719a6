"""Tests for the Supabase REST client."""

import json
from typing import Callable

import httpx
import pytest

from streetreach.services.supabase_service import SupabaseService

BASE_URL = "http://supabase.test"


def make_service(
    handler: Callable[[httpx.Request], httpx.Response],
) -> SupabaseService:
    return SupabaseService(
        base_url=BASE_URL + "/",
        service_role_key="service-key",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestSupabaseService:
    """Tests for SupabaseService."""

    @pytest.mark.anyio
    async def test_select_builds_postgrest_query(self) -> None:
        """Select sends filters, order and paging as query parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": "p1"}])

        service = make_service(handler)
        rows = await service.select(
            "persons",
            columns="id,first_name",
            filters={"id": "eq.p1"},
            order="created_at.asc,id.asc",
            offset=100,
            limit=50,
        )
        await service.close()

        assert rows == [{"id": "p1"}]
        request = seen[0]
        assert request.url.path == "/rest/v1/persons"
        assert request.url.params["select"] == "id,first_name"
        assert request.url.params["id"] == "eq.p1"
        assert request.url.params["order"] == "created_at.asc,id.asc"
        assert request.url.params["offset"] == "100"
        assert request.url.params["limit"] == "50"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"

    @pytest.mark.anyio
    async def test_insert_asks_for_representation(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json=[{"id": "e1", "person_id": "p1"}])

        service = make_service(handler)
        rows = await service.insert("encounters", {"person_id": "p1"})

        assert rows == [{"id": "e1", "person_id": "p1"}]
        assert seen[0].method == "POST"
        assert seen[0].headers["prefer"] == "return=representation"
        assert json.loads(seen[0].content) == {"person_id": "p1"}

    @pytest.mark.anyio
    async def test_update_and_delete_require_filters(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        service = make_service(handler)

        with pytest.raises(ValueError):
            await service.update("persons", {"first_name": "X"}, filters={})
        with pytest.raises(ValueError):
            await service.delete("persons", filters={})

    @pytest.mark.anyio
    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Invalid API key"})

        service = make_service(handler)

        with pytest.raises(httpx.HTTPStatusError):
            await service.select("persons")

    @pytest.mark.anyio
    @pytest.mark.parametrize(("status_code", "expected"), [(200, True), (503, False)])
    async def test_health_check(self, status_code: int, expected: bool) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code)

        service = make_service(handler)

        assert await service.health_check() is expected

    @pytest.mark.anyio
    async def test_health_check_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)

        assert await service.health_check() is False

    @pytest.mark.anyio
    async def test_create_auth_user_confirms_email(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "u1", "email": "a@example.org"})

        service = make_service(handler)
        user = await service.create_auth_user("a@example.org", "secret")

        assert user["id"] == "u1"
        assert seen[0].url.path == "/auth/v1/admin/users"
        assert json.loads(seen[0].content) == {
            "email": "a@example.org",
            "password": "secret",
            "email_confirm": True,
        }

    @pytest.mark.anyio
    async def test_list_auth_users(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"users": [{"id": "u1"}], "aud": "x"})

        service = make_service(handler)

        assert await service.list_auth_users() == [{"id": "u1"}]
