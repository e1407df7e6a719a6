"""
Supabase REST client.

Street Reach keeps its tables in Supabase. Rows are read and written through
PostgREST (/rest/v1) and login accounts through the GoTrue admin API
(/auth/v1/admin), both authenticated with the service role key so that
row-level security does not filter server-side reads.
"""

from typing import Any

import httpx

from streetreach.settings import settings


class SupabaseService:
    """HTTP client for the Supabase REST and auth admin APIs."""

    def __init__(
        self,
        base_url: str | None = None,
        service_role_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.service_role_key = service_role_key or settings.supabase_service_role_key
        self.timeout = timeout or settings.supabase_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "apikey": self.service_role_key,
                    "Authorization": f"Bearer {self.service_role_key}",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> bool:
        """Return True when the REST endpoint answers."""
        client = await self._get_client()
        try:
            response = await client.get("/rest/v1/")
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, str] | None = None,
        order: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Read rows from a table.

        Args:
            table: Table name
            columns: PostgREST select list
            filters: Column -> PostgREST operator expression, e.g. {"id": "eq.123"}
            order: PostgREST order expression, e.g. "created_at.asc,id.asc"
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            List of row dicts

        Raises:
            httpx.HTTPStatusError: If Supabase returns an error
        """
        client = await self._get_client()

        params: dict[str, str] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        if offset:
            params["offset"] = str(offset)
        if limit is not None:
            params["limit"] = str(limit)

        response = await client.get(f"/rest/v1/{table}", params=params)
        response.raise_for_status()
        rows: list[dict[str, Any]] = response.json()
        return rows

    async def insert(
        self, table: str, rows: dict[str, Any] | list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert one or more rows and return them as stored."""
        client = await self._get_client()
        response = await client.post(
            f"/rest/v1/{table}",
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        response.raise_for_status()
        created: list[dict[str, Any]] = response.json()
        return created

    async def update(
        self, table: str, values: dict[str, Any], filters: dict[str, str]
    ) -> list[dict[str, Any]]:
        """Update rows matching the filters and return them as stored."""
        if not filters:
            raise ValueError("Refusing to update without a filter")

        client = await self._get_client()
        response = await client.patch(
            f"/rest/v1/{table}",
            params=filters,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        response.raise_for_status()
        updated: list[dict[str, Any]] = response.json()
        return updated

    async def delete(self, table: str, filters: dict[str, str]) -> None:
        """Delete rows matching the filters."""
        if not filters:
            raise ValueError("Refusing to delete without a filter")

        client = await self._get_client()
        response = await client.delete(f"/rest/v1/{table}", params=filters)
        response.raise_for_status()

    async def list_auth_users(self) -> list[dict[str, Any]]:
        """List login accounts from the auth admin API."""
        client = await self._get_client()
        response = await client.get("/auth/v1/admin/users")
        response.raise_for_status()
        data = response.json()
        users: list[dict[str, Any]] = data.get("users", [])
        return users

    async def create_auth_user(self, email: str, password: str) -> dict[str, Any]:
        """Create a confirmed login account."""
        client = await self._get_client()
        response = await client.post(
            "/auth/v1/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
        )
        response.raise_for_status()
        user: dict[str, Any] = response.json()
        return user

    async def delete_auth_user(self, user_id: str) -> None:
        """Delete a login account."""
        client = await self._get_client()
        response = await client.delete(f"/auth/v1/admin/users/{user_id}")
        response.raise_for_status()
