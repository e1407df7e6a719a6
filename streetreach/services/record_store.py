"""
Record store for persons, encounters, status changes and staff users.

Wraps SupabaseService with the domain operations the routers and import
scripts need. Transport failures are raised as StoreError so callers can
decide whether to degrade (duplicate checks) or fail (writes).
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from streetreach.exceptions import NotFoundError, StoreError, ValidationError
from streetreach.matching.models import PersonRecord
from streetreach.services.supabase_service import SupabaseService
from streetreach.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

PERSONS_TABLE = "persons"
ENCOUNTERS_TABLE = "encounters"
STATUS_CHANGES_TABLE = "status_changes"
USERS_TABLE = "users"

# Creation order keeps the population stable between fetches
PERSON_ORDER = "created_at.asc,id.asc"
ENCOUNTER_ORDER = "service_date.asc,id.asc"

MATCHING_COLUMNS = (
    "id,client_id,first_name,middle_name,last_name,nickname,aka,"
    "date_of_birth,last_contact,contact_count,exit_date,exit_destination"
)


def _eq(value: Any) -> str:
    return f"eq.{value}"


class RecordStore:
    """Domain-level access to the Street Reach tables."""

    def __init__(
        self,
        supabase: SupabaseService,
        page_size: int | None = None,
        max_pages: int | None = None,
    ):
        self.supabase = supabase
        self.page_size = page_size or settings.person_page_size
        self.max_pages = max_pages or settings.person_max_pages

    async def _call(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{operation} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{operation} failed: {e}") from e

    async def _fetch_all(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, str] | None = None,
        order: str | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
    ) -> list[dict[str, Any]]:
        """Read a table page by page, stopping at a short page or the page cap."""
        size = page_size or self.page_size
        cap = max_pages or self.max_pages
        rows: list[dict[str, Any]] = []

        for page in range(cap):
            batch = await self._call(
                f"Fetching {table}",
                lambda: self.supabase.select(
                    table,
                    columns=columns,
                    filters=filters,
                    order=order,
                    offset=page * size,
                    limit=size,
                ),
            )
            rows.extend(batch)
            if len(batch) < size:
                return rows

        logger.warning(
            "Stopped reading %s after %d pages (%d rows); remaining rows ignored",
            table,
            cap,
            len(rows),
        )
        return rows

    async def health_check(self) -> bool:
        return await self.supabase.health_check()

    # Persons

    async def fetch_persons(
        self,
        page_size: int | None = None,
        max_pages: int | None = None,
    ) -> list[PersonRecord]:
        """
        Load the person population for matching, in creation order.

        Rows that do not satisfy PersonRecord (e.g. a blank first name) are
        skipped with a warning.
        """
        rows = await self._fetch_all(
            PERSONS_TABLE,
            columns=MATCHING_COLUMNS,
            order=PERSON_ORDER,
            page_size=page_size,
            max_pages=max_pages,
        )

        persons: list[PersonRecord] = []
        for row in rows:
            try:
                persons.append(PersonRecord.model_validate(row))
            except PydanticValidationError as e:
                logger.warning("Skipping person %s: %s", row.get("id"), e)

        logger.info("Loaded %d persons for matching", len(persons))
        return persons

    async def get_person(self, person_id: str) -> dict[str, Any]:
        rows = await self._call(
            "Fetching person",
            lambda: self.supabase.select(
                PERSONS_TABLE, filters={"id": _eq(person_id)}, limit=1
            ),
        )
        if not rows:
            raise NotFoundError(f"Person {person_id} not found")
        return rows[0]

    async def create_person(self, values: dict[str, Any]) -> dict[str, Any]:
        rows = await self._call(
            "Creating person", lambda: self.supabase.insert(PERSONS_TABLE, values)
        )
        if not rows:
            raise StoreError("Person created but row not returned")
        logger.info("Created person %s", rows[0].get("id"))
        return rows[0]

    async def update_person(
        self, person_id: str, values: dict[str, Any]
    ) -> dict[str, Any]:
        rows = await self._call(
            "Updating person",
            lambda: self.supabase.update(
                PERSONS_TABLE, values, filters={"id": _eq(person_id)}
            ),
        )
        if not rows:
            raise NotFoundError(f"Person {person_id} not found")
        return rows[0]

    async def delete_person(self, person_id: str) -> None:
        await self._call(
            "Deleting person",
            lambda: self.supabase.delete(PERSONS_TABLE, filters={"id": _eq(person_id)}),
        )

    async def list_persons(self) -> list[dict[str, Any]]:
        """All person rows with every column, in creation order."""
        return await self._fetch_all(PERSONS_TABLE, order=PERSON_ORDER)

    # Encounters

    async def record_encounter(
        self, person_id: str, values: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Insert an encounter and advance the person's contact bookkeeping.

        contact_count is incremented; last_contact only moves forward.
        """
        person = await self.get_person(person_id)

        rows = await self._call(
            "Creating encounter",
            lambda: self.supabase.insert(
                ENCOUNTERS_TABLE, {**values, "person_id": person_id}
            ),
        )
        if not rows:
            raise StoreError("Encounter created but row not returned")
        encounter = rows[0]

        service_day = str(values["service_date"]).split("T")[0]
        current_last = person.get("last_contact")
        new_last = (
            service_day
            if not current_last or service_day > str(current_last)
            else current_last
        )

        await self.update_person(
            person_id,
            {
                "contact_count": (person.get("contact_count") or 0) + 1,
                "last_contact": new_last,
            },
        )
        return encounter

    async def insert_encounter(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert an encounter row as-is, without contact bookkeeping."""
        rows = await self._call(
            "Creating encounter",
            lambda: self.supabase.insert(ENCOUNTERS_TABLE, values),
        )
        return rows[0] if rows else {}

    async def update_encounter(
        self, encounter_id: str, values: dict[str, Any]
    ) -> dict[str, Any]:
        rows = await self._call(
            "Updating encounter",
            lambda: self.supabase.update(
                ENCOUNTERS_TABLE, values, filters={"id": _eq(encounter_id)}
            ),
        )
        if not rows:
            raise NotFoundError(f"Encounter {encounter_id} not found")
        return rows[0]

    async def list_encounters(
        self,
        person_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict[str, Any]]:
        filters: dict[str, str] = {}
        if person_id:
            filters["person_id"] = _eq(person_id)

        # PostgREST takes repeated keys as an and(); express a range explicitly
        if start_date and end_date:
            filters["and"] = (
                f"(service_date.gte.{start_date.isoformat()},"
                f"service_date.lte.{end_date.isoformat()}T23:59:59)"
            )
        elif start_date:
            filters["service_date"] = f"gte.{start_date.isoformat()}"
        elif end_date:
            filters["service_date"] = f"lte.{end_date.isoformat()}T23:59:59"

        return await self._fetch_all(
            ENCOUNTERS_TABLE, filters=filters or None, order=ENCOUNTER_ORDER
        )

    async def reassign_encounters(self, from_person_id: str, to_person_id: str) -> int:
        """Move every encounter of one person to another; returns rows moved."""
        rows = await self._call(
            "Reassigning encounters",
            lambda: self.supabase.update(
                ENCOUNTERS_TABLE,
                {"person_id": to_person_id},
                filters={"person_id": _eq(from_person_id)},
            ),
        )
        return len(rows)

    async def delete_person_encounters(self, person_id: str) -> None:
        await self._call(
            "Deleting encounters",
            lambda: self.supabase.delete(
                ENCOUNTERS_TABLE, filters={"person_id": _eq(person_id)}
            ),
        )

    async def delete_all_encounters(self) -> None:
        await self._call(
            "Deleting encounters",
            lambda: self.supabase.delete(ENCOUNTERS_TABLE, filters={"id": "not.is.null"}),
        )

    async def recalculate_contact_counts(self) -> int:
        """
        Recompute contact_count and last_contact from all encounters.

        Returns:
            Number of persons updated
        """
        encounters = await self._fetch_all(
            ENCOUNTERS_TABLE,
            columns="person_id,service_date",
            order=ENCOUNTER_ORDER,
            max_pages=10_000,
        )
        logger.info("Fetched %d encounters for contact count update", len(encounters))

        counts: dict[str, int] = {}
        last_contact: dict[str, str] = {}
        for enc in encounters:
            person_id = enc["person_id"]
            day = str(enc["service_date"]).split("T")[0]
            counts[person_id] = counts.get(person_id, 0) + 1
            if day > last_contact.get(person_id, ""):
                last_contact[person_id] = day

        updated = 0
        for person_id, count in counts.items():
            try:
                await self.update_person(
                    person_id,
                    {"contact_count": count, "last_contact": last_contact[person_id]},
                )
                updated += 1
            except StoreError as e:
                logger.warning("Failed to update contact count for %s: %s", person_id, e)

        return updated

    # Program status

    async def exit_program(
        self,
        person_id: str,
        exit_date: date,
        exit_destination: str,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> dict[str, Any]:
        await self.get_person(person_id)

        rows = await self._call(
            "Recording exit",
            lambda: self.supabase.insert(
                STATUS_CHANGES_TABLE,
                {
                    "person_id": person_id,
                    "change_type": "exit",
                    "change_date": exit_date.isoformat(),
                    "exit_destination": exit_destination,
                    "notes": notes,
                    "created_by": created_by,
                },
            ),
        )

        await self.update_person(
            person_id,
            {
                "exit_date": exit_date.isoformat(),
                "exit_destination": exit_destination,
                "exit_notes": notes,
            },
        )
        return rows[0] if rows else {}

    async def return_to_active(
        self,
        person_id: str,
        return_date: date,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> dict[str, Any]:
        person = await self.get_person(person_id)
        if not person.get("exit_date"):
            raise ValidationError(f"Person {person_id} has not exited the program")

        rows = await self._call(
            "Recording return to active",
            lambda: self.supabase.insert(
                STATUS_CHANGES_TABLE,
                {
                    "person_id": person_id,
                    "change_type": "return_to_active",
                    "change_date": return_date.isoformat(),
                    "notes": notes,
                    "created_by": created_by,
                },
            ),
        )

        await self.update_person(
            person_id,
            {"exit_date": None, "exit_destination": None, "exit_notes": None},
        )
        return rows[0] if rows else {}

    async def list_status_changes(self, person_id: str) -> list[dict[str, Any]]:
        return await self._fetch_all(
            STATUS_CHANGES_TABLE,
            filters={"person_id": _eq(person_id)},
            order="change_date.desc,created_at.desc",
        )

    # Staff users

    async def get_user_role(self, user_id: str) -> str | None:
        rows = await self._call(
            "Fetching user role",
            lambda: self.supabase.select(
                USERS_TABLE, columns="role", filters={"id": _eq(user_id)}, limit=1
            ),
        )
        if not rows:
            return None
        role: str | None = rows[0].get("role")
        return role

    async def list_users(self) -> list[dict[str, Any]]:
        """Staff profiles, newest first, with the login account creation time."""
        auth_users = await self._call(
            "Listing auth users", self.supabase.list_auth_users
        )
        profiles = await self._call(
            "Listing user profiles",
            lambda: self.supabase.select(USERS_TABLE, order="created_at.desc"),
        )

        auth_created = {u.get("id"): u.get("created_at") for u in auth_users}
        return [
            {
                **profile,
                "auth_created_at": auth_created.get(profile.get("id"))
                or profile.get("created_at"),
            }
            for profile in profiles
        ]

    async def create_user(
        self,
        email: str,
        password: str,
        role: str = "field_worker",
        full_name: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a login account and its staff profile.

        The login account is deleted again if the profile insert fails.
        """
        auth_user = await self._call(
            "Creating auth user",
            lambda: self.supabase.create_auth_user(email, password),
        )
        user_id = auth_user["id"]

        try:
            await self._call(
                "Creating user profile",
                lambda: self.supabase.insert(
                    USERS_TABLE,
                    {
                        "id": user_id,
                        "email": email,
                        "role": role,
                        "full_name": full_name,
                    },
                ),
            )
        except StoreError:
            logger.warning("Profile insert failed; removing auth user %s", user_id)
            await self._call(
                "Rolling back auth user",
                lambda: self.supabase.delete_auth_user(user_id),
            )
            raise

        logger.info("Created %s user %s", role, email)
        return auth_user

    async def delete_user(self, user_id: str) -> None:
        await self._call(
            "Deleting auth user", lambda: self.supabase.delete_auth_user(user_id)
        )


def create_record_store() -> RecordStore:
    """Factory function to create a RecordStore backed by Supabase."""
    return RecordStore(SupabaseService())
