"""Service encounter endpoints."""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, status

from streetreach.exceptions import StoreError
from streetreach.routers.deps import CurrentUserDep, RecordStoreDep, to_http_exception
from streetreach.schemas.encounter_schemas import (
    EncounterListResponse,
    EncounterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/persons/{person_id}/encounters", tags=["Encounters"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_encounter(
    person_id: str,
    request: EncounterRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> dict[str, Any]:
    """Log a service interaction and update the client's last contact."""
    values = request.to_row()
    values["created_by"] = current_user.user_id
    try:
        encounter = await store.record_encounter(person_id, values)
    except StoreError as e:
        raise to_http_exception(e) from e

    logger.info("Recorded encounter %s for person %s", encounter.get("id"), person_id)
    return encounter


@router.get("", response_model=EncounterListResponse)
async def list_encounters(
    person_id: str,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
    start_date: date | None = None,
    end_date: date | None = None,
) -> EncounterListResponse:
    """List a client's encounters, oldest first."""
    try:
        encounters = await store.list_encounters(person_id, start_date, end_date)
    except StoreError as e:
        raise to_http_exception(e) from e

    return EncounterListResponse(total=len(encounters), encounters=encounters)


@router.put("/{encounter_id}")
async def update_encounter(
    person_id: str,
    encounter_id: str,
    request: EncounterRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> dict[str, Any]:
    """Correct a previously logged encounter."""
    try:
        return await store.update_encounter(encounter_id, request.to_row())
    except StoreError as e:
        raise to_http_exception(e) from e
