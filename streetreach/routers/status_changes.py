"""Program exit and return-to-active endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, status

from streetreach.exceptions import StoreError, ValidationError
from streetreach.routers.deps import CurrentUserDep, RecordStoreDep, to_http_exception
from streetreach.schemas.status_schemas import (
    ExitRequest,
    ReturnToActiveRequest,
    StatusChangeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/persons/{person_id}", tags=["Program Status"])


@router.post(
    "/exit",
    response_model=StatusChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def exit_program(
    person_id: str,
    request: ExitRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> StatusChangeResponse:
    """Exit a client from the program with a HUD exit destination."""
    try:
        change = await store.exit_program(
            person_id,
            request.exit_date,
            request.exit_destination,
            notes=request.exit_notes,
            created_by=current_user.user_id,
        )
    except StoreError as e:
        raise to_http_exception(e) from e

    logger.info("Person %s exited to %s", person_id, request.exit_destination)
    return StatusChangeResponse(status_change=change)


@router.post(
    "/return-to-active",
    response_model=StatusChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def return_to_active(
    person_id: str,
    request: ReturnToActiveRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> StatusChangeResponse:
    """Bring an exited client back into the program."""
    try:
        change = await store.return_to_active(
            person_id,
            request.return_date,
            notes=request.notes,
            created_by=current_user.user_id,
        )
    except (StoreError, ValidationError) as e:
        raise to_http_exception(e) from e

    logger.info("Person %s returned to active", person_id)
    return StatusChangeResponse(status_change=change)


@router.get("/status-changes")
async def list_status_changes(
    person_id: str,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> list[dict[str, Any]]:
    """Exit and return history for a client, most recent first."""
    try:
        return await store.list_status_changes(person_id)
    except StoreError as e:
        raise to_http_exception(e) from e
