"""CSV export endpoints for reporting."""

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Response, status

from streetreach.exceptions import StoreError
from streetreach.export.csv_export import (
    ENCOUNTER_COLUMNS,
    PERSON_COLUMNS,
    build_metrics,
    format_encounters,
    format_persons,
    to_csv,
)
from streetreach.routers.deps import CurrentUserDep, RecordStoreDep, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/export", tags=["Export"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _check_range(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date",
        )


@router.get("/persons.csv")
async def export_persons(
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> Response:
    """All clients, one row each."""
    try:
        persons = await store.list_persons()
    except StoreError as e:
        raise to_http_exception(e) from e

    return _csv_response(
        to_csv(format_persons(persons), PERSON_COLUMNS), "clients.csv"
    )


@router.get("/encounters.csv")
async def export_encounters(
    store: RecordStoreDep,
    current_user: CurrentUserDep,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Response:
    """Service interactions in the date range, oldest first."""
    _check_range(start_date, end_date)
    try:
        persons = await store.list_persons()
        encounters = await store.list_encounters(
            start_date=start_date, end_date=end_date
        )
    except StoreError as e:
        raise to_http_exception(e) from e

    client_ids = {str(p["id"]): p.get("client_id") for p in persons}
    return _csv_response(
        to_csv(format_encounters(encounters, client_ids), ENCOUNTER_COLUMNS),
        "interactions.csv",
    )


@router.get("/metrics.csv")
async def export_metrics(
    store: RecordStoreDep,
    current_user: CurrentUserDep,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Response:
    """Summary metrics for the date range."""
    _check_range(start_date, end_date)
    try:
        persons = await store.list_persons()
        encounters = await store.list_encounters(
            start_date=start_date, end_date=end_date
        )
    except StoreError as e:
        raise to_http_exception(e) from e

    metrics = build_metrics(persons, encounters, start_date, end_date)
    logger.info(
        "Exported metrics for %d clients and %d interactions",
        len(persons),
        len(encounters),
    )
    return _csv_response(to_csv([metrics]), "metrics.csv")
