"""Person endpoints: intake, search, matching and duplicate management."""

import logging
from datetime import date, timedelta
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from streetreach.exceptions import StoreError
from streetreach.matching import (
    PersonRecord,
    check_for_duplicates,
    find_duplicate_groups,
    find_exact_match,
    search_persons,
)
from streetreach.routers.deps import (
    AdminUserDep,
    CurrentUserDep,
    RecordStoreDep,
    to_http_exception,
)
from streetreach.schemas.person_schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    DuplicateGroupSchema,
    DuplicateScanResponse,
    IntakeRequest,
    MergeRequest,
    MergeResponse,
    PersonSummary,
    ResolveNameRequest,
    ResolveNameResponse,
    SearchResponse,
    SearchTab,
    SimilarPerson,
)
from streetreach.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/persons", tags=["Persons"])

DEFAULT_SEARCH_LIMIT = 50


def _in_tab(person: PersonRecord, tab: SearchTab, cutoff: date) -> bool:
    if tab == SearchTab.ALL:
        return True
    if tab == SearchTab.EXITED:
        return person.exit_date is not None
    if person.exit_date is not None:
        return False

    recent = person.last_contact is not None and person.last_contact >= cutoff
    return recent if tab == SearchTab.ACTIVE else not recent


def _by_last_contact(persons: list[PersonRecord]) -> list[PersonRecord]:
    """Most recently contacted first; never-contacted persons last."""
    contacted = [p for p in persons if p.last_contact is not None]
    never = [p for p in persons if p.last_contact is None]
    contacted.sort(key=lambda p: p.last_contact or date.min, reverse=True)
    return contacted + never


@router.post("/duplicate-check", response_model=DuplicateCheckResponse)
async def duplicate_check(
    request: DuplicateCheckRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> DuplicateCheckResponse:
    """
    Look for existing clients that may be the person being entered.

    The intake must never be blocked by this check: if the person list
    cannot be loaded the response simply reports no duplicates.
    """
    try:
        population = await store.fetch_persons()
    except StoreError as e:
        logger.warning("Duplicate check skipped, persons unavailable: %s", e)
        return DuplicateCheckResponse(
            has_potential_duplicates=False, similar_persons=[]
        )

    result = check_for_duplicates(
        request.first_name,
        request.last_name,
        request.date_of_birth,
        request.threshold,
        population=population,
    )

    return DuplicateCheckResponse(
        has_potential_duplicates=result.has_potential_duplicates,
        similar_persons=[
            SimilarPerson.from_candidate(c) for c in result.similar_persons
        ],
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    store: RecordStoreDep,
    current_user: CurrentUserDep,
    q: str = "",
    tab: SearchTab = SearchTab.ACTIVE,
    limit: int = Query(default=DEFAULT_SEARCH_LIMIT, ge=1, le=500),
) -> SearchResponse:
    """
    Search clients by name, nickname, AKA or client ID.

    Active clients are those not exited and contacted within the active
    window; inactive clients are not exited and have not been contacted
    within it.
    """
    try:
        population = await store.fetch_persons()
    except StoreError as e:
        raise to_http_exception(e) from e

    cutoff = date.today() - timedelta(days=settings.active_window_days)
    in_tab = [p for p in population if _in_tab(p, tab, cutoff)]

    if q.strip():
        matches = search_persons(q, in_tab)
    else:
        matches = _by_last_contact(in_tab)

    return SearchResponse(
        total=len(matches),
        results=[PersonSummary.from_record(p) for p in matches[:limit]],
    )


@router.post("/resolve", response_model=ResolveNameResponse)
async def resolve_name(
    request: ResolveNameRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> ResolveNameResponse:
    """Resolve a name as written in a legacy log to a single client."""
    try:
        population = await store.fetch_persons()
    except StoreError as e:
        raise to_http_exception(e) from e

    match = find_exact_match(request.name, population)
    if match is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No client matches '{request.name}'",
        )

    return ResolveNameResponse(
        person=PersonSummary.from_record(match.person),
        match_type=match.match_type,
    )


@router.get("/duplicates", response_model=DuplicateScanResponse)
async def duplicate_scan(
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> DuplicateScanResponse:
    """Scan all clients for likely duplicate records."""
    try:
        population = await store.fetch_persons()
    except StoreError as e:
        raise to_http_exception(e) from e

    groups = find_duplicate_groups(population)
    logger.info("Duplicate scan found %d groups", len(groups))
    return DuplicateScanResponse(
        groups=[DuplicateGroupSchema.from_group(g) for g in groups]
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_person(
    request: IntakeRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> dict[str, Any]:
    """Create a client from the intake form."""
    values = request.to_row()
    values["created_by"] = current_user.user_id
    try:
        return await store.create_person(values)
    except StoreError as e:
        raise to_http_exception(e) from e


@router.get("/{person_id}")
async def get_person(
    person_id: str,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> dict[str, Any]:
    """Get a client with every stored field."""
    try:
        return await store.get_person(person_id)
    except StoreError as e:
        raise to_http_exception(e) from e


@router.put("/{person_id}")
async def update_person(
    person_id: str,
    request: IntakeRequest,
    store: RecordStoreDep,
    current_user: CurrentUserDep,
) -> dict[str, Any]:
    """Update a client from the edit intake form."""
    values = request.to_row()
    if request.enrollment_date is None:
        # Keep the stored enrollment date
        values.pop("enrollment_date")
    try:
        return await store.update_person(person_id, values)
    except StoreError as e:
        raise to_http_exception(e) from e


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: str,
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> None:
    """Delete a client and their service history."""
    try:
        await store.get_person(person_id)
        await store.delete_person_encounters(person_id)
        await store.delete_person(person_id)
    except StoreError as e:
        raise to_http_exception(e) from e

    logger.info("Admin %s deleted person %s", admin.user_id, person_id)


@router.post("/{person_id}/merge", response_model=MergeResponse)
async def merge_persons(
    person_id: str,
    request: MergeRequest,
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> MergeResponse:
    """
    Merge a duplicate into this client.

    The duplicate's encounters are moved to this client, contact totals are
    combined, and the duplicate record is deleted.
    """
    if request.duplicate_person_id == person_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot merge a client with itself",
        )

    try:
        kept = await store.get_person(person_id)
        duplicate = await store.get_person(request.duplicate_person_id)

        moved = await store.reassign_encounters(duplicate["id"], kept["id"])

        last_contacts = [
            str(d) for d in (kept.get("last_contact"), duplicate.get("last_contact")) if d
        ]
        await store.update_person(
            person_id,
            {
                "contact_count": (kept.get("contact_count") or 0)
                + (duplicate.get("contact_count") or 0),
                "last_contact": max(last_contacts) if last_contacts else None,
            },
        )
        await store.delete_person(request.duplicate_person_id)
    except StoreError as e:
        raise to_http_exception(e) from e

    logger.info(
        "Merged person %s into %s (%d encounters moved)",
        request.duplicate_person_id,
        person_id,
        moved,
    )
    return MergeResponse(
        kept_person_id=person_id,
        deleted_person_id=request.duplicate_person_id,
        encounters_moved=moved,
    )
