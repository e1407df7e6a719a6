"""Admin endpoints for managing staff logins."""

import logging

from fastapi import APIRouter, HTTPException, status

from streetreach.exceptions import StoreError
from streetreach.routers.deps import AdminUserDep, RecordStoreDep, to_http_exception
from streetreach.schemas.user_schemas import (
    CreateUserRequest,
    MessageResponse,
    UserListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Admin"])


@router.get("", response_model=UserListResponse)
async def list_users(
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> UserListResponse:
    """List staff profiles, newest first."""
    try:
        users = await store.list_users()
    except StoreError as e:
        raise to_http_exception(e) from e
    return UserListResponse(users=users)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    request: CreateUserRequest,
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> MessageResponse:
    """Create a staff login with a confirmed email and a profile row."""
    try:
        user = await store.create_user(
            request.email,
            request.password,
            role=request.role,
            full_name=request.full_name,
        )
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to create user: {e}",
        ) from e

    return MessageResponse(message="User created successfully", user=user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    store: RecordStoreDep,
    admin: AdminUserDep,
) -> MessageResponse:
    """Delete a staff login. Admins cannot delete their own account."""
    if user_id == admin.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )

    try:
        await store.delete_user(user_id)
    except StoreError as e:
        raise to_http_exception(e) from e

    logger.info("Admin %s deleted user %s", admin.user_id, user_id)
    return MessageResponse(message="User deleted successfully")
