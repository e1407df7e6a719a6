"""
Authentication for Street Reach APIs.

Staff sign in through Supabase Auth in the browser; the resulting access
token (an HS256 JWT signed with the project's JWT secret) is sent to this
service either as a Bearer token or in the sb-access-token cookie.

Usage:
    from streetreach.core.auth import CurrentUserDep, AdminUserDep

    @router.post("/endpoint")
    async def endpoint(user: CurrentUserDep):
        # user contains auth info
        pass
"""

import logging
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from pydantic import BaseModel

from streetreach.clients.record_store import get_record_store
from streetreach.exceptions import StoreError
from streetreach.services.record_store import RecordStore
from streetreach.settings import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_AUDIENCE = "authenticated"
ACCESS_TOKEN_COOKIE = "sb-access-token"


class UserRole:
    """Staff role values stored in the users table."""

    ADMIN = "admin"
    FIELD_WORKER = "field_worker"


class AuthenticatedUser(BaseModel):
    """Represents a signed-in staff member."""

    user_id: str
    email: str | None = None
    role: str | None = None
    raw_token: str | None = None

    # Full payload for detailed access
    token_payload: dict[str, Any] | None = None


def verify_access_token(token: str) -> dict[str, Any]:
    """Verify a Supabase access token.

    Args:
        token: The JWT to verify

    Returns:
        The decoded token payload

    Raises:
        HTTPException: If the token is invalid or expired
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=ACCESS_TOKEN_AUDIENCE,
            options={"verify_exp": True, "require": ["sub", "exp"]},
        )
        return payload
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token has expired",
        ) from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid access token: {e}",
        ) from e


def _get_bearer_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def _get_cookie_token(request: Request) -> str | None:
    """Extract the access token from the Supabase session cookie."""
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def get_current_user(request: Request) -> AuthenticatedUser:
    """Get the current authenticated user.

    Checks the Authorization Bearer header first, then the session cookie.

    Raises:
        HTTPException: If no valid authentication is found
    """
    token = _get_bearer_token(request) or _get_cookie_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(token)
    return AuthenticatedUser(
        user_id=payload["sub"],
        email=payload.get("email"),
        raw_token=token,
        token_payload=payload,
    )


# Type alias for dependency injection
CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]


async def require_admin(
    user: CurrentUserDep,
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> AuthenticatedUser:
    """Allow the request only for users whose profile role is admin."""
    try:
        role = await store.get_user_role(user.user_id)
    except StoreError as e:
        logger.warning("Could not load role for %s: %s", user.user_id, e)
        role = None

    if role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - Admin access required",
        )
    return user.model_copy(update={"role": role})


AdminUserDep = Annotated[AuthenticatedUser, Depends(require_admin)]
