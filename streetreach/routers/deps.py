"""Shared dependencies for routers."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from streetreach.clients.record_store import get_record_store
from streetreach.core.auth import AdminUserDep, CurrentUserDep
from streetreach.exceptions import NotFoundError, StoreError, ValidationError
from streetreach.services.record_store import RecordStore

# Typed dependency aliases for use in endpoint signatures
RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]

__all__ = [
    "AdminUserDep",
    "CurrentUserDep",
    "RecordStoreDep",
    "to_http_exception",
]


def to_http_exception(e: StoreError | ValidationError) -> HTTPException:
    """Translate a record store or validation error into an HTTP error."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Record store unavailable",
    )
