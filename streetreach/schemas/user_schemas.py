"""Schemas for admin user management."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class CreateUserRequest(BaseModel):
    """Create a staff login and profile."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: Literal["admin", "field_worker"] = "field_worker"
    full_name: str | None = None


class UserListResponse(BaseModel):
    """Staff profiles, newest first."""

    users: list[dict[str, Any]]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
    user: dict[str, Any] | None = None
