"""Types shared by the duplicate-check and exact-match resolvers."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PersonRecord(BaseModel):
    """A stored client, reduced to the fields that matter for matching."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    client_id: str | None = None
    first_name: str = Field(min_length=1)
    middle_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    aka: str | None = None
    date_of_birth: date | None = None
    last_contact: date | None = None
    contact_count: int = 0
    exit_date: date | None = None
    exit_destination: str | None = None

    @field_validator("date_of_birth", "last_contact", "exit_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v: Any) -> Any:
        """The store hands back empty strings for unset dates on older rows."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            # Timestamps are truncated to their calendar date
            return v.split("T")[0]
        return v

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v

    @field_validator("contact_count", mode="before")
    @classmethod
    def missing_count_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class MatchType(str, Enum):
    """Which exact-match rule resolved a log name."""

    EXACT_FULL = "exact_full"
    FIRST_LAST = "first_last"
    FIRST_LAST_PARTS = "first_last_parts"
    AKA_NICKNAME = "aka_nickname"
    FIRST_ONLY = "first_only"


@dataclass
class MatchCandidate:
    """A person flagged as a possible duplicate of an intake in progress."""

    person: PersonRecord
    similarity_score: float
    last_encounter_date: date | None = None


@dataclass
class MatchResult:
    """A legacy log name resolved to a single person."""

    person: PersonRecord
    match_type: MatchType


@dataclass
class DuplicateCheckResult:
    """Outcome of a duplicate check for a prospective intake."""

    has_potential_duplicates: bool = False
    similar_persons: list[MatchCandidate] = field(default_factory=list)


@dataclass
class DuplicateGroup:
    """Records from an admin scan that look like the same person."""

    persons: list[PersonRecord]
    similarity_score: float
