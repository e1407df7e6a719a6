"""Schemas for person endpoints: intake, search and matching."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from streetreach.matching import (
    DuplicateGroup,
    MatchCandidate,
    MatchType,
    PersonRecord,
)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class IntakeRequest(BaseModel):
    """Client intake form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    # Personal information
    first_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    aka: str | None = Field(default=None, max_length=200)
    gender: str | None = None
    ethnicity: str | None = None
    age: int | None = Field(default=None, ge=0, le=120)

    # Physical description
    height: str | None = Field(default=None, max_length=50)
    weight: str | None = Field(default=None, max_length=50)
    hair_color: str | None = Field(default=None, max_length=50)
    eye_color: str | None = Field(default=None, max_length=50)

    # Contact & notes
    notes: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None
    race: str | None = None
    sexual_orientation: str | None = None
    preferred_language: str | None = None

    # Status information
    veteran_status: bool = False
    disability_status: bool = False
    disability_types: list[str] = Field(default_factory=list)
    chronic_homeless: bool = False
    domestic_violence_victim: bool = False
    chronic_health: bool = False
    mental_health: bool = False
    addictions: list[str] = Field(default_factory=list)
    living_situation: str | None = None
    length_of_time_homeless: str | None = None
    evictions: int | None = Field(default=None, ge=0)
    income: str | None = None
    income_amount: float | None = Field(default=None, ge=0)
    support_system: str | None = None

    # Program information
    enrollment_date: date | None = None
    case_manager: str | None = None
    referral_source: str | None = None
    referral_source_other: str | None = None
    release_of_information: bool = False

    @field_validator(
        "middle_name",
        "last_name",
        "aka",
        "date_of_birth",
        "enrollment_date",
        mode="before",
    )
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("disability_types", "addictions", mode="before")
    @classmethod
    def null_list_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_row(self) -> dict[str, Any]:
        """Row for the persons table; the AKA doubles as the nickname."""
        row = self.model_dump(mode="json")
        row["nickname"] = self.aka
        if row["enrollment_date"] is None:
            row["enrollment_date"] = date.today().isoformat()
        return row


class PersonSummary(BaseModel):
    """Identifying fields of a person, as listed in search results."""

    id: str
    client_id: str | None = None
    first_name: str
    middle_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    aka: str | None = None
    date_of_birth: date | None = None
    last_contact: date | None = None
    contact_count: int = 0
    exit_date: date | None = None
    exit_destination: str | None = None

    @classmethod
    def from_record(cls, person: PersonRecord) -> "PersonSummary":
        return cls.model_validate(person.model_dump())


class DuplicateCheckRequest(BaseModel):
    """Name and optional date of birth typed on an intake in progress."""

    first_name: str
    last_name: str = ""
    date_of_birth: str | None = None
    threshold: float = Field(default=0.3, ge=0, le=1)


class SimilarPerson(BaseModel):
    """A possible duplicate shown to the field worker."""

    id: str
    client_id: str | None = None
    first_name: str
    last_name: str | None = None
    nickname: str | None = None
    date_of_birth: date | None = None
    similarity_score: float
    last_encounter_date: date | None = None

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "SimilarPerson":
        person = candidate.person
        return cls(
            id=person.id,
            client_id=person.client_id,
            first_name=person.first_name,
            last_name=person.last_name,
            nickname=person.nickname,
            date_of_birth=person.date_of_birth,
            similarity_score=round(candidate.similarity_score, 4),
            last_encounter_date=candidate.last_encounter_date,
        )


class DuplicateCheckResponse(BaseModel):
    """Response model for the duplicate check endpoint."""

    has_potential_duplicates: bool
    similar_persons: list[SimilarPerson]


class SearchTab(str, Enum):
    """Client list tabs."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXITED = "exited"
    ALL = "all"


class SearchResponse(BaseModel):
    """Response model for client search."""

    total: int
    results: list[PersonSummary]


class ResolveNameRequest(BaseModel):
    """A free-text name, as written in a legacy log."""

    name: str = Field(min_length=1)


class ResolveNameResponse(BaseModel):
    """The person a legacy log name resolves to."""

    person: PersonSummary
    match_type: MatchType


class DuplicateGroupSchema(BaseModel):
    """A set of records that look like the same person."""

    persons: list[PersonSummary]
    similarity_score: float

    @classmethod
    def from_group(cls, group: DuplicateGroup) -> "DuplicateGroupSchema":
        return cls(
            persons=[PersonSummary.from_record(p) for p in group.persons],
            similarity_score=round(group.similarity_score, 4),
        )


class DuplicateScanResponse(BaseModel):
    """Response model for the admin duplicate scan."""

    groups: list[DuplicateGroupSchema]


class MergeRequest(BaseModel):
    """Merge a duplicate record into the record in the path."""

    duplicate_person_id: str


class MergeResponse(BaseModel):
    """Outcome of a merge."""

    kept_person_id: str
    deleted_person_id: str
    encounters_moved: int
