"""Schemas for service encounter endpoints."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Encounters are logged by calendar day; store them at local noon so the
# day survives timezone conversion in reports
SERVICE_TIME_SUFFIX = "T12:00:00-08:00"


class EncounterRequest(BaseModel):
    """A service interaction logged by a field worker."""

    model_config = ConfigDict(str_strip_whitespace=True)

    # Service details
    service_date: date
    outreach_location: str = Field(min_length=1)
    outreach_worker: str = Field(min_length=1)
    referral_source: str | None = None

    # GPS coordinates, captured by the device
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    # Language and cultural
    language_preference: str | None = None
    cultural_notes: str | None = None

    # Co-occurring (mental health)
    co_occurring_mh_sud: bool = False
    co_occurring_type: str | None = None

    # Other services
    transportation_provided: bool = False
    shower_trailer: bool = False
    support_services: list[str] = Field(default_factory=list)
    other_services: str | None = None

    # Placement
    placement_made: bool = False
    placement_location: str | None = None
    placement_location_other: str | None = None
    placement_detox_name: str | None = None
    refused_shelter: bool = False
    refused_services: bool = False
    shelter_unavailable: bool = False

    # Case management
    high_utilizer_contact: bool = False
    case_management_notes: str | None = None
    service_subtype: str | None = None

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json")
        row["service_date"] = f"{self.service_date.isoformat()}{SERVICE_TIME_SUFFIX}"
        return row


class EncounterListResponse(BaseModel):
    """Encounters for one person, oldest first."""

    total: int
    encounters: list[dict[str, Any]]
