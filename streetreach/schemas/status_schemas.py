"""Schemas for program exit and return-to-active endpoints."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# HUD exit destination categories
EXIT_DESTINATIONS: dict[str, list[str]] = {
    "Permanent Housing": [
        "Owned by client, no ongoing subsidy",
        "Owned by client, with ongoing subsidy (mortgage, VA, etc.)",
        "Rental by client, no ongoing subsidy",
        "Rental by client, with VASH subsidy",
        "Rental by client, with other ongoing housing subsidy (HCV, public housing, CoC-RRH, etc.)",
        "Permanent housing for formerly homeless persons (CoC, ESG, or other funding)",
        "Staying or living with family, permanent tenure",
        "Staying or living with friends, permanent tenure",
    ],
    "Temporary Housing": [
        "Transitional housing for homeless persons (including youth)",
        "Staying or living with family, temporary tenure",
        "Staying or living with friends, temporary tenure",
        "Hotel or motel paid for without emergency shelter voucher",
        "Foster care home or foster care group home",
        "Residential project or halfway house with no homeless criteria (e.g., sober living)",
    ],
    "Institutional Settings": [
        "Psychiatric hospital or other psychiatric facility",
        "Substance abuse treatment facility or detox center",
        "Hospital or other residential non-psychiatric medical facility",
        "Jail, prison, or juvenile detention facility",
        "Long-term care facility or nursing home",
    ],
    "Homeless Situations": [
        "Emergency shelter (including hotel/motel paid for with voucher)",
        "Place not meant for habitation (vehicle, park, street, abandoned building, etc.)",
        "Safe Haven",
    ],
    "Other": [
        "Deceased",
        "Moved from one HOPWA funded project to another HOPWA project",
        "Client doesn't know",
        "Client refused",
        "Data not collected",
        "No exit interview completed",
    ],
    "System": [
        "Auto-inactivated - No contact for 90 days",
    ],
}

ALL_EXIT_DESTINATIONS = frozenset(
    destination
    for destinations in EXIT_DESTINATIONS.values()
    for destination in destinations
)


class ExitRequest(BaseModel):
    """Exit a client from the program."""

    model_config = ConfigDict(str_strip_whitespace=True)

    exit_date: date
    exit_destination: str = Field(min_length=1)
    exit_notes: str | None = None

    @field_validator("exit_destination")
    @classmethod
    def known_destination(cls, v: str) -> str:
        if v not in ALL_EXIT_DESTINATIONS:
            raise ValueError(f"Unknown exit destination: {v}")
        return v


class ReturnToActiveRequest(BaseModel):
    """Bring an exited client back into the program."""

    model_config = ConfigDict(str_strip_whitespace=True)

    return_date: date
    notes: str | None = None


class StatusChangeResponse(BaseModel):
    """The status change row as stored."""

    status_change: dict[str, Any]
