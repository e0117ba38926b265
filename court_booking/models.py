"""Pydantic models for the Court Booking scheduling core."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CustomerRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


class Recurrence(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class TimePeriod(str, Enum):
    """How far ahead a recurring series is expanded."""
    CURRENT_YEAR = "CURRENT_YEAR"
    HALF_YEAR = "HALF_YEAR"


class Customer(BaseModel):
    """Authenticated customer, as resolved from the access token."""
    id: str = Field(..., description="Customer identifier")
    role: CustomerRole = Field(default=CustomerRole.CUSTOMER, description="Customer role")

    @property
    def is_admin(self) -> bool:
        return self.role == CustomerRole.ADMIN


class Locations(BaseModel):
    """Set of courts a reservation occupies."""
    badminton: bool = Field(default=False, description="Occupies the badminton court")
    table_tennis: bool = Field(default=False, description="Occupies the table tennis court")

    def any(self) -> bool:
        return self.badminton or self.table_tennis

    def intersects(self, other: Locations) -> bool:
        """True when both sets flag at least one common court."""
        return (self.badminton and other.badminton) or (
            self.table_tennis and other.table_tennis
        )


class Reservation(BaseModel):
    """A persisted booking of one or more courts for a half-open interval."""
    id: str = Field(..., description="Unique reservation identifier")
    recurring_id: str | None = Field(None, description="Shared by every member of a recurring series")
    name: str = Field(..., description="Short label")
    is_active: bool = Field(default=True, description="False once cancelled")
    customer_id: str = Field(..., description="Owning customer")
    start_time: datetime = Field(..., description="Inclusive start")
    end_time: datetime = Field(..., description="Exclusive end")
    locations: Locations = Field(..., description="Occupied courts")
    created_at: datetime | None = Field(None, description="Set by the store")
    updated_at: datetime | None = Field(None, description="Set by the store")

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


# ── Availability ──────────────────────────────────────────────────────────


class TimeProposal(BaseModel):
    """Candidate interval checked for conflicts; never persisted."""
    start_time: datetime = Field(..., description="Proposed start")
    end_time: datetime = Field(..., description="Proposed end")
    locations: Locations = Field(..., description="Requested courts")
    excluded_reservation_id: str | None = Field(
        None, description="Reservation ignored while checking (its own record during an update)"
    )


class AvailabilityResult(BaseModel):
    start_time: datetime
    end_time: datetime
    locations: Locations
    is_available: bool


class RecurringAvailability(BaseModel):
    available_times: list[datetime] = Field(default_factory=list)
    unavailable_times: list[datetime] = Field(default_factory=list)


class RecurringSeriesSpec(BaseModel):
    """Reference interval plus the rule used to repeat it."""
    start_time: datetime = Field(..., description="Start of the reference occurrence")
    end_time: datetime = Field(..., description="End of the reference occurrence")
    locations: Locations = Field(..., description="Requested courts")
    recurrence: Recurrence = Field(default=Recurrence.WEEKLY)
    time_period: TimePeriod = Field(default=TimePeriod.HALF_YEAR)
    included_dates: list[datetime] = Field(
        default_factory=list, description="Extra start times appended verbatim"
    )
    excluded_dates: list[datetime] = Field(
        default_factory=list, description="Start times removed by exact match"
    )


# ── Creation ──────────────────────────────────────────────────────────────


class CreateReservationRequest(BaseModel):
    name: str
    start_time: datetime
    end_time: datetime
    locations: Locations

    def to_proposal(self) -> TimeProposal:
        return TimeProposal(
            start_time=self.start_time,
            end_time=self.end_time,
            locations=self.locations,
        )


class CreateRecurringReservationRequest(RecurringSeriesSpec):
    name: str


class CreatedRecurringSeries(BaseModel):
    recurring_id: str = Field(..., description="Identifier shared by the whole series")
    count: int = Field(..., description="Number of reservations created")


# ── Update ────────────────────────────────────────────────────────────────


class UpdatedProperties(BaseModel):
    """Partial update; only explicitly supplied fields are applied."""
    name: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool | None = None
    locations: Locations | None = None

    def supplied(self) -> dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }


class UpdateReservationRequest(BaseModel):
    id: str
    updated_properties: UpdatedProperties
    connected_updates: list[str] = Field(default_factory=list)
