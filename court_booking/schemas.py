"""
Request bodies accepted by the HTTP API.

These subclass the core request models and add the field-level rules
(name length, booking length, dates not in the past, at least one court).
Once a body has been parsed the scheduling core can rely on it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import AwareDatetime, BaseModel, Field, field_validator, model_validator

from court_booking.config import (
    MAX_RESERVATION_HOURS,
    MIN_RESERVATION_MINUTES,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
)
from court_booking.models import (
    CreateRecurringReservationRequest,
    CreateReservationRequest,
    Locations,
    RecurringSeriesSpec,
    TimeProposal,
    UpdatedProperties,
)

_MIN_DURATION = timedelta(minutes=MIN_RESERVATION_MINUTES)
_MAX_DURATION = timedelta(hours=MAX_RESERVATION_HOURS)


def _not_in_past(value: datetime) -> datetime:
    # Date-only comparison: anything later today is still bookable.
    today = datetime.now(timezone.utc).date()
    if value.astimezone(timezone.utc).date() < today:
        raise ValueError("date must be in the future")
    return value


def _check_interval(start_time: datetime, end_time: datetime) -> None:
    if start_time >= end_time:
        raise ValueError("start_time must be before end_time")
    duration = end_time - start_time
    if not _MIN_DURATION <= duration <= _MAX_DURATION:
        raise ValueError(
            f"reservation must last between {MIN_RESERVATION_MINUTES} minutes "
            f"and {MAX_RESERVATION_HOURS} hours"
        )


def _check_locations(locations: Locations) -> Locations:
    if not locations.any():
        raise ValueError("at least one location must be selected")
    return locations


class _IntervalRules(BaseModel):
    """Shared validation for bodies carrying a start/end/locations triple."""

    @field_validator("start_time", "end_time", check_fields=False)
    @classmethod
    def dates_not_in_past(cls, value: datetime) -> datetime:
        return _not_in_past(value)

    @field_validator("locations", check_fields=False)
    @classmethod
    def some_location(cls, value: Locations) -> Locations:
        return _check_locations(value)

    @model_validator(mode="after")
    def valid_interval(self):
        _check_interval(self.start_time, self.end_time)
        return self


class TimeProposalBody(_IntervalRules, TimeProposal):
    start_time: AwareDatetime
    end_time: AwareDatetime


class AvailabilityBody(BaseModel):
    time_proposals: list[TimeProposalBody] = Field(..., min_length=1)


class RecurringAvailabilityBody(_IntervalRules, RecurringSeriesSpec):
    start_time: AwareDatetime
    end_time: AwareDatetime
    included_dates: list[AwareDatetime] = Field(default_factory=list)
    excluded_dates: list[AwareDatetime] = Field(default_factory=list)

    @field_validator("included_dates")
    @classmethod
    def included_not_in_past(cls, value: list[datetime]) -> list[datetime]:
        return [_not_in_past(v) for v in value]


class CreateReservationBody(_IntervalRules, CreateReservationRequest):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    start_time: AwareDatetime
    end_time: AwareDatetime


class CreateRecurringReservationBody(
    RecurringAvailabilityBody, CreateRecurringReservationRequest
):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)


class UpdatedPropertiesBody(UpdatedProperties):
    name: str | None = Field(None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    start_time: AwareDatetime | None = None
    end_time: AwareDatetime | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def dates_not_in_past(cls, value: datetime | None) -> datetime | None:
        return None if value is None else _not_in_past(value)

    @field_validator("locations")
    @classmethod
    def some_location(cls, value: Locations | None) -> Locations | None:
        return None if value is None else _check_locations(value)

    @model_validator(mode="after")
    def valid_interval(self):
        # A lone start or end is checked by the core against the stored value.
        if self.start_time is not None and self.end_time is not None:
            _check_interval(self.start_time, self.end_time)
        return self


class UpdateReservationBody(BaseModel):
    updated_properties: UpdatedPropertiesBody
    connected_updates: list[str] = Field(default_factory=list)
