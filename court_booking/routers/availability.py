"""
Availability endpoints (authenticated, read-only).
"""

from fastapi import APIRouter, Request

from court_booking.dependencies import CurrentCustomer, Store
from court_booking.models import AvailabilityResult, RecurringAvailability
from court_booking.rate_limit import DEFAULT, limiter
from court_booking.schemas import AvailabilityBody, RecurringAvailabilityBody
from court_booking.services.availability import (
    check_availability,
    check_recurring_availability,
)

router = APIRouter(prefix="/api/availability", tags=["availability"])


@router.post(
    "",
    response_model=list[AvailabilityResult],
    operation_id="areTimesAvailable",
    summary="Check a batch of time proposals against existing reservations",
)
@limiter.limit(DEFAULT)
async def are_times_available(
    request: Request,
    body: AvailabilityBody,
    store: Store,
    current_customer: CurrentCustomer,
) -> list[AvailabilityResult]:
    async with store.unit_of_work() as repo:
        return await check_availability(repo, body.time_proposals)


@router.post(
    "/recurring",
    response_model=RecurringAvailability,
    operation_id="isRecurringTimeAvailable",
    summary="Split the occurrences of a recurring series into free and taken",
)
@limiter.limit(DEFAULT)
async def is_recurring_time_available(
    request: Request,
    body: RecurringAvailabilityBody,
    store: Store,
    current_customer: CurrentCustomer,
) -> RecurringAvailability:
    async with store.unit_of_work() as repo:
        return await check_recurring_availability(repo, body)
