"""
Reservation creation: single bookings and whole recurring series.

A series is all-or-nothing: if any of its occurrences collides with an
existing booking, nothing is written.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import uuid4

from court_booking.exceptions import TimeNotAvailable
from court_booking.models import (
    CreatedRecurringSeries,
    CreateRecurringReservationRequest,
    CreateReservationRequest,
    Customer,
    Reservation,
)
from court_booking.services.availability import (
    check_availability,
    check_recurring_availability,
)
from court_booking.services.store import ReservationStore

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


async def create_single(
    store: ReservationStore,
    request: CreateReservationRequest,
    customer: Customer,
) -> Reservation:
    """Book one interval for ``customer`` or raise TimeNotAvailable."""
    async with store.unit_of_work(write=True) as repo:
        [availability] = await check_availability(repo, [request.to_proposal()])
        if not availability.is_available:
            logger.info(
                "Rejected reservation for customer %s at %s: time not available",
                customer.id,
                request.start_time.isoformat(),
            )
            raise TimeNotAvailable()

        reservation = await repo.create_one(
            Reservation(
                id=_new_id(),
                name=request.name,
                customer_id=customer.id,
                start_time=request.start_time,
                end_time=request.end_time,
                locations=request.locations,
            )
        )

    logger.info("Created reservation %s for customer %s", reservation.id, customer.id)
    return reservation


async def create_recurring(
    store: ReservationStore,
    request: CreateRecurringReservationRequest,
    customer: Customer,
    now: datetime | None = None,
) -> CreatedRecurringSeries:
    """
    Book every occurrence of a recurring series under one fresh
    ``recurring_id``, or raise TimeNotAvailable without writing anything.
    """
    duration = request.end_time - request.start_time

    async with store.unit_of_work(write=True) as repo:
        availability = await check_recurring_availability(repo, request, now=now)
        if availability.unavailable_times:
            logger.info(
                "Rejected recurring series for customer %s: %d of %d occurrences taken",
                customer.id,
                len(availability.unavailable_times),
                len(availability.unavailable_times) + len(availability.available_times),
            )
            raise TimeNotAvailable()

        recurring_id = _new_id()
        reservations = [
            Reservation(
                id=_new_id(),
                recurring_id=recurring_id,
                name=request.name,
                customer_id=customer.id,
                start_time=start_time,
                end_time=start_time + duration,
                locations=request.locations,
            )
            for start_time in availability.available_times
        ]
        count = await repo.create_many(reservations)

    logger.info(
        "Created recurring series %s (%d reservations) for customer %s",
        recurring_id,
        count,
        customer.id,
    )
    return CreatedRecurringSeries(recurring_id=recurring_id, count=count)
