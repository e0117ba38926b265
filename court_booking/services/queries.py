"""
Read-side reservation queries gated by the authorization policy.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from court_booking.exceptions import ReservationNotAuthorized, ReservationNotFound
from court_booking.models import Customer, Reservation
from court_booking.services.policy import can_access
from court_booking.services.store import ReservationStore

logger = logging.getLogger(__name__)


async def get_reservation(
    store: ReservationStore,
    reservation_id: str,
    customer: Customer,
) -> Reservation:
    async with store.unit_of_work() as repo:
        found = await repo.find_many_by_id([reservation_id])

    if not found:
        raise ReservationNotFound()
    reservation = found[0]
    if not can_access(customer, reservation):
        logger.info(
            "Customer %s may not access reservation %s", customer.id, reservation_id
        )
        raise ReservationNotAuthorized()
    return reservation


async def list_reservations(
    store: ReservationStore,
    start_date: datetime,
    end_date: datetime,
    customer: Customer,
    now: datetime | None = None,
) -> list[Reservation]:
    """
    Calendar view of reservations starting between the two dates.

    Admins see everything starting in ``[start_date, end_date]``, cancelled
    bookings included.  Customers see active bookings starting in
    ``[start_date, end_date)``: their own past ones, plus everyone's
    bookings that have not finished yet so they can tell which courts are
    taken.
    """
    if customer.is_admin:
        async with store.unit_of_work() as repo:
            return await repo.find_in_range(start_date, end_date, include_end=True)

    if now is None:
        now = datetime.now(timezone.utc)
    async with store.unit_of_work() as repo:
        reservations = await repo.find_in_range(start_date, end_date, active_only=True)

    return [
        r for r in reservations
        if r.end_time >= now or r.customer_id == customer.id
    ]


async def list_recurring_reservations(
    store: ReservationStore,
    recurring_id: str,
    customer: Customer,
    future_only: bool = False,
    now: datetime | None = None,
) -> list[Reservation]:
    """Active members of a series; every one of them must be accessible."""
    starting_from = None
    if future_only:
        starting_from = now or datetime.now(timezone.utc)

    async with store.unit_of_work() as repo:
        reservations = await repo.find_by_recurring_id(
            recurring_id, active_only=True, starting_from=starting_from
        )

    if not all(can_access(customer, r) for r in reservations):
        logger.info(
            "Customer %s may not access recurring series %s", customer.id, recurring_id
        )
        raise ReservationNotAuthorized()
    return reservations
