"""
Reservation updates with propagation to linked reservations.

One reference reservation is edited together with an explicit list of
connected reservations (typically other members of its recurring series):

1.  Load all of them in one read.
2.  Require ``can_modify`` on every one, not just the reference.
3.  Derive the start/end shift from the reference alone.
4.  Apply that shift to each reservation's own times, which keeps every
    linked reservation's duration and offset, and apply the supplied scalar
    fields identically to all of them.
5.  Re-check availability only when times, courts or activity changed.
6.  Save everything in one batch.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from court_booking.exceptions import (
    ReservationNotAuthorized,
    ReservationNotFound,
    TimeNotAvailable,
)
from court_booking.models import (
    Customer,
    Reservation,
    TimeProposal,
    UpdatedProperties,
    UpdateReservationRequest,
)
from court_booking.services.availability import check_availability
from court_booking.services.policy import can_modify
from court_booking.services.store import ReservationStore

logger = logging.getLogger(__name__)

# Changing any of these can create a conflict.
_REVALIDATED_FIELDS = frozenset({"start_time", "end_time", "locations", "is_active"})

# Applied verbatim to every reservation in the batch.
_SCALAR_FIELDS = ("name", "is_active", "locations")


def needs_revalidation(updated: UpdatedProperties) -> bool:
    return not _REVALIDATED_FIELDS.isdisjoint(updated.supplied())


def compute_deltas(
    reference: Reservation,
    updated: UpdatedProperties,
) -> tuple[timedelta, timedelta]:
    """Start and end shift requested for the reference reservation."""
    supplied = updated.supplied()
    start_delta = timedelta(0)
    end_delta = timedelta(0)
    if "start_time" in supplied:
        start_delta = supplied["start_time"] - reference.start_time
    if "end_time" in supplied:
        end_delta = supplied["end_time"] - reference.end_time
    return start_delta, end_delta


def apply_update(
    reservation: Reservation,
    updated: UpdatedProperties,
    start_delta: timedelta,
    end_delta: timedelta,
) -> Reservation:
    supplied = updated.supplied()
    changes = {
        field: supplied[field] for field in _SCALAR_FIELDS if field in supplied
    }
    changes["start_time"] = reservation.start_time + start_delta
    changes["end_time"] = reservation.end_time + end_delta
    return reservation.model_copy(update=changes, deep=True)


async def update_reservation(
    store: ReservationStore,
    request: UpdateReservationRequest,
    customer: Customer,
    now: datetime | None = None,
) -> Reservation:
    """Apply ``request`` to the reference and its connected reservations and
    return the updated reference."""
    ids = list(dict.fromkeys([request.id, *request.connected_updates]))
    updated = request.updated_properties

    async with store.unit_of_work(write=True) as repo:
        found = {r.id: r for r in await repo.find_many_by_id(ids)}
        missing = [i for i in ids if i not in found]
        if missing:
            logger.info("Update aborted: reservations %s not found", ", ".join(missing))
            raise ReservationNotFound()

        loaded = [found[i] for i in ids]
        for reservation in loaded:
            if not can_modify(customer, reservation, now=now):
                logger.info(
                    "Customer %s may not modify reservation %s",
                    customer.id,
                    reservation.id,
                )
                raise ReservationNotAuthorized()

        start_delta, end_delta = compute_deltas(loaded[0], updated)
        to_save = [
            apply_update(reservation, updated, start_delta, end_delta)
            for reservation in loaded
        ]

        if needs_revalidation(updated):
            proposals = [
                TimeProposal(
                    start_time=r.start_time,
                    end_time=r.end_time,
                    locations=r.locations,
                    excluded_reservation_id=r.id,
                )
                for r in to_save
            ]
            results = await check_availability(repo, proposals)
            if not all(result.is_available for result in results):
                logger.info(
                    "Update of reservation %s rejected: time not available",
                    request.id,
                )
                raise TimeNotAvailable()

        saved = await repo.update_many(to_save)

    logger.info(
        "Updated reservation %s with %d connected reservations",
        request.id,
        len(saved) - 1,
    )
    return saved[0]
