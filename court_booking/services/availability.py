"""
Availability engine.

Decides whether proposed intervals conflict with persisted reservations.
Intervals are half-open, so a booking that ends exactly when another starts
never conflicts.  Two bookings conflict only when they also share a court.

Every proposal in one call is checked against the same consistent read of
the store, and only against the store: proposals are never compared with
each other.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from court_booking.exceptions import InvalidProposal
from court_booking.models import (
    AvailabilityResult,
    RecurringAvailability,
    RecurringSeriesSpec,
    TimeProposal,
)
from court_booking.services.recurrence import expand_series
from court_booking.services.store import ReservationRepository

logger = logging.getLogger(__name__)


def ensure_valid_proposal(proposal: TimeProposal) -> None:
    """Reject proposals that request validation should already have refused."""
    if proposal.start_time >= proposal.end_time:
        raise InvalidProposal(
            f"start_time {proposal.start_time.isoformat()} is not before "
            f"end_time {proposal.end_time.isoformat()}"
        )
    if not proposal.locations.any():
        raise InvalidProposal("at least one location must be requested")


async def check_availability(
    repo: ReservationRepository,
    proposals: Sequence[TimeProposal],
) -> list[AvailabilityResult]:
    """
    Return one result per proposal, in input order.  A proposal is
    available when no active, non-excluded reservation overlaps it on a
    shared court.
    """
    if not proposals:
        return []

    for proposal in proposals:
        ensure_valid_proposal(proposal)

    counts = await repo.count_active_overlapping(proposals)
    logger.debug("Checked %d time proposals", len(proposals))

    return [
        AvailabilityResult(
            start_time=proposal.start_time,
            end_time=proposal.end_time,
            locations=proposal.locations,
            is_available=count == 0,
        )
        for proposal, count in zip(proposals, counts, strict=True)
    ]


def build_series_proposals(
    spec: RecurringSeriesSpec,
    now: datetime | None = None,
) -> list[TimeProposal]:
    """One proposal per candidate start time, each as long as the reference."""
    duration = spec.end_time - spec.start_time
    candidates = expand_series(
        spec.start_time,
        spec.recurrence,
        spec.time_period,
        included_dates=spec.included_dates,
        excluded_dates=spec.excluded_dates,
        now=now,
    )
    return [
        TimeProposal(
            start_time=start_time,
            end_time=start_time + duration,
            locations=spec.locations,
        )
        for start_time in candidates
    ]


async def check_recurring_availability(
    repo: ReservationRepository,
    spec: RecurringSeriesSpec,
    now: datetime | None = None,
) -> RecurringAvailability:
    """
    Expand the series and split its start times into available and
    unavailable ones, each list in generation order.
    """
    proposals = build_series_proposals(spec, now=now)
    results = await check_availability(repo, proposals)

    availability = RecurringAvailability()
    for result in results:
        if result.is_available:
            availability.available_times.append(result.start_time)
        else:
            availability.unavailable_times.append(result.start_time)

    logger.debug(
        "Recurring check: %d available, %d unavailable",
        len(availability.available_times),
        len(availability.unavailable_times),
    )
    return availability
