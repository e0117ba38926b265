"""
Persistence contract consumed by the scheduling core.

The services never talk to a database directly: every operation receives a
ReservationStore, opens one unit of work on it and drives the
ReservationRepository it yields.  Everything done through one repository is
committed together when the unit of work exits cleanly and rolled back when
it raises, so batch writes are all-or-nothing.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol, Sequence

from court_booking.models import Reservation, TimeProposal


class ReservationRepository(Protocol):
    """Reservation reads and writes bound to one open unit of work."""

    # ── Availability ──────────────────────────────────────────────────
    async def count_active_overlapping(
        self, proposals: Sequence[TimeProposal]
    ) -> list[int]:
        """
        For each proposal, count active reservations that overlap it in time,
        share at least one court with it and are not its excluded reservation.
        All counts come from the same consistent read.
        """
        ...

    # ── Writes ────────────────────────────────────────────────────────
    async def create_one(self, reservation: Reservation) -> Reservation:
        """Insert one reservation and return it with bookkeeping fields set."""
        ...

    async def create_many(self, reservations: Sequence[Reservation]) -> int:
        """Insert every reservation and return how many were written."""
        ...

    async def update_many(
        self, reservations: Sequence[Reservation]
    ) -> list[Reservation]:
        """Overwrite each reservation's mutable fields, matched by id, and
        return them in input order with ``updated_at`` refreshed."""
        ...

    # ── Reads ─────────────────────────────────────────────────────────
    async def find_many_by_id(self, ids: Sequence[str]) -> list[Reservation]:
        """Return the reservations among ``ids`` that exist, in any order."""
        ...

    async def find_in_range(
        self,
        start: datetime,
        end: datetime,
        *,
        include_end: bool = False,
        active_only: bool = False,
    ) -> list[Reservation]:
        """Return reservations whose start time falls inside ``[start, end)``
        (or ``[start, end]`` with ``include_end``), ordered by start time."""
        ...

    async def find_by_recurring_id(
        self,
        recurring_id: str,
        *,
        active_only: bool = True,
        starting_from: datetime | None = None,
    ) -> list[Reservation]:
        """Return members of a recurring series, ordered by start time."""
        ...


class ReservationStore(Protocol):
    """Factory for units of work."""

    def unit_of_work(
        self, write: bool = False
    ) -> AbstractAsyncContextManager[ReservationRepository]:
        """
        Open a transaction.  ``write=True`` must exclude every other writer
        for its whole duration so an availability check and the write that
        depends on it cannot be interleaved with another booking.
        """
        ...
