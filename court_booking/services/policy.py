"""
Who may see and change which reservation.

Customers only ever reach their own active reservations, and may only
change those that have not started yet.  Admins are exempt from all three
restrictions.
"""

from __future__ import annotations

from datetime import datetime, timezone

from court_booking.models import Customer, Reservation


def can_access(customer: Customer, reservation: Reservation) -> bool:
    if customer.is_admin:
        return True
    return reservation.customer_id == customer.id and reservation.is_active


def can_modify(
    customer: Customer,
    reservation: Reservation,
    now: datetime | None = None,
) -> bool:
    if customer.is_admin:
        return True
    if now is None:
        now = datetime.now(timezone.utc)
    return (
        reservation.customer_id == customer.id
        and reservation.is_active
        and reservation.start_time > now
    )
