"""
Typed failures raised by the scheduling core.

Each ReservationError carries a stable machine-readable ``code`` and a
user-facing ``message``; the HTTP layer maps them to status codes.
"""

from __future__ import annotations


class ReservationError(Exception):
    """Base class for expected, user-actionable booking failures."""

    code: str = "RESERVATION_ERROR"
    message: str = "The reservation could not be processed."
    status_code: int = 400

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class TimeNotAvailable(ReservationError):
    code = "TIME_NOT_AVAILABLE"
    message = "The selected time is not available!"
    status_code = 409


class ReservationNotFound(ReservationError):
    code = "RESERVATION_NOT_FOUND"
    message = "The selected reservation does not exist!"
    status_code = 404


class ReservationNotAuthorized(ReservationError):
    code = "RESERVATION_NOT_AUTHORIZED"
    message = "You are not authorized to access the selected reservation!"
    status_code = 403


class InvalidProposal(ValueError):
    """
    A proposal reached the core with ``start_time >= end_time`` or no
    location flagged. Request validation rejects these first, so this only
    fires when a caller skipped it.
    """
