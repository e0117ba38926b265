import logging
from datetime import UTC, date, datetime, time, timedelta
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from court_booking.config import JWT_ALGORITHM, JWT_SECRET, MAX_LISTING_DAYS
from court_booking.models import Customer
from court_booking.services.store import ReservationStore

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


# ── Store ──────────────────────────────────────────────────────────────────


def get_store(request: Request) -> ReservationStore:
    return request.app.state.store


Store = Annotated[ReservationStore, Depends(get_store)]


# ── Date range ─────────────────────────────────────────────────────────────


class DateRangeParams:
    """Whole days from ``start_date`` through ``end_date``, inclusive."""

    def __init__(
        self,
        start_date: Annotated[date, Query(description="First day (YYYY-MM-DD)")],
        end_date: Annotated[date, Query(description="Last day (YYYY-MM-DD), inclusive")],
    ):
        days = (end_date - start_date).days + 1
        if not 1 <= days <= MAX_LISTING_DAYS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Date range must cover between 1 and {MAX_LISTING_DAYS} days",
            )
        self.start = datetime.combine(start_date, time.min, tzinfo=UTC)
        self.end = datetime.combine(end_date, time.min, tzinfo=UTC) + timedelta(days=1)


# ── JWT ────────────────────────────────────────────────────────────────────


def create_access_token(customer: Customer, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Mint a token the way the identity service does; used by tests and tooling."""
    now = datetime.now(UTC)
    payload = {
        "customerId": customer.id,
        "customerRole": customer.role.value,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


async def get_current_customer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)] = None,
) -> Customer:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
        )

    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please log in again.",
        ) from None
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session. Please log in again.",
        ) from None

    try:
        return Customer(id=payload["customerId"], role=payload["customerRole"])
    except (KeyError, ValidationError):
        logger.warning("Rejected token with malformed customer claims")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload.",
        ) from None


CurrentCustomer = Annotated[Customer, Depends(get_current_customer)]
