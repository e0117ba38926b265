"""Main FastAPI application for Court Booking."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from court_booking.config import DB_PATH, LOG_LEVEL
from court_booking.db import SqliteReservationStore
from court_booking.exceptions import InvalidProposal, ReservationError
from court_booking.rate_limit import limiter
from court_booking.routers import availability, health, reservations

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the reservation store for the lifetime of the app."""
    store = SqliteReservationStore(DB_PATH)
    await store.open()
    app.state.store = store
    logger.info("Court Booking started")

    yield

    await store.close()
    logger.info("Court Booking stopped")


app = FastAPI(
    title="Court Booking API",
    description="Reserve the badminton and table tennis courts, once or on a recurring schedule",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter


# ── Error handlers ────────────────────────────────────────────────────────


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(InvalidProposal)
async def invalid_proposal_handler(request: Request, exc: InvalidProposal) -> JSONResponse:
    logger.warning("Invalid proposal reached the scheduling core: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"code": "INVALID_PROPOSAL", "message": str(exc)},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


# ── Routers ───────────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(reservations.router)
app.include_router(availability.router)
