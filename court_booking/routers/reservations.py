"""
Reservation endpoints (authenticated).

Thin wrappers: each route parses and validates its body, then hands the
store and the current customer to the matching service.  Booking failures
propagate as ReservationError and are rendered by the app-level handler.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from court_booking.dependencies import CurrentCustomer, DateRangeParams, Store
from court_booking.models import CreatedRecurringSeries, Reservation, UpdateReservationRequest
from court_booking.rate_limit import DEFAULT, WRITE, limiter
from court_booking.schemas import (
    CreateRecurringReservationBody,
    CreateReservationBody,
    UpdateReservationBody,
)
from court_booking.services import creation, queries, update

router = APIRouter(prefix="/api/reservations", tags=["reservations"])


@router.get(
    "",
    response_model=list[Reservation],
    operation_id="listReservations",
    summary="List reservations starting within a date range",
)
@limiter.limit(DEFAULT)
async def list_reservations(
    request: Request,
    store: Store,
    current_customer: CurrentCustomer,
    date_range: DateRangeParams = Depends(DateRangeParams),
) -> list[Reservation]:
    return await queries.list_reservations(
        store, date_range.start, date_range.end, current_customer
    )


@router.get(
    "/recurring/{recurring_id}",
    response_model=list[Reservation],
    operation_id="listRecurringReservations",
    summary="List the active reservations of a recurring series",
)
@limiter.limit(DEFAULT)
async def list_recurring_reservations(
    request: Request,
    recurring_id: str,
    store: Store,
    current_customer: CurrentCustomer,
    future_only: bool = Query(False, description="Only reservations that have not started"),
) -> list[Reservation]:
    return await queries.list_recurring_reservations(
        store, recurring_id, current_customer, future_only=future_only
    )


@router.get(
    "/{reservation_id}",
    response_model=Reservation,
    operation_id="getReservation",
    summary="Get a specific reservation",
)
@limiter.limit(DEFAULT)
async def get_reservation(
    request: Request,
    reservation_id: str,
    store: Store,
    current_customer: CurrentCustomer,
) -> Reservation:
    return await queries.get_reservation(store, reservation_id, current_customer)


@router.post(
    "",
    response_model=Reservation,
    status_code=status.HTTP_201_CREATED,
    operation_id="createReservation",
    summary="Book a single time slot",
)
@limiter.limit(WRITE)
async def create_reservation(
    request: Request,
    body: CreateReservationBody,
    store: Store,
    current_customer: CurrentCustomer,
) -> Reservation:
    return await creation.create_single(store, body, current_customer)


@router.post(
    "/recurring",
    response_model=CreatedRecurringSeries,
    status_code=status.HTTP_201_CREATED,
    operation_id="createRecurringReservation",
    summary="Book every occurrence of a recurring series, or none",
)
@limiter.limit(WRITE)
async def create_recurring_reservation(
    request: Request,
    body: CreateRecurringReservationBody,
    store: Store,
    current_customer: CurrentCustomer,
) -> CreatedRecurringSeries:
    return await creation.create_recurring(store, body, current_customer)


@router.patch(
    "/{reservation_id}",
    response_model=Reservation,
    operation_id="updateReservation",
    summary="Update a reservation and shift its connected reservations with it",
)
@limiter.limit(WRITE)
async def update_reservation(
    request: Request,
    reservation_id: str,
    body: UpdateReservationBody,
    store: Store,
    current_customer: CurrentCustomer,
) -> Reservation:
    update_request = UpdateReservationRequest(
        id=reservation_id,
        updated_properties=body.updated_properties,
        connected_updates=body.connected_updates,
    )
    return await update.update_reservation(store, update_request, current_customer)
