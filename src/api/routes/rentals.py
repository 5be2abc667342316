"""
Rental endpoints
================

POST  /api/v1/rentals                        -- request a booking (201)
GET   /api/v1/rentals                        -- admin list, by status priority
GET   /api/v1/rentals/customer/{customer_id} -- one customer's bookings
GET   /api/v1/rentals/{rental_id}            -- one booking
PUT   /api/v1/rentals/{rental_id}/approve    -- AWAITING_APPROVAL -> PENDING
PUT   /api/v1/rentals/{rental_id}/reject     -- AWAITING_APPROVAL -> CANCELLED
PATCH /api/v1/rentals/{rental_id}            -- administrative override
GET   /api/v1/rentals/{rental_id}/payments   -- payments recorded so far
POST  /api/v1/payments                       -- record a payment (201)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_clock, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    BookingResponse,
    ErrorResponse,
    MaintenanceResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PaymentResultResponse,
    RentalCreateRequest,
    RentalResponse,
    RentalUpdateRequest,
)
from src.config import settings
from src.domain.dates import Clock
from src.services.rentals import RentalService

router = APIRouter(tags=["rentals"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post(
    "/rentals",
    status_code=201,
    response_model=BookingResponse,
    summary="Request a booking",
    description=(
        "The booking is queued as 'Awaiting Approval'.  Scheduled maintenance "
        "inside the requested dates is returned under ``conflicts`` and "
        "overlapping approved bookings under ``rental_conflicts``, with a "
        "warning; the admin sees the same conflicts again on approval."
    ),
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def create_rental(
    request: Request,
    body: RentalCreateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    result = await RentalService(db, clock).create(
        vehicle_id=body.vehicle_id,
        customer_id=body.customer_id,
        rental_date=body.rental_date,
        return_date=body.return_date,
        total_fee=body.total_fee,
    )
    warnings = []
    if result.conflicts:
        warnings.append("Vehicle has scheduled maintenance within the requested dates")
    if result.rental_conflicts:
        warnings.append("Vehicle is already booked within the requested dates")
    return BookingResponse(
        rental=RentalResponse.model_validate(result.rental),
        conflicts=[MaintenanceResponse.model_validate(c) for c in result.conflicts],
        rental_conflicts=[RentalResponse.model_validate(r) for r in result.rental_conflicts],
        warning="; ".join(warnings) or None,
    )


@router.get("/rentals", response_model=list[RentalResponse], summary="List all bookings")
@limiter.limit(settings.rate_limit)
async def list_rentals(request: Request, db: AsyncSession = Depends(get_db)):
    return await RentalService(db).list_all()


@router.get(
    "/rentals/customer/{customer_id}",
    response_model=list[RentalResponse],
    summary="List a customer's bookings",
)
@limiter.limit(settings.rate_limit)
async def list_customer_rentals(
    request: Request, customer_id: int, db: AsyncSession = Depends(get_db)
):
    return await RentalService(db).list_for_customer(customer_id)


@router.get(
    "/rentals/{rental_id}",
    response_model=RentalResponse,
    summary="Get a booking",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def get_rental(request: Request, rental_id: int, db: AsyncSession = Depends(get_db)):
    return await RentalService(db).get(rental_id)


@router.put(
    "/rentals/{rental_id}/approve",
    response_model=RentalResponse,
    summary="Approve a booking",
    description="Refused with 409 if maintenance now falls inside the rental dates.",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def approve_rental(
    request: Request,
    rental_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await RentalService(db, clock).approve(rental_id)


@router.put(
    "/rentals/{rental_id}/reject",
    response_model=RentalResponse,
    summary="Reject a booking",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def reject_rental(
    request: Request, rental_id: int, db: AsyncSession = Depends(get_db)
):
    return await RentalService(db).reject(rental_id)


@router.patch(
    "/rentals/{rental_id}",
    response_model=RentalResponse,
    summary="Override booking dates or status",
    description=(
        "New dates are checked against scheduled maintenance.  A status is "
        "applied as given, without consulting the booking lifecycle."
    ),
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def update_rental(
    request: Request,
    rental_id: int,
    body: RentalUpdateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await RentalService(db, clock).update(
        rental_id,
        rental_date=body.rental_date,
        return_date=body.return_date,
        status=body.status,
    )


@router.get(
    "/rentals/{rental_id}/payments",
    response_model=list[PaymentResponse],
    summary="List payments for a booking",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def list_payments(
    request: Request, rental_id: int, db: AsyncSession = Depends(get_db)
):
    return await RentalService(db).payments_for(rental_id)


@router.post(
    "/payments",
    status_code=201,
    response_model=PaymentResultResponse,
    summary="Record a payment",
    description="A 'Completed' payment moves the booking to 'Ongoing'.",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def record_payment(
    request: Request,
    body: PaymentCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await RentalService(db).record_payment(
        rental_id=body.rental_id,
        amount=body.amount,
        payment_status=body.payment_status,
    )
    return PaymentResultResponse(
        payment=PaymentResponse.model_validate(result.payment),
        rental=RentalResponse.model_validate(result.rental),
    )
