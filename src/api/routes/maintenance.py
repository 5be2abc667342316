"""
Maintenance endpoints
=====================

POST /api/v1/vehicles/{vehicle_id}/maintenance -- schedule maintenance (201)
GET  /api/v1/vehicles/{vehicle_id}/maintenance -- a vehicle's records
GET  /api/v1/maintenance                       -- every record
PUT  /api/v1/maintenance/{record_id}/cancel    -- cancel (403 if in progress)
GET  /api/v1/bookings/check-date               -- advisory booking check

Statuses are re-derived for today before any of these reads returns.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_clock, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    BookingCheckResponse,
    ErrorResponse,
    MaintenanceCreateRequest,
    MaintenanceResponse,
)
from src.config import settings
from src.domain.dates import Clock
from src.services.maintenance import MaintenanceService

router = APIRouter(tags=["maintenance"])


@router.post(
    "/vehicles/{vehicle_id}/maintenance",
    status_code=201,
    response_model=MaintenanceResponse,
    summary="Schedule maintenance",
    description=(
        "Refused with 409 if an active booking covers the date.  The status "
        "is set from the date: Scheduled (future), Ongoing (today) or "
        "Completed (past)."
    ),
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def schedule_maintenance(
    request: Request,
    vehicle_id: int,
    body: MaintenanceCreateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await MaintenanceService(db, clock).schedule(
        vehicle_id,
        maintenance_date=body.maintenance_date,
        description=body.description,
        cost=body.cost,
    )


@router.get(
    "/vehicles/{vehicle_id}/maintenance",
    response_model=list[MaintenanceResponse],
    summary="List a vehicle's maintenance",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def list_vehicle_maintenance(
    request: Request,
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await MaintenanceService(db, clock).list_for_vehicle(vehicle_id)


@router.get(
    "/maintenance",
    response_model=list[MaintenanceResponse],
    summary="List all maintenance records",
)
@limiter.limit(settings.rate_limit)
async def list_maintenance(
    request: Request,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await MaintenanceService(db, clock).list_all()


@router.put(
    "/maintenance/{record_id}/cancel",
    response_model=MaintenanceResponse,
    summary="Cancel maintenance",
    description="Only 'Cancelled' can be set by hand, and never while in progress.",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def cancel_maintenance(
    request: Request,
    record_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return await MaintenanceService(db, clock).cancel(record_id)


@router.get(
    "/bookings/check-date",
    response_model=BookingCheckResponse,
    summary="Does an active booking cover this date?",
    description="Advisory; scheduling re-checks authoritatively.",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def check_booking_date(
    request: Request,
    vehicle_id: int = Query(...),
    day: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
):
    has_booking = await MaintenanceService(db).date_has_booking(vehicle_id, day)
    return BookingCheckResponse(vehicle_id=vehicle_id, day=day, has_booking=has_booking)
