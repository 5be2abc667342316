"""
Vehicle catalogue endpoints
===========================

GET  /api/v1/search                    -- catalogue search (customer view)
GET  /api/v1/models/{brand}            -- distinct models of a brand
POST /api/v1/vehicles                  -- list a new vehicle (201)
GET  /api/v1/vehicles                  -- same filters as /search
GET  /api/v1/vehicles/maintenance      -- vehicles with their maintenance
GET  /api/v1/vehicles/{vehicle_id}     -- vehicle with availability
PUT  /api/v1/vehicles/{vehicle_id}     -- edit descriptive attributes

``availability`` is computed on every read from rentals and maintenance.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_clock, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ErrorResponse,
    MaintenanceResponse,
    VehicleCreateRequest,
    VehicleMaintenanceResponse,
    VehicleResponse,
    VehicleUpdateRequest,
)
from src.config import settings
from src.domain.dates import Clock
from src.services.vehicles import VehicleService, VehicleView

router = APIRouter(tags=["vehicles"])


def catalogue_filters(
    brand: Optional[str] = None,
    model: Optional[str] = None,
    vehicle_type: Optional[str] = Query(None, alias="type"),
    color: Optional[str] = None,
    transmission: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
) -> dict:
    return {
        "brand": brand,
        "model": model,
        "vehicle_type": vehicle_type,
        "color": color,
        "transmission": transmission,
        "min_price": min_price,
        "max_price": max_price,
    }


def _vehicle_response(view: VehicleView) -> VehicleResponse:
    vehicle = view.vehicle
    return VehicleResponse(
        id=vehicle.id,
        brand=vehicle.brand,
        model=vehicle.model,
        vehicle_type=vehicle.vehicle_type,
        color=vehicle.color,
        year=vehicle.year,
        transmission=vehicle.transmission,
        price_per_day=vehicle.price_per_day,
        vehicle_no_plate=vehicle.vehicle_no_plate,
        image_path=vehicle.image_path,
        availability=view.available,
        scheduled_maintenance=view.scheduled_maintenance,
    )


@router.get(
    "/search",
    response_model=list[VehicleResponse],
    summary="Search the catalogue",
    description="Every filter is optional; ``availability`` matches the computed flag.",
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def search_vehicles(
    request: Request,
    availability: Optional[bool] = None,
    filters: dict = Depends(catalogue_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    views = await VehicleService(db, clock).search(available=availability, **filters)
    return [_vehicle_response(view) for view in views]


@router.get("/models/{brand}", response_model=list[str], summary="Models of a brand")
@limiter.limit(settings.rate_limit)
async def list_models(request: Request, brand: str, db: AsyncSession = Depends(get_db)):
    return await VehicleService(db).models_for_brand(brand)


@router.post(
    "/vehicles",
    status_code=201,
    response_model=VehicleResponse,
    summary="List a new vehicle",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def create_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    service = VehicleService(db, clock)
    vehicle = await service.create(**body.model_dump())
    return _vehicle_response(await service.get(vehicle.id))


@router.get(
    "/vehicles",
    response_model=list[VehicleResponse],
    summary="List vehicles",
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def list_vehicles(
    request: Request,
    availability: Optional[bool] = None,
    filters: dict = Depends(catalogue_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    views = await VehicleService(db, clock).search(available=availability, **filters)
    return [_vehicle_response(view) for view in views]


@router.get(
    "/vehicles/maintenance",
    response_model=list[VehicleMaintenanceResponse],
    summary="Vehicles with their maintenance records",
    description=(
        "Same filters as /search, plus ``maintenance_status`` to keep only "
        "vehicles with a record in that status (re-derived for today)."
    ),
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def vehicles_maintenance(
    request: Request,
    maintenance_status: Optional[str] = None,
    filters: dict = Depends(catalogue_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    views = await VehicleService(db, clock).maintenance_overview(
        maintenance_status=maintenance_status, **filters
    )
    return [
        VehicleMaintenanceResponse(
            **_vehicle_response(view).model_dump(),
            maintenance=[MaintenanceResponse.model_validate(r) for r in view.maintenance],
        )
        for view in views
    ]


@router.get(
    "/vehicles/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get a vehicle and its current availability",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_vehicle(
    request: Request,
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return _vehicle_response(await VehicleService(db, clock).get(vehicle_id))


@router.put(
    "/vehicles/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Edit a vehicle",
    description="Colour, price, plate, year and image only.",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def update_vehicle(
    request: Request,
    vehicle_id: int,
    body: VehicleUpdateRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    service = VehicleService(db, clock)
    await service.update(vehicle_id, **body.model_dump())
    return _vehicle_response(await service.get(vehicle_id))
