"""Pydantic request / response schemas for the REST API.

Request fields the lifecycle services validate themselves are optional
here, so a missing field surfaces as the service's 400 rather than a 422.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field

from src.domain.enums import (
    MaintenanceStatus,
    PaymentStatus,
    RentalStatus,
    Transmission,
    VehicleType,
)


# ── Requests ──────────────────────────────────────────────────────────


class RentalCreateRequest(BaseModel):
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    rental_date: Optional[date] = None
    return_date: Optional[date] = None
    total_fee: Optional[Decimal] = Field(None, ge=0)


class RentalUpdateRequest(BaseModel):
    rental_date: Optional[date] = None
    return_date: Optional[date] = None
    status: Optional[RentalStatus] = Field(
        None,
        description="Applied as-is: administrative override of the lifecycle.",
    )


class PaymentCreateRequest(BaseModel):
    rental_id: Optional[int] = None
    amount: Optional[Decimal] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING


class VehicleCreateRequest(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    vehicle_type: Optional[VehicleType] = Field(
        None, validation_alias=AliasChoices("vehicle_type", "type")
    )
    color: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900)
    transmission: Optional[Transmission] = None
    price_per_day: Optional[Decimal] = Field(None, ge=0)
    vehicle_no_plate: Optional[str] = Field(None, max_length=20)
    image_path: Optional[str] = Field(None, max_length=255)


class VehicleUpdateRequest(BaseModel):
    color: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900)
    price_per_day: Optional[Decimal] = Field(None, ge=0)
    vehicle_no_plate: Optional[str] = Field(None, max_length=20)
    image_path: Optional[str] = Field(None, max_length=255)


class MaintenanceCreateRequest(BaseModel):
    maintenance_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("maintenance_date", "scheduled_date")
    )
    description: Optional[str] = None
    cost: Optional[Decimal] = Field(None, ge=0)


# ── Responses ─────────────────────────────────────────────────────────


class RentalResponse(BaseModel):
    id: int
    vehicle_id: int
    customer_id: int
    rental_date: date
    return_date: date
    total_fee: Optional[float] = None
    status: RentalStatus

    model_config = {"from_attributes": True}


class MaintenanceResponse(BaseModel):
    id: int
    vehicle_id: int
    maintenance_date: date
    description: str
    cost: float
    status: MaintenanceStatus

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    rental: RentalResponse
    conflicts: list[MaintenanceResponse] = []
    rental_conflicts: list[RentalResponse] = []
    warning: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    rental_id: int
    amount: float
    payment_status: PaymentStatus
    payment_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentResultResponse(BaseModel):
    payment: PaymentResponse
    rental: RentalResponse


class VehicleResponse(BaseModel):
    id: int
    brand: str
    model: str
    vehicle_type: VehicleType
    color: Optional[str] = None
    year: Optional[int] = None
    transmission: Transmission
    price_per_day: float
    vehicle_no_plate: Optional[str] = None
    image_path: Optional[str] = None
    availability: bool
    scheduled_maintenance: list[date] = []

    model_config = {"from_attributes": True}


class VehicleMaintenanceResponse(VehicleResponse):
    maintenance: list[MaintenanceResponse] = []


class BookingCheckResponse(BaseModel):
    vehicle_id: int
    day: date
    has_booking: bool


class SweepResponse(BaseModel):
    day: date
    rentals_completed: list[int]
    maintenance_updated: list[int]
    failures: int

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    conflicts: list[dict[str, Any]] = []
