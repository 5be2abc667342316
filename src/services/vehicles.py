"""
Vehicle Catalogue
=================

Admin maintenance of the fleet plus the customer-facing search.

* **create / update** -- descriptive attributes only; availability is never
  written, it is projected from rentals and maintenance on every read.
* **search**          -- attribute and price filters in SQL, then the
  ``available`` filter on the computed projection.
* **maintenance_overview** -- the same filters, narrowed to vehicles with
  maintenance in a given status (after re-deriving statuses for today).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain import maintenance as lifecycle
from src.domain.availability import is_available, scheduled_dates
from src.domain.dates import Clock, make_clock, today
from src.domain.enums import MaintenanceStatus, RentalStatus, Transmission, VehicleType
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.infrastructure.models import MaintenanceRecordModel, VehicleModel
from src.infrastructure.repositories import (
    MaintenanceRepository,
    RentalRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)

# Attributes an admin may change after the vehicle is listed
_EDITABLE = ("color", "price_per_day", "image_path", "vehicle_no_plate", "year")


@dataclass
class VehicleView:
    vehicle: VehicleModel
    available: bool
    scheduled_maintenance: list[date] = field(default_factory=list)
    maintenance: list[MaintenanceRecordModel] = field(default_factory=list)


class VehicleService:
    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None):
        self.session = session
        self.clock = clock or make_clock(settings.timezone)
        self.vehicles = VehicleRepository(session)
        self.rentals = RentalRepository(session)
        self.records = MaintenanceRepository(session)

    # ── Commands ──────────────────────────────────────────────────────

    async def create(
        self,
        *,
        brand: Optional[str],
        model: Optional[str],
        vehicle_type=None,
        color: Optional[str] = None,
        year: Optional[int] = None,
        transmission=None,
        price_per_day=None,
        vehicle_no_plate: Optional[str] = None,
        image_path: Optional[str] = None,
    ) -> VehicleModel:
        if not brand or not brand.strip() or not model or not model.strip():
            raise ValidationError("brand and model are required")
        if vehicle_no_plate:
            await self._ensure_plate_free(vehicle_no_plate)

        vehicle = await self.vehicles.save(
            VehicleModel(
                brand=brand.strip(),
                model=model.strip(),
                vehicle_type=_choice(VehicleType, vehicle_type, VehicleType.SEDAN),
                color=color,
                year=year,
                transmission=_choice(Transmission, transmission, Transmission.AUTOMATIC),
                price_per_day=_price(price_per_day),
                vehicle_no_plate=vehicle_no_plate or None,
                image_path=image_path,
            )
        )
        logger.info("Vehicle %d listed (%s %s)", vehicle.id, vehicle.brand, vehicle.model)
        return vehicle

    async def update(self, vehicle_id: int, **changes) -> VehicleModel:
        changes = {name: value for name, value in changes.items() if value is not None}
        unknown = set(changes) - set(_EDITABLE)
        if unknown:
            raise ValidationError(f"Cannot change {', '.join(sorted(unknown))}")
        vehicle = await self._vehicle(vehicle_id)

        plate = changes.get("vehicle_no_plate")
        if plate and plate != vehicle.vehicle_no_plate:
            await self._ensure_plate_free(plate)
        if "price_per_day" in changes:
            changes["price_per_day"] = _price(changes["price_per_day"])

        for name, value in changes.items():
            setattr(vehicle, name, value)
        await self.vehicles.save(vehicle)
        logger.info("Vehicle %d updated: %s", vehicle.id, ", ".join(sorted(changes)))
        return vehicle

    # ── Queries ───────────────────────────────────────────────────────

    async def get(self, vehicle_id: int) -> VehicleView:
        views = await self._views([await self._vehicle(vehicle_id)])
        return views[0]

    async def search(
        self, *, available: Optional[bool] = None, **filters
    ) -> list[VehicleView]:
        views = await self._views(await self.vehicles.search(**_filters(**filters)))
        if available is None:
            return views
        return [view for view in views if view.available == available]

    async def models_for_brand(self, brand: str) -> list[str]:
        return await self.vehicles.models_for_brand(brand)

    async def maintenance_overview(
        self, *, maintenance_status=None, **filters
    ) -> list[VehicleView]:
        wanted = _choice(MaintenanceStatus, maintenance_status, None)
        views = await self._views(await self.vehicles.search(**_filters(**filters)))
        if wanted is None:
            return views
        return [
            view
            for view in views
            if any(MaintenanceStatus(r.status) == wanted for r in view.maintenance)
        ]

    # ── Internals ─────────────────────────────────────────────────────

    async def _vehicle(self, vehicle_id: int) -> VehicleModel:
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return vehicle

    async def _ensure_plate_free(self, plate: str) -> None:
        if await self.vehicles.get_by_plate(plate) is not None:
            raise ConflictError(f"A vehicle with plate {plate!r} already exists")

    async def _views(self, vehicles: list[VehicleModel]) -> list[VehicleView]:
        """Project availability for *vehicles* with two queries in total."""
        ids = [vehicle.id for vehicle in vehicles]
        ongoing = await self.rentals.find_by_vehicles(ids, [RentalStatus.ONGOING])
        records = await self.records.find_by_vehicles(ids)
        current = today(self.clock)
        for record in records:
            if lifecycle.derive_status(record, current):
                await self.records.save(record)

        views = []
        for vehicle in vehicles:
            own = [r for r in records if r.vehicle_id == vehicle.id]
            views.append(
                VehicleView(
                    vehicle=vehicle,
                    available=is_available(vehicle.id, ongoing, own, current),
                    scheduled_maintenance=scheduled_dates(vehicle.id, own),
                    maintenance=own,
                )
            )
        return views


def _filters(
    *,
    brand: Optional[str] = None,
    model: Optional[str] = None,
    vehicle_type=None,
    color: Optional[str] = None,
    transmission=None,
    min_price=None,
    max_price=None,
) -> dict:
    return {
        "brand": brand or None,
        "model": model or None,
        "vehicle_type": _choice(VehicleType, vehicle_type, None),
        "color": color or None,
        "transmission": _choice(Transmission, transmission, None),
        "min_price": _price(min_price) if min_price is not None else None,
        "max_price": _price(max_price) if max_price is not None else None,
    }


def _choice(enum_cls, value, default):
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError as exc:
        labels = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{value!r} is not one of: {labels}") from exc


def _price(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("price must be a number") from exc
    if amount < 0:
        raise ValidationError("price cannot be negative")
    return amount
