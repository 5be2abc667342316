"""
Maintenance Lifecycle
=====================

SCHEDULED -> ONGOING -> COMPLETED, driven by the calendar; CANCELLED by
hand from any status except ONGOING.  CANCELLED is never left.

* **schedule** -- refused while an active rental covers the day; the initial
  status is derived from the date immediately.
* **cancel**   -- refused with ``MaintenanceOngoingError`` on the day itself.
* **reads**    -- re-derive and persist statuses before returning them.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain import maintenance as lifecycle
from src.domain.conflicts import date_has_active_booking, maintenance_overlaps_rental
from src.domain.dates import Clock, calendar_day, make_clock, today
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.infrastructure.models import MaintenanceRecordModel, VehicleModel
from src.infrastructure.repositories import (
    MaintenanceRepository,
    RentalRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)


class MaintenanceService:
    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None):
        self.session = session
        self.clock = clock or make_clock(settings.timezone)
        self.records = MaintenanceRepository(session)
        self.rentals = RentalRepository(session)
        self.vehicles = VehicleRepository(session)

    # ── Commands ──────────────────────────────────────────────────────

    async def schedule(
        self,
        vehicle_id: int,
        *,
        maintenance_date,
        description: Optional[str],
        cost=None,
    ) -> MaintenanceRecordModel:
        if not maintenance_date:
            raise ValidationError("maintenance_date is required")
        try:
            day = calendar_day(maintenance_date)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid maintenance_date: {exc}") from exc
        if not description or not description.strip():
            raise ValidationError("description is required")
        amount = _cost(cost)

        vehicle = await self.vehicles.get_for_update(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)

        rentals = await self.rentals.find_by_vehicle(vehicle_id)
        conflicts = maintenance_overlaps_rental(vehicle_id, day, rentals)
        if conflicts:
            raise ConflictError(
                f"Vehicle {vehicle_id} is booked on {day.isoformat()}",
                [rental.to_entity() for rental in conflicts],
            )

        record = await self.records.save(
            MaintenanceRecordModel(
                vehicle_id=vehicle_id,
                maintenance_date=day,
                description=description.strip(),
                cost=amount,
                status=lifecycle.status_for_day(day, today(self.clock)),
            )
        )
        logger.info(
            "Maintenance %d scheduled for vehicle %d on %s (%s)",
            record.id,
            vehicle_id,
            day,
            record.status.value,
        )
        return record

    async def cancel(self, record_id: int) -> MaintenanceRecordModel:
        record = await self.records.get_by_id(record_id)
        if record is None:
            raise NotFoundError("Maintenance record", record_id)
        if lifecycle.cancel(record, today(self.clock)):
            await self.records.save(record)
            logger.info("Maintenance %d cancelled", record.id)
        return record

    async def refresh_if_due(self, record_id: int, now: Optional[date] = None) -> bool:
        """Sweep step for one record; returns ``True`` if its status changed."""
        record = await self.records.get_by_id(record_id)
        if record is None:
            return False
        current = calendar_day(now) if now is not None else today(self.clock)
        if not lifecycle.derive_status(record, current):
            return False
        await self.records.save(record)
        logger.info("Maintenance %d is now %s", record.id, record.status.value)
        return True

    # ── Queries ───────────────────────────────────────────────────────

    async def list_for_vehicle(self, vehicle_id: int) -> list[MaintenanceRecordModel]:
        await self._vehicle(vehicle_id)
        return await self._refreshed(await self.records.find_by_vehicle(vehicle_id))

    async def list_all(self) -> list[MaintenanceRecordModel]:
        return await self._refreshed(await self.records.list_all())

    async def date_has_booking(self, vehicle_id: int, day) -> bool:
        try:
            target = calendar_day(day)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid date: {exc}") from exc
        await self._vehicle(vehicle_id)
        rentals = await self.rentals.find_by_vehicle(vehicle_id)
        return date_has_active_booking(vehicle_id, target, rentals)

    # ── Internals ─────────────────────────────────────────────────────

    async def _vehicle(self, vehicle_id: int) -> VehicleModel:
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return vehicle

    async def _refreshed(
        self, records: list[MaintenanceRecordModel]
    ) -> list[MaintenanceRecordModel]:
        current = today(self.clock)
        for record in records:
            if lifecycle.derive_status(record, current):
                await self.records.save(record)
        return records


def _cost(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("cost must be a number") from exc
    if amount < 0:
        raise ValidationError("cost cannot be negative")
    return amount
