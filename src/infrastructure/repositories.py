"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  ``save`` has upsert semantics: new rows are
added, loaded rows are already tracked by the session; both are flushed.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    MaintenanceRecordModel,
    PaymentModel,
    RentalModel,
    UserModel,
    VehicleModel,
)
from src.domain.enums import (
    RENTAL_STATUS_PRIORITY,
    MaintenanceStatus,
    RentalStatus,
    Transmission,
    VehicleType,
)


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, vehicle: VehicleModel) -> VehicleModel:
        self.session.add(vehicle)
        await self.session.flush()
        return vehicle

    async def get_by_id(self, vehicle_id: int) -> Optional[VehicleModel]:
        return await self.session.get(VehicleModel, vehicle_id)

    async def get_for_update(self, vehicle_id: int) -> Optional[VehicleModel]:
        """SELECT ... FOR UPDATE: serializes writers of one vehicle's schedule."""
        result = await self.session.execute(
            select(VehicleModel)
            .where(VehicleModel.id == vehicle_id)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_by_plate(self, plate: str) -> Optional[VehicleModel]:
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.vehicle_no_plate == plate)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        vehicle_type: Optional[VehicleType] = None,
        color: Optional[str] = None,
        transmission: Optional[Transmission] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> list[VehicleModel]:
        """Catalogue filters; every one left as ``None`` is ignored."""
        query = select(VehicleModel)
        for column, value in (
            (VehicleModel.brand, brand),
            (VehicleModel.model, model),
            (VehicleModel.vehicle_type, vehicle_type),
            (VehicleModel.color, color),
            (VehicleModel.transmission, transmission),
        ):
            if value is not None:
                query = query.where(column == value)
        if min_price is not None:
            query = query.where(VehicleModel.price_per_day >= min_price)
        if max_price is not None:
            query = query.where(VehicleModel.price_per_day <= max_price)
        result = await self.session.execute(
            query.order_by(VehicleModel.brand, VehicleModel.model, VehicleModel.id)
        )
        return list(result.scalars().all())

    async def models_for_brand(self, brand: str) -> list[str]:
        result = await self.session.execute(
            select(VehicleModel.model)
            .where(VehicleModel.brand == brand)
            .distinct()
            .order_by(VehicleModel.model)
        )
        return list(result.scalars().all())


class RentalRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, rental: RentalModel) -> RentalModel:
        self.session.add(rental)
        await self.session.flush()
        return rental

    async def get_by_id(self, rental_id: int) -> Optional[RentalModel]:
        return await self.session.get(RentalModel, rental_id)

    async def get_for_update(self, rental_id: int) -> Optional[RentalModel]:
        """Re-read under a row lock, overwriting whatever the session cached."""
        result = await self.session.execute(
            select(RentalModel)
            .where(RentalModel.id == rental_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_vehicle(self, vehicle_id: int) -> list[RentalModel]:
        result = await self.session.execute(
            select(RentalModel)
            .where(RentalModel.vehicle_id == vehicle_id)
            .order_by(RentalModel.rental_date)
        )
        return list(result.scalars().all())

    async def find_by_vehicles(
        self, vehicle_ids: list[int], statuses: Optional[list[RentalStatus]] = None
    ) -> list[RentalModel]:
        if not vehicle_ids:
            return []
        query = select(RentalModel).where(RentalModel.vehicle_id.in_(vehicle_ids))
        if statuses:
            query = query.where(RentalModel.status.in_(statuses))
        result = await self.session.execute(query.order_by(RentalModel.rental_date))
        return list(result.scalars().all())

    async def find_by_customer(self, customer_id: int) -> list[RentalModel]:
        result = await self.session.execute(
            select(RentalModel)
            .where(RentalModel.customer_id == customer_id)
            .order_by(RentalModel.rental_date.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[RentalModel]:
        """Admin view: status priority first, newest rental date first."""
        result = await self.session.execute(
            select(RentalModel).order_by(
                RentalModel.rental_date.desc(), RentalModel.id.desc()
            )
        )
        rentals = list(result.scalars().all())
        rentals.sort(key=lambda r: RENTAL_STATUS_PRIORITY[RentalStatus(r.status)])
        return rentals

    async def ids_due_for_completion(self, today: date) -> list[int]:
        result = await self.session.execute(
            select(RentalModel.id)
            .where(RentalModel.status == RentalStatus.ONGOING)
            .where(RentalModel.return_date <= today)
            .order_by(RentalModel.id)
        )
        return list(result.scalars().all())


class MaintenanceRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, record: MaintenanceRecordModel) -> MaintenanceRecordModel:
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_by_id(self, record_id: int) -> Optional[MaintenanceRecordModel]:
        return await self.session.get(MaintenanceRecordModel, record_id)

    async def find_by_vehicle(self, vehicle_id: int) -> list[MaintenanceRecordModel]:
        result = await self.session.execute(
            select(MaintenanceRecordModel)
            .where(MaintenanceRecordModel.vehicle_id == vehicle_id)
            .order_by(MaintenanceRecordModel.maintenance_date)
        )
        return list(result.scalars().all())

    async def find_by_vehicles(self, vehicle_ids: list[int]) -> list[MaintenanceRecordModel]:
        if not vehicle_ids:
            return []
        result = await self.session.execute(
            select(MaintenanceRecordModel)
            .where(MaintenanceRecordModel.vehicle_id.in_(vehicle_ids))
            .order_by(MaintenanceRecordModel.maintenance_date)
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[MaintenanceRecordModel]:
        result = await self.session.execute(
            select(MaintenanceRecordModel).order_by(
                MaintenanceRecordModel.maintenance_date.desc(),
                MaintenanceRecordModel.id.desc(),
            )
        )
        return list(result.scalars().all())

    async def ids_not_cancelled(self) -> list[int]:
        result = await self.session.execute(
            select(MaintenanceRecordModel.id)
            .where(MaintenanceRecordModel.status != MaintenanceStatus.CANCELLED)
            .order_by(MaintenanceRecordModel.id)
        )
        return list(result.scalars().all())


class PaymentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, payment: PaymentModel) -> PaymentModel:
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def find_by_rental(self, rental_id: int) -> list[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.rental_id == rental_id)
            .order_by(PaymentModel.id)
        )
        return list(result.scalars().all())


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)
