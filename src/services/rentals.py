"""
Rental Lifecycle
================

AWAITING_APPROVAL -> PENDING -> ONGOING -> COMPLETED
AWAITING_APPROVAL -> CANCELLED

* **create**      -- queue a booking for approval; maintenance conflicts and
  overlapping approved rentals are reported back but do not block it unless
  ``reject_conflicting_bookings`` is set.
* **approve**     -- re-checks the *current* maintenance schedule and refuses
  to share a day with another approved rental of the same vehicle.
* **reject**      -- cancels a booking still awaiting approval.
* **payment**     -- a completed payment starts the rental.
* **update**      -- administrative override of dates and/or status.
* **sweep**       -- ONGOING rentals past their return day become COMPLETED.

Every check-then-write runs inside the caller's transaction after locking
the vehicle row, so concurrent writers of one vehicle are serialized.  The
rental is re-read once the lock is held, so a status committed by another
writer in the meantime is never overwritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.conflicts import (
    BLOCKING_MAINTENANCE,
    HOLDING_RENTALS,
    rental_overlaps_maintenance,
    rental_overlaps_rental,
)
from src.domain.dates import Clock, calendar_day, make_clock, today
from src.domain.entities import MaintenanceRecord, Rental, transition_rental
from src.domain.enums import PaymentStatus, RentalStatus
from src.domain.errors import (
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ValidationError,
)
from src.domain.maintenance import derive_status
from src.domain.rentals import due_for_completion, validate_window
from src.infrastructure.models import (
    PaymentModel,
    RentalModel,
    VehicleModel,
)
from src.infrastructure.repositories import (
    MaintenanceRepository,
    PaymentRepository,
    RentalRepository,
    UserRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    rental: RentalModel
    conflicts: list[MaintenanceRecord] = field(default_factory=list)
    rental_conflicts: list[Rental] = field(default_factory=list)


@dataclass
class PaymentResult:
    payment: PaymentModel
    rental: RentalModel


class RentalService:
    def __init__(
        self,
        session: AsyncSession,
        clock: Optional[Clock] = None,
        reject_conflicting_bookings: Optional[bool] = None,
    ):
        self.session = session
        self.clock = clock or make_clock(settings.timezone)
        self.reject_conflicting_bookings = (
            settings.reject_conflicting_bookings
            if reject_conflicting_bookings is None
            else reject_conflicting_bookings
        )
        self.rentals = RentalRepository(session)
        self.maintenance = MaintenanceRepository(session)
        self.vehicles = VehicleRepository(session)
        self.users = UserRepository(session)
        self.payments = PaymentRepository(session)

    # ── Commands ──────────────────────────────────────────────────────

    async def create(
        self,
        *,
        vehicle_id: Optional[int],
        customer_id: Optional[int],
        rental_date,
        return_date,
        total_fee=None,
    ) -> BookingResult:
        if not vehicle_id or not customer_id or not rental_date or not return_date:
            raise ValidationError("Missing required fields")
        start, end = validate_window(rental_date, return_date)
        fee = _money(total_fee, "total_fee") if total_fee is not None else None

        await self._lock_vehicle(vehicle_id)
        if await self.users.get_by_id(customer_id) is None:
            raise NotFoundError("Customer", customer_id)

        conflicts = await self._maintenance_conflicts(vehicle_id, start, end)
        rivals = await self._rental_conflicts(vehicle_id, start, end)
        if self.reject_conflicting_bookings:
            if rivals:
                raise ConflictError(
                    "Vehicle is already booked within the requested dates", rivals
                )
            if conflicts:
                raise ConflictError(
                    "Vehicle has scheduled maintenance within the requested dates",
                    conflicts,
                )

        rental = await self.rentals.save(
            RentalModel(
                vehicle_id=vehicle_id,
                customer_id=customer_id,
                rental_date=start,
                return_date=end,
                total_fee=fee,
                status=RentalStatus.AWAITING_APPROVAL,
            )
        )
        if conflicts or rivals:
            logger.warning(
                "Rental %d queued on vehicle %d despite %d maintenance conflict(s) "
                "and %d overlapping booking(s)",
                rental.id,
                vehicle_id,
                len(conflicts),
                len(rivals),
            )
        else:
            logger.info("Rental %d created for vehicle %d", rental.id, vehicle_id)
        return BookingResult(rental=rental, conflicts=conflicts, rental_conflicts=rivals)

    async def approve(self, rental_id: int) -> RentalModel:
        rental = await self._get_locked(rental_id)
        current = RentalStatus(rental.status)
        if current != RentalStatus.AWAITING_APPROVAL:
            raise IllegalTransitionError(current, RentalStatus.PENDING)

        rivals = await self._rental_conflicts(
            rental.vehicle_id, rental.rental_date, rental.return_date, rental.id
        )
        if rivals:
            raise ConflictError(
                "Vehicle is already booked within the rental dates", rivals
            )
        conflicts = await self._maintenance_conflicts(
            rental.vehicle_id, rental.rental_date, rental.return_date
        )
        if conflicts:
            raise ConflictError(
                "Vehicle has scheduled maintenance within the rental dates",
                conflicts,
            )

        transition_rental(rental, RentalStatus.PENDING)
        await self.rentals.save(rental)
        logger.info("Rental %d approved", rental.id)
        return rental

    async def reject(self, rental_id: int) -> RentalModel:
        rental = await self._get_locked(rental_id)
        transition_rental(rental, RentalStatus.CANCELLED)
        await self.rentals.save(rental)
        logger.info("Rental %d rejected", rental.id)
        return rental

    async def record_payment(
        self,
        *,
        rental_id: Optional[int],
        amount,
        payment_status: PaymentStatus | str | None = None,
    ) -> PaymentResult:
        """Store a payment; a COMPLETED payment puts the rental ONGOING.

        The rental's current status is not checked against the lifecycle
        (see DESIGN.md), but a rental that did not already hold its dates is
        refused if another approved rental or blocking maintenance overlaps
        them.
        """
        if not rental_id or amount is None:
            raise ValidationError("Missing required fields")
        value = _money(amount, "amount")
        if value <= 0:
            raise ValidationError("amount must be positive")
        try:
            status = PaymentStatus(payment_status or PaymentStatus.PENDING)
        except ValueError as exc:
            raise ValidationError(f"Unknown payment status {payment_status!r}") from exc

        rental = await self._get_locked(rental_id)
        previous = RentalStatus(rental.status)
        if status == PaymentStatus.COMPLETED and previous not in HOLDING_RENTALS:
            rivals = await self._rental_conflicts(
                rental.vehicle_id, rental.rental_date, rental.return_date, rental.id
            )
            if rivals:
                raise ConflictError(
                    "Vehicle is already booked within the rental dates", rivals
                )
            conflicts = await self._maintenance_conflicts(
                rental.vehicle_id, rental.rental_date, rental.return_date
            )
            if conflicts:
                raise ConflictError(
                    "Vehicle has scheduled maintenance within the rental dates",
                    conflicts,
                )

        payment = await self.payments.save(
            PaymentModel(
                rental_id=rental.id,
                amount=value,
                payment_status=status,
                payment_date=datetime.now(timezone.utc),
            )
        )

        if status == PaymentStatus.COMPLETED:
            if previous != RentalStatus.PENDING:
                logger.warning(
                    "Completed payment on rental %d in status %s; forcing Ongoing",
                    rental.id,
                    previous.value,
                )
            rental.status = RentalStatus.ONGOING
            await self.rentals.save(rental)
            logger.info("Rental %d is now Ongoing", rental.id)
        return PaymentResult(payment=payment, rental=rental)

    async def update(
        self,
        rental_id: int,
        *,
        rental_date=None,
        return_date=None,
        status: RentalStatus | str | None = None,
    ) -> RentalModel:
        """Administrative override.

        Date changes are re-checked against scheduled maintenance.  The
        status is applied as given, without consulting the state machine,
        but a rental moved into Pending or Ongoing must still find its days
        free of maintenance and of other approved rentals.
        """
        new_status = None
        if status is not None:
            try:
                new_status = RentalStatus(status)
            except ValueError as exc:
                raise ValidationError(f"Unknown rental status {status!r}") from exc

        rental = await self._get_locked(rental_id)
        current = RentalStatus(rental.status)
        target = new_status or current
        dates_changed = rental_date is not None or return_date is not None
        # the rental holds the vehicle for [start, end] once this is saved
        claims = target in HOLDING_RENTALS and (dates_changed or target != current)
        start, end = rental.rental_date, rental.return_date

        if dates_changed:
            start, end = validate_window(
                rental_date if rental_date is not None else rental.rental_date,
                return_date if return_date is not None else rental.return_date,
            )
        if dates_changed or claims:
            conflicts = await self._maintenance_conflicts(rental.vehicle_id, start, end)
            if conflicts:
                raise ConflictError(
                    "Vehicle has scheduled maintenance within the new dates",
                    conflicts,
                )

        if claims:
            rivals = await self._rental_conflicts(
                rental.vehicle_id, start, end, rental.id
            )
            if rivals:
                raise ConflictError(
                    "Vehicle is already booked within the new dates", rivals
                )

        rental.rental_date, rental.return_date = start, end
        if target != current:
            logger.warning(
                "Rental %d status overridden: %s -> %s",
                rental.id,
                current.value,
                target.value,
            )
            rental.status = target

        await self.rentals.save(rental)
        return rental

    async def complete_if_due(self, rental_id: int, now: Optional[date] = None) -> bool:
        """Sweep step for one rental; returns ``True`` if it was completed."""
        rental = await self.rentals.get_for_update(rental_id)
        current = calendar_day(now) if now is not None else today(self.clock)
        if rental is None or not due_for_completion(rental, current):
            return False
        transition_rental(rental, RentalStatus.COMPLETED)
        await self.rentals.save(rental)
        logger.info("Rental %d completed (returned %s)", rental.id, rental.return_date)
        return True

    # ── Queries ───────────────────────────────────────────────────────

    async def get(self, rental_id: int) -> RentalModel:
        return await self._get(rental_id)

    async def list_all(self) -> list[RentalModel]:
        return await self.rentals.list_all()

    async def list_for_customer(self, customer_id: int) -> list[RentalModel]:
        return await self.rentals.find_by_customer(customer_id)

    async def payments_for(self, rental_id: int) -> list[PaymentModel]:
        await self._get(rental_id)
        return await self.payments.find_by_rental(rental_id)

    # ── Internals ─────────────────────────────────────────────────────

    async def _get(self, rental_id: int) -> RentalModel:
        rental = await self.rentals.get_by_id(rental_id)
        if rental is None:
            raise NotFoundError("Rental", rental_id)
        return rental

    async def _get_locked(self, rental_id: int) -> RentalModel:
        """Lock the rental's vehicle, then re-read the rental under that lock."""
        rental = await self._get(rental_id)
        await self._lock_vehicle(rental.vehicle_id)
        rental = await self.rentals.get_for_update(rental_id)
        if rental is None:
            raise NotFoundError("Rental", rental_id)
        return rental

    async def _lock_vehicle(self, vehicle_id: int) -> VehicleModel:
        vehicle = await self.vehicles.get_for_update(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return vehicle

    async def _rental_conflicts(
        self,
        vehicle_id: int,
        start: date,
        end: date,
        exclude_id: Optional[int] = None,
    ) -> list[Rental]:
        """Approved rentals of the vehicle sharing a day with ``[start, end]``."""
        rentals = await self.rentals.find_by_vehicle(vehicle_id)
        overlapping = rental_overlaps_rental(vehicle_id, start, end, rentals, exclude_id)
        return [rental.to_entity() for rental in overlapping]

    async def _maintenance_conflicts(
        self, vehicle_id: int, start: date, end: date
    ) -> list[MaintenanceRecord]:
        """Scheduled or in-progress maintenance inside ``[start, end]``.

        Statuses are re-derived for today first so a stale row is judged
        by its date, not by when the sweep last ran.
        """
        current = today(self.clock)
        records = await self.maintenance.find_by_vehicle(vehicle_id)
        for record in records:
            if derive_status(record, current):
                await self.maintenance.save(record)
        overlapping = rental_overlaps_maintenance(
            vehicle_id, start, end, records, statuses=BLOCKING_MAINTENANCE
        )
        return [record.to_entity() for record in overlapping]


def _money(value, name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{name} must be a number") from exc
    if amount < 0:
        raise ValidationError(f"{name} cannot be negative")
    return amount
