"""
Concurrency safety tests.

Demonstrates:
1. The distributed lock lets only one sweeper in at a time (mocked Redis).
2. Racing writers of one vehicle's schedule end with exactly one winner.
3. A decision committed by another writer while a request waits for the
   vehicle lock is never overwritten.
4. Whatever order competing writers commit in, no day of a vehicle is
   held by two approved rentals, or by an approved rental and maintenance.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from itertools import permutations
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import update

from src.domain.conflicts import BLOCKING_MAINTENANCE, HOLDING_RENTALS
from src.domain.enums import MaintenanceStatus, PaymentStatus, RentalStatus
from src.domain.errors import ConflictError, IllegalTransitionError, LifecycleError
from src.infrastructure.locks import DistributedLock
from src.infrastructure.models import RentalModel
from src.infrastructure.repositories import (
    MaintenanceRepository,
    RentalRepository,
    VehicleRepository,
)
from src.services.maintenance import MaintenanceService
from src.services.rentals import RentalService
from tests.factories import TestSessionFactory, add_maintenance, add_rental


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "availability_sweep", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:availability_sweep", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "availability_sweep", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_only_deletes_own_token(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=0)

        lock = DistributedLock(mock_redis, "availability_sweep", ttl_seconds=10)
        await lock.acquire()
        # the key expired and another worker took it
        assert await lock.release() is False

        args = mock_redis.eval.call_args.args
        assert args[1:] == (1, "lock:availability_sweep", lock.token)

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self):
        first = DistributedLock(AsyncMock(), "availability_sweep")
        second = DistributedLock(AsyncMock(), "availability_sweep")
        assert first.token != second.token
        assert first.ttl == 300

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "availability_sweep", ttl_seconds=10)
        with pytest.raises(RuntimeError, match="Could not acquire lock"):
            async with lock:
                pass

    @pytest.mark.asyncio
    async def test_context_manager_releases(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        async with DistributedLock(mock_redis, "availability_sweep"):
            pass

        mock_redis.eval.assert_awaited_once()


class TestRedisPool:
    @pytest.mark.asyncio
    async def test_close_disconnects_the_shared_pool(self):
        from src.infrastructure import redis_client

        pool = AsyncMock()
        with patch.object(redis_client, "_pool", pool):
            await redis_client.close_redis()
        pool.disconnect.assert_awaited_once()


class TestScheduleRace:
    """Approval and maintenance scheduling for the same vehicle and day.

    Whichever commits first wins; the other sees the committed row and is
    refused.  On PostgreSQL the vehicle row lock forces this ordering.
    """

    @pytest.mark.asyncio
    async def test_maintenance_after_approval_is_refused(self, db_session, fleet, clock):
        rental = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )
        await RentalService(db_session, clock).approve(rental.id)
        await db_session.commit()

        with pytest.raises(ConflictError):
            await MaintenanceService(db_session, clock).schedule(
                fleet["car"], maintenance_date=date(2026, 5, 11), description="Brakes"
            )

    @pytest.mark.asyncio
    async def test_approval_after_maintenance_is_refused(self, db_session, fleet, clock):
        await MaintenanceService(db_session, clock).schedule(
            fleet["van"], maintenance_date=date(2026, 5, 11), description="Brakes"
        )
        await db_session.commit()

        # requested after the service day was booked
        van_rental = await add_rental(
            db_session, fleet["van"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )
        car_rental = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )
        with pytest.raises(ConflictError):
            await RentalService(db_session, clock).approve(van_rental.id)

        approved = await RentalService(db_session, clock).approve(car_rental.id)
        assert approved.status == RentalStatus.PENDING

    @pytest.mark.asyncio
    async def test_second_approval_of_overlapping_dates_is_refused(self, db_session, fleet, clock):
        first = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )
        second = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 11), date(2026, 5, 14)
        )
        await RentalService(db_session, clock).approve(first.id)
        await db_session.commit()

        with pytest.raises(ConflictError):
            await RentalService(db_session, clock).approve(second.id)


def _commit_first(rental_id: int, status: RentalStatus):
    """Stand-in for ``VehicleRepository.get_for_update`` that lets another
    session set the rental's status and commit before the lock is granted."""
    real = VehicleRepository.get_for_update

    async def locked(repo, vehicle_id):
        async with TestSessionFactory() as other:
            await other.execute(
                update(RentalModel).where(RentalModel.id == rental_id).values(status=status)
            )
            await other.commit()
        return await real(repo, vehicle_id)

    return patch.object(VehicleRepository, "get_for_update", locked)


class TestDecisionRace:
    """Approve and reject of one rental, the loser arriving second."""

    @pytest.mark.asyncio
    async def test_approve_sees_a_reject_committed_while_waiting(self, db_session, fleet, clock):
        rental = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )

        with _commit_first(rental.id, RentalStatus.CANCELLED):
            with pytest.raises(IllegalTransitionError):
                await RentalService(db_session, clock).approve(rental.id)

        await db_session.rollback()
        await db_session.refresh(rental)
        assert rental.status == RentalStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_reject_sees_an_approval_committed_while_waiting(self, db_session, fleet, clock):
        rental = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12)
        )

        with _commit_first(rental.id, RentalStatus.PENDING):
            with pytest.raises(IllegalTransitionError):
                await RentalService(db_session, clock).reject(rental.id)

        await db_session.rollback()
        await db_session.refresh(rental)
        assert rental.status == RentalStatus.PENDING

    @pytest.mark.asyncio
    async def test_override_sees_a_cancel_committed_while_waiting(self, db_session, fleet, clock):
        """A date-only edit keeps the status another writer committed."""
        rental = await add_rental(
            db_session, fleet["car"], fleet["customer"], date(2026, 5, 10), date(2026, 5, 12),
            status=RentalStatus.PENDING,
        )

        with _commit_first(rental.id, RentalStatus.CANCELLED):
            updated = await RentalService(db_session, clock).update(
                rental.id, return_date=date(2026, 5, 13)
            )
        await db_session.commit()

        assert updated.status == RentalStatus.CANCELLED
        assert updated.return_date == date(2026, 5, 13)


# ── Schedule exclusivity ──────────────────────────────────────────────

# Competing writers on the car; the rentals below are all requested first.
_WRITERS = {
    "approve_a": lambda s, ids: RentalService(s["session"], s["clock"]).approve(ids["a"]),
    "approve_b": lambda s, ids: RentalService(s["session"], s["clock"]).approve(ids["b"]),
    "pay_c": lambda s, ids: RentalService(s["session"], s["clock"]).record_payment(
        rental_id=ids["c"], amount=10, payment_status=PaymentStatus.COMPLETED
    ),
    "move_a": lambda s, ids: RentalService(s["session"], s["clock"]).update(
        ids["a"], rental_date=date(2026, 5, 15), return_date=date(2026, 5, 17)
    ),
    "service_day": lambda s, ids: MaintenanceService(s["session"], s["clock"]).schedule(
        s["car"], maintenance_date=date(2026, 5, 17), description="Tyres"
    ),
}


async def _held_days(session, vehicle_id: int) -> tuple[Counter, set[date]]:
    rentals = await RentalRepository(session).find_by_vehicle(vehicle_id)
    records = await MaintenanceRepository(session).find_by_vehicle(vehicle_id)
    held: Counter = Counter()
    for rental in rentals:
        if RentalStatus(rental.status) not in HOLDING_RENTALS:
            continue
        day = rental.rental_date
        while day <= rental.return_date:
            held[day] += 1
            day += timedelta(days=1)
    blocked = {
        record.maintenance_date
        for record in records
        if MaintenanceStatus(record.status) in BLOCKING_MAINTENANCE
    }
    return held, blocked


class TestScheduleExclusivity:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("order", list(permutations(_WRITERS)))
    async def test_no_day_is_claimed_twice(self, db_session, fleet, clock, order):
        car, customer = fleet["car"], fleet["customer"]
        ids = {
            "a": (await add_rental(db_session, car, customer, date(2026, 5, 10), date(2026, 5, 12))).id,
            "b": (await add_rental(db_session, car, customer, date(2026, 5, 12), date(2026, 5, 14))).id,
            "c": (await add_rental(db_session, car, customer, date(2026, 5, 14), date(2026, 5, 16))).id,
        }
        # a request for the service day that only a payment could force through
        await add_maintenance(db_session, car, date(2026, 5, 20))
        ids_late = (
            await add_rental(db_session, car, customer, date(2026, 5, 19), date(2026, 5, 21))
        ).id
        state = {"session": db_session, "clock": clock, "car": car}

        for name in order + ("late_payment",):
            try:
                if name == "late_payment":
                    await RentalService(db_session, clock).record_payment(
                        rental_id=ids_late, amount=10, payment_status="Completed"
                    )
                else:
                    await _WRITERS[name](state, ids)
                await db_session.commit()
            except LifecycleError:
                await db_session.rollback()

        held, blocked = await _held_days(db_session, car)
        assert all(count == 1 for count in held.values())
        assert not blocked & set(held)
