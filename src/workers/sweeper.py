"""
Availability Sweep Worker
=========================

Runs once on startup, then every ``SWEEP_INTERVAL_SECONDS`` (default one
day).

Each run
--------
1. Completes ONGOING rentals whose return day has been reached.
2. Re-derives the status of every non-cancelled maintenance record.

The two passes are independent: a failure in one never stops the other.
Each record is read, decided and written in its own transaction, so a
slow sweep never blocks interactive requests, and a record that fails is
logged and retried on the next tick.  The sweep only advances statuses
that depend on elapsed time; it never re-checks overlaps.

Concurrency safety
------------------
* **Redis distributed lock** keeps two API processes from sweeping at the
  same time.  Running twice is harmless (every step is idempotent for a
  given day), so an unreachable Redis only produces a warning.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Awaitable, Callable, Optional

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import settings
from src.domain.dates import Clock, calendar_day, make_clock, today
from src.infrastructure.database import async_session_factory
from src.infrastructure.locks import DistributedLock
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import MaintenanceRepository, RentalRepository
from src.services.maintenance import MaintenanceService
from src.services.rentals import RentalService

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


@dataclass
class SweepReport:
    day: date
    rentals_completed: list[int] = field(default_factory=list)
    maintenance_updated: list[int] = field(default_factory=list)
    failures: int = 0


class AvailabilitySweep:
    """Advances time-derived statuses; call ``run`` from any trigger."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
        clock: Optional[Clock] = None,
    ):
        self.session_factory = session_factory
        self.clock = clock or make_clock(settings.timezone)

    async def run(self, now: date | datetime | None = None) -> SweepReport:
        report = SweepReport(
            day=calendar_day(now) if now is not None else today(self.clock)
        )
        await self._pass(
            "rental",
            report,
            list_ids=self._rental_ids,
            step=self._complete_rental,
            changed=report.rentals_completed,
        )
        await self._pass(
            "maintenance",
            report,
            list_ids=self._maintenance_ids,
            step=self._derive_maintenance,
            changed=report.maintenance_updated,
        )
        if report.rentals_completed or report.maintenance_updated or report.failures:
            logger.info(
                "Sweep %s: %d rental(s) completed, %d maintenance record(s) updated, "
                "%d failure(s)",
                report.day,
                len(report.rentals_completed),
                len(report.maintenance_updated),
                report.failures,
            )
        return report

    # ── Passes ────────────────────────────────────────────────────────

    async def _pass(
        self,
        name: str,
        report: SweepReport,
        list_ids: Callable[[date], Awaitable[list[int]]],
        step: Callable[[int, date], Awaitable[bool]],
        changed: list[int],
    ) -> None:
        try:
            ids = await list_ids(report.day)
        except Exception:
            logger.exception("Sweep: could not list %s candidates", name)
            report.failures += 1
            return

        for record_id in ids:
            try:
                if await step(record_id, report.day):
                    changed.append(record_id)
            except Exception:
                logger.exception("Sweep: %s %d failed", name, record_id)
                report.failures += 1

    async def _rental_ids(self, day: date) -> list[int]:
        async with self.session_factory() as session:
            return await RentalRepository(session).ids_due_for_completion(day)

    async def _maintenance_ids(self, day: date) -> list[int]:
        async with self.session_factory() as session:
            return await MaintenanceRepository(session).ids_not_cancelled()

    async def _complete_rental(self, rental_id: int, day: date) -> bool:
        async with self.session_factory() as session:
            done = await RentalService(session, self.clock).complete_if_due(rental_id, day)
            await session.commit()
            return done

    async def _derive_maintenance(self, record_id: int, day: date) -> bool:
        async with self.session_factory() as session:
            changed = await MaintenanceService(session, self.clock).refresh_if_due(
                record_id, day
            )
            await session.commit()
            return changed


# ── Public API ────────────────────────────────────────────────────────


async def start_sweep_loop(sweep: Optional[AvailabilitySweep] = None) -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop(sweep or AvailabilitySweep()))
    logger.info(
        "Availability sweep started (interval=%ds)", settings.sweep_interval_seconds
    )


async def stop_sweep_loop() -> None:
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    logger.info("Availability sweep stopped")


async def run_locked(sweep: AvailabilitySweep) -> Optional[SweepReport]:
    """One tick under the distributed lock; ``None`` if another worker holds it."""
    lock: DistributedLock | None = None
    try:
        lock = DistributedLock(
            await get_redis(), "availability_sweep",
            ttl_seconds=settings.sweep_lock_ttl_seconds,
        )
        if not await lock.acquire():
            logger.debug("Lock held by another worker – skipping sweep")
            return None
    except RedisError:
        logger.warning("Redis unavailable; sweeping without the lock")
        lock = None

    try:
        return await sweep.run()
    finally:
        if lock is not None:
            try:
                await lock.release()
            except RedisError:
                logger.warning("Could not release sweep lock; it expires on its own")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(sweep: AvailabilitySweep) -> None:
    """Periodic loop: sweep then sleep."""
    assert _stop_event is not None
    run_now = settings.sweep_run_on_startup
    while not _stop_event.is_set():
        if run_now:
            try:
                await run_locked(sweep)
            except Exception:
                logger.exception("Unhandled error in availability sweep")
        run_now = True
        # Wait for the interval or until stop is signalled
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.sweep_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # next tick
