"""
Conflict Resolver
=================

Pure checks deciding whether two rental windows, or a rental window and a
maintenance day, claim the same vehicle on the same day.

* ``rental_overlaps_maintenance``  -- rental window vs. SCHEDULED maintenance
* ``rental_overlaps_rental``       -- rental window vs. approved rentals
* ``maintenance_overlaps_rental``  -- maintenance day vs. active rentals
* ``date_has_active_booking``      -- advisory variant for the scheduler UI

"Active" for a rental means any status except CANCELLED and COMPLETED.
Both ends of a rental window are inclusive.  The checks return the
conflicting rows (an empty list is falsy), never raise for well-formed
input and perform no I/O.

Complexity: O(n) in the number of rows passed in.
"""

from __future__ import annotations

from datetime import date
from typing import Collection, Iterable, Optional, TypeVar

from .dates import calendar_day, covers
from .enums import RENTAL_INACTIVE, MaintenanceStatus, RentalStatus

R = TypeVar("R")
M = TypeVar("M")

# Maintenance that takes the vehicle out of service once its day arrives
BLOCKING_MAINTENANCE: frozenset[MaintenanceStatus] = frozenset(
    {MaintenanceStatus.SCHEDULED, MaintenanceStatus.ONGOING}
)

# Approved rentals; two of these may never share a day on one vehicle
HOLDING_RENTALS: frozenset[RentalStatus] = frozenset(
    {RentalStatus.PENDING, RentalStatus.ONGOING}
)


def is_active_rental(rental) -> bool:
    return RentalStatus(rental.status) not in RENTAL_INACTIVE


def rental_overlaps_maintenance(
    vehicle_id: int,
    start: date,
    end: date,
    maintenance: Iterable[M],
    statuses: Collection[MaintenanceStatus] = (MaintenanceStatus.SCHEDULED,),
) -> list[M]:
    """Maintenance on *vehicle_id* whose day falls in ``[start, end]``.

    Only records in *statuses* count (SCHEDULED by default).
    """
    return [
        record
        for record in maintenance
        if record.vehicle_id == vehicle_id
        and MaintenanceStatus(record.status) in statuses
        and covers(start, end, record.maintenance_date)
    ]


def maintenance_overlaps_rental(
    vehicle_id: int,
    day: date,
    rentals: Iterable[R],
) -> list[R]:
    """Active rentals on *vehicle_id* whose window contains *day*."""
    return [
        rental
        for rental in rentals
        if rental.vehicle_id == vehicle_id
        and is_active_rental(rental)
        and covers(rental.rental_date, rental.return_date, day)
    ]


def date_has_active_booking(
    vehicle_id: int, day: date, rentals: Iterable[R]
) -> bool:
    """Advisory only; the authoritative check is ``maintenance_overlaps_rental``."""
    return bool(maintenance_overlaps_rental(vehicle_id, calendar_day(day), rentals))


def rental_overlaps_rental(
    vehicle_id: int,
    start: date,
    end: date,
    rentals: Iterable[R],
    exclude_id: Optional[int] = None,
) -> list[R]:
    """Approved rentals on *vehicle_id* sharing at least one day with ``[start, end]``.

    *exclude_id* skips the rental being checked against its own row.
    """
    start, end = calendar_day(start), calendar_day(end)
    return [
        rental
        for rental in rentals
        if rental.vehicle_id == vehicle_id
        and (exclude_id is None or rental.id != exclude_id)
        and RentalStatus(rental.status) in HOLDING_RENTALS
        and calendar_day(rental.rental_date) <= end
        and start <= calendar_day(rental.return_date)
    ]
