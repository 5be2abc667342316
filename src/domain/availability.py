"""
Vehicle availability projection.

A vehicle is available when it has no ONGOING rental and no maintenance
in progress today.  The flag is recomputed on every read from the rental
and maintenance rows; nothing stores it.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from .enums import MaintenanceStatus, RentalStatus
from .maintenance import status_for_day


def is_available(
    vehicle_id: int,
    rentals: Iterable,
    maintenance: Iterable,
    now: date | datetime,
) -> bool:
    for rental in rentals:
        if (
            rental.vehicle_id == vehicle_id
            and RentalStatus(rental.status) == RentalStatus.ONGOING
        ):
            return False
    for record in maintenance:
        if record.vehicle_id != vehicle_id:
            continue
        if MaintenanceStatus(record.status) == MaintenanceStatus.CANCELLED:
            continue
        # derive on the fly so a stale SCHEDULED row dated today still counts
        if status_for_day(record.maintenance_date, now) == MaintenanceStatus.ONGOING:
            return False
    return True


def scheduled_dates(vehicle_id: int, maintenance: Iterable) -> list[date]:
    return sorted(
        record.maintenance_date
        for record in maintenance
        if record.vehicle_id == vehicle_id
        and MaintenanceStatus(record.status) == MaintenanceStatus.SCHEDULED
    )
