"""
Maintenance status derivation.

A maintenance record's status is a function of its date and "today":

    maintenance_date >  today  ->  SCHEDULED
    maintenance_date == today  ->  ONGOING
    maintenance_date <  today  ->  COMPLETED

CANCELLED is sticky and is never overwritten.  The only manual edge is
cancellation, which is refused while the record is ONGOING.
"""

from __future__ import annotations

from datetime import date, datetime

from .dates import calendar_day
from .enums import MAINTENANCE_TRANSITIONS, MaintenanceStatus
from .errors import MaintenanceOngoingError


def status_for_day(
    maintenance_date: date | datetime, now: date | datetime
) -> MaintenanceStatus:
    day, current = calendar_day(maintenance_date), calendar_day(now)
    if day > current:
        return MaintenanceStatus.SCHEDULED
    if day == current:
        return MaintenanceStatus.ONGOING
    return MaintenanceStatus.COMPLETED


def derive_status(record, now: date | datetime) -> bool:
    """Re-derive *record.status* for *now*.

    Returns ``True`` when the status changed and the record needs to be
    persisted.  Idempotent for a fixed *now*.
    """
    current = MaintenanceStatus(record.status)
    if current == MaintenanceStatus.CANCELLED:
        return False
    derived = status_for_day(record.maintenance_date, now)
    if derived == current:
        return False
    record.status = derived
    return True


def cancel(record, now: date | datetime) -> bool:
    """Cancel *record* unless it is in progress today.

    Returns ``True`` when the record changed (already-cancelled records
    are left alone).
    """
    derive_status(record, now)
    current = MaintenanceStatus(record.status)
    if current == MaintenanceStatus.CANCELLED:
        return False
    if MaintenanceStatus.CANCELLED not in MAINTENANCE_TRANSITIONS[current]:
        raise MaintenanceOngoingError(
            current,
            MaintenanceStatus.CANCELLED,
            "Maintenance already in progress cannot be cancelled",
        )
    record.status = MaintenanceStatus.CANCELLED
    return True
