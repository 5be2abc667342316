"""Rental window validation and the date-driven completion rule."""

from __future__ import annotations

from datetime import date, datetime

from .dates import calendar_day
from .enums import RentalStatus
from .errors import ValidationError


def validate_window(start, end) -> tuple[date, date]:
    """Return ``(start, end)`` as calendar days; ``start`` must not follow ``end``."""
    if start is None or end is None:
        raise ValidationError("rental_date and return_date are required")
    try:
        start_day, end_day = calendar_day(start), calendar_day(end)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid rental dates: {exc}") from exc
    if start_day > end_day:
        raise ValidationError("rental_date must be on or before return_date")
    return start_day, end_day


def due_for_completion(rental, now: date | datetime) -> bool:
    """ONGOING rentals whose return day has been reached."""
    return (
        RentalStatus(rental.status) == RentalStatus.ONGOING
        and calendar_day(rental.return_date) <= calendar_day(now)
    )
