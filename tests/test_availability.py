"""Unit tests for day truncation and the derived availability flag."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.domain.availability import is_available, scheduled_dates
from src.domain.dates import calendar_day, covers, make_clock, today
from src.domain.entities import MaintenanceRecord, Rental
from src.domain.enums import MaintenanceStatus, RentalStatus

NOW = date(2026, 5, 10)


class TestCalendarDay:
    def test_datetime_is_truncated(self):
        assert calendar_day(datetime(2026, 5, 10, 23, 59, 59)) == NOW

    def test_iso_strings(self):
        assert calendar_day("2026-05-10") == NOW
        assert calendar_day("2026-05-10T18:45:00") == NOW

    def test_aware_datetime_keeps_its_own_day(self):
        late = datetime(2026, 5, 10, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert calendar_day(late) == NOW

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            calendar_day(20260510)

    def test_covers_is_inclusive(self):
        assert covers(date(2026, 5, 1), NOW, NOW)
        assert covers(date(2026, 5, 1), NOW, date(2026, 5, 1))
        assert not covers(date(2026, 5, 1), NOW, date(2026, 5, 11))


class TestClock:
    def test_zoned_clock_is_aware(self):
        clock = make_clock("UTC")
        assert clock().tzinfo is not None

    def test_local_clock(self):
        assert today(make_clock()) == date.today()


class TestAvailability:
    def rental(self, status, vehicle_id=1):
        return Rental(
            vehicle_id=vehicle_id,
            rental_date=date(2026, 5, 8),
            return_date=date(2026, 5, 12),
            status=status,
        )

    def maintenance(self, day, status=MaintenanceStatus.SCHEDULED, vehicle_id=1):
        return MaintenanceRecord(vehicle_id=vehicle_id, maintenance_date=day, status=status)

    def test_free_vehicle_is_available(self):
        assert is_available(1, [], [], NOW)

    def test_ongoing_rental_makes_it_unavailable(self):
        assert not is_available(1, [self.rental(RentalStatus.ONGOING)], [], NOW)

    def test_booked_but_unpaid_rental_does_not(self):
        assert is_available(1, [self.rental(RentalStatus.PENDING)], [], NOW)

    def test_maintenance_today_makes_it_unavailable(self):
        assert not is_available(1, [], [self.maintenance(NOW)], NOW)

    def test_cancelled_maintenance_today_does_not(self):
        assert is_available(1, [], [self.maintenance(NOW, MaintenanceStatus.CANCELLED)], NOW)

    def test_future_maintenance_does_not(self):
        assert is_available(1, [], [self.maintenance(date(2026, 5, 11))], NOW)

    def test_other_vehicles_are_ignored(self):
        assert is_available(
            1,
            [self.rental(RentalStatus.ONGOING, vehicle_id=2)],
            [self.maintenance(NOW, vehicle_id=2)],
            NOW,
        )

    def test_scheduled_dates_are_sorted(self):
        rows = [
            self.maintenance(date(2026, 6, 1)),
            self.maintenance(date(2026, 5, 20)),
            self.maintenance(date(2026, 5, 25), MaintenanceStatus.CANCELLED),
        ]
        assert scheduled_dates(1, rows) == [date(2026, 5, 20), date(2026, 6, 1)]
