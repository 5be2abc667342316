"""Unit tests for the conflict resolver (pure functions, no I/O)."""

from datetime import date, datetime

import pytest

from src.domain.conflicts import (
    BLOCKING_MAINTENANCE,
    HOLDING_RENTALS,
    date_has_active_booking,
    maintenance_overlaps_rental,
    rental_overlaps_maintenance,
    rental_overlaps_rental,
)
from src.domain.entities import MaintenanceRecord, Rental
from src.domain.enums import MaintenanceStatus, RentalStatus

V = 7


def rental(start, end, status=RentalStatus.AWAITING_APPROVAL, vehicle_id=V, id=1):
    return Rental(
        id=id, vehicle_id=vehicle_id, customer_id=1,
        rental_date=start, return_date=end, status=status,
    )


def record(day, status=MaintenanceStatus.SCHEDULED, vehicle_id=V, id=1):
    return MaintenanceRecord(
        id=id, vehicle_id=vehicle_id, maintenance_date=day, status=status
    )


class TestRentalOverlapsMaintenance:
    def test_maintenance_inside_window_conflicts(self):
        m = record(date(2026, 5, 20))
        found = rental_overlaps_maintenance(V, date(2026, 5, 18), date(2026, 5, 22), [m])
        assert found == [m]

    @pytest.mark.parametrize("day", [date(2026, 5, 18), date(2026, 5, 22)])
    def test_window_ends_are_inclusive(self, day):
        assert rental_overlaps_maintenance(
            V, date(2026, 5, 18), date(2026, 5, 22), [record(day)]
        )

    @pytest.mark.parametrize("day", [date(2026, 5, 17), date(2026, 5, 23)])
    def test_days_just_outside_do_not_conflict(self, day):
        assert not rental_overlaps_maintenance(
            V, date(2026, 5, 18), date(2026, 5, 22), [record(day)]
        )

    def test_only_scheduled_counts_by_default(self):
        rows = [
            record(date(2026, 5, 20), MaintenanceStatus.CANCELLED, id=1),
            record(date(2026, 5, 20), MaintenanceStatus.COMPLETED, id=2),
            record(date(2026, 5, 20), MaintenanceStatus.ONGOING, id=3),
        ]
        assert rental_overlaps_maintenance(V, date(2026, 5, 18), date(2026, 5, 22), rows) == []

    def test_blocking_statuses_include_ongoing(self):
        ongoing = record(date(2026, 5, 20), MaintenanceStatus.ONGOING)
        found = rental_overlaps_maintenance(
            V, date(2026, 5, 18), date(2026, 5, 22), [ongoing],
            statuses=BLOCKING_MAINTENANCE,
        )
        assert found == [ongoing]

    def test_other_vehicles_are_ignored(self):
        other = record(date(2026, 5, 20), vehicle_id=V + 1)
        assert not rental_overlaps_maintenance(V, date(2026, 5, 18), date(2026, 5, 22), [other])

    def test_single_day_rental(self):
        assert rental_overlaps_maintenance(
            V, date(2026, 5, 20), date(2026, 5, 20), [record(date(2026, 5, 20))]
        )


class TestMaintenanceOverlapsRental:
    def test_active_rental_covering_day_conflicts(self):
        r = rental(date(2026, 5, 1), date(2026, 5, 10), RentalStatus.PENDING)
        assert maintenance_overlaps_rental(V, date(2026, 5, 10), [r]) == [r]

    @pytest.mark.parametrize(
        "status", [RentalStatus.AWAITING_APPROVAL, RentalStatus.PENDING, RentalStatus.ONGOING]
    )
    def test_every_non_terminal_status_blocks(self, status):
        r = rental(date(2026, 5, 1), date(2026, 5, 10), status)
        assert maintenance_overlaps_rental(V, date(2026, 5, 5), [r])

    @pytest.mark.parametrize("status", [RentalStatus.CANCELLED, RentalStatus.COMPLETED])
    def test_terminal_rentals_do_not_block(self, status):
        r = rental(date(2026, 5, 1), date(2026, 5, 10), status)
        assert maintenance_overlaps_rental(V, date(2026, 5, 5), [r]) == []

    def test_returns_every_conflicting_rental(self):
        rows = [
            rental(date(2026, 5, 1), date(2026, 5, 5), id=1),
            rental(date(2026, 5, 5), date(2026, 5, 9), id=2),
            rental(date(2026, 5, 6), date(2026, 5, 9), id=3),
        ]
        assert [r.id for r in maintenance_overlaps_rental(V, date(2026, 5, 5), rows)] == [1, 2]


class TestRentalOverlapsRental:
    def test_approved_rental_sharing_a_day_conflicts(self):
        other = rental(date(2026, 5, 20), date(2026, 5, 24), RentalStatus.PENDING, id=2)
        assert rental_overlaps_rental(V, date(2026, 5, 18), date(2026, 5, 21), [other]) == [other]

    @pytest.mark.parametrize(
        "start, end", [(date(2026, 5, 15), date(2026, 5, 20)), (date(2026, 5, 24), date(2026, 5, 26))]
    )
    def test_both_ends_are_inclusive(self, start, end):
        other = rental(date(2026, 5, 20), date(2026, 5, 24), RentalStatus.ONGOING, id=2)
        assert rental_overlaps_rental(V, start, end, [other]) == [other]

    @pytest.mark.parametrize(
        "start, end", [(date(2026, 5, 15), date(2026, 5, 19)), (date(2026, 5, 25), date(2026, 5, 26))]
    )
    def test_adjacent_windows_do_not_conflict(self, start, end):
        other = rental(date(2026, 5, 20), date(2026, 5, 24), RentalStatus.PENDING, id=2)
        assert rental_overlaps_rental(V, start, end, [other]) == []

    @pytest.mark.parametrize("status", list(RentalStatus))
    def test_only_pending_and_ongoing_hold_the_vehicle(self, status):
        other = rental(date(2026, 5, 20), date(2026, 5, 24), status, id=2)
        found = rental_overlaps_rental(V, date(2026, 5, 21), date(2026, 5, 22), [other])
        assert bool(found) == (status in HOLDING_RENTALS)
        assert HOLDING_RENTALS == {RentalStatus.PENDING, RentalStatus.ONGOING}

    def test_excluded_rental_is_skipped(self):
        own = rental(date(2026, 5, 20), date(2026, 5, 24), RentalStatus.PENDING, id=3)
        assert rental_overlaps_rental(V, date(2026, 5, 20), date(2026, 5, 24), [own], exclude_id=3) == []

    def test_other_vehicles_are_ignored(self):
        other = rental(date(2026, 5, 20), date(2026, 5, 24), RentalStatus.ONGOING, vehicle_id=V + 1)
        assert rental_overlaps_rental(V, date(2026, 5, 20), date(2026, 5, 24), [other]) == []

    def test_datetimes_are_truncated_to_days(self):
        other = rental(date(2026, 5, 20), date(2026, 5, 20), RentalStatus.PENDING, id=2)
        found = rental_overlaps_rental(
            V, datetime(2026, 5, 20, 23, 59), datetime(2026, 5, 21, 8, 0), [other]
        )
        assert found == [other]


class TestDateHasActiveBooking:
    def test_true_when_covered(self):
        r = rental(date(2026, 5, 1), date(2026, 5, 3))
        assert date_has_active_booking(V, date(2026, 5, 2), [r]) is True

    def test_false_when_free(self):
        r = rental(date(2026, 5, 1), date(2026, 5, 3))
        assert date_has_active_booking(V, date(2026, 5, 4), [r]) is False

    def test_accepts_iso_string(self):
        r = rental(date(2026, 5, 1), date(2026, 5, 3))
        assert date_has_active_booking(V, "2026-05-03", [r]) is True
