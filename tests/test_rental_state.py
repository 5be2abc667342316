"""Unit tests for rental entity state transitions (State Pattern)."""

from datetime import date, datetime

import pytest

from src.domain.entities import Rental
from src.domain.enums import RentalStatus
from src.domain.errors import IllegalTransitionError, ValidationError
from src.domain.rentals import due_for_completion, validate_window


class TestRentalStateMachine:
    def test_initial_status_is_awaiting_approval(self):
        rental = Rental()
        assert rental.status == RentalStatus.AWAITING_APPROVAL

    # ── Valid transitions ─────────────────────────────────────────

    def test_awaiting_approval_to_pending(self):
        rental = Rental(status=RentalStatus.AWAITING_APPROVAL)
        rental.transition_to(RentalStatus.PENDING)
        assert rental.status == RentalStatus.PENDING

    def test_awaiting_approval_to_cancelled(self):
        rental = Rental(status=RentalStatus.AWAITING_APPROVAL)
        rental.transition_to(RentalStatus.CANCELLED)
        assert rental.status == RentalStatus.CANCELLED

    def test_pending_to_ongoing(self):
        rental = Rental(status=RentalStatus.PENDING)
        rental.transition_to(RentalStatus.ONGOING)
        assert rental.status == RentalStatus.ONGOING

    def test_ongoing_to_completed(self):
        rental = Rental(status=RentalStatus.ONGOING)
        rental.transition_to(RentalStatus.COMPLETED)
        assert rental.status == RentalStatus.COMPLETED

    def test_accepts_the_stored_label(self):
        rental = Rental(status="Awaiting Approval")
        rental.transition_to("Pending")
        assert rental.status == RentalStatus.PENDING

    # ── Invalid transitions ───────────────────────────────────────

    def test_pending_to_cancelled_fails(self):
        """Cancellation is only possible before approval."""
        rental = Rental(status=RentalStatus.PENDING)
        with pytest.raises(IllegalTransitionError):
            rental.transition_to(RentalStatus.CANCELLED)

    def test_awaiting_approval_to_ongoing_fails(self):
        rental = Rental(status=RentalStatus.AWAITING_APPROVAL)
        with pytest.raises(IllegalTransitionError):
            rental.transition_to(RentalStatus.ONGOING)

    @pytest.mark.parametrize("terminal", [RentalStatus.COMPLETED, RentalStatus.CANCELLED])
    def test_terminal_states_are_final(self, terminal):
        for target in RentalStatus:
            rental = Rental(status=terminal)
            with pytest.raises(IllegalTransitionError):
                rental.transition_to(target)


class TestValidateWindow:
    def test_same_day_is_valid(self):
        assert validate_window(date(2026, 5, 1), date(2026, 5, 1)) == (
            date(2026, 5, 1),
            date(2026, 5, 1),
        )

    def test_strings_and_datetimes_are_truncated(self):
        assert validate_window("2026-05-01T10:00:00", datetime(2026, 5, 3, 18)) == (
            date(2026, 5, 1),
            date(2026, 5, 3),
        )

    def test_reversed_window_fails(self):
        with pytest.raises(ValidationError):
            validate_window(date(2026, 5, 3), date(2026, 5, 1))

    def test_garbage_fails(self):
        with pytest.raises(ValidationError):
            validate_window("not-a-date", date(2026, 5, 1))


class TestDueForCompletion:
    def ongoing(self, end):
        return Rental(
            rental_date=date(2026, 5, 1), return_date=end, status=RentalStatus.ONGOING
        )

    def test_due_on_return_day(self):
        assert due_for_completion(self.ongoing(date(2026, 5, 10)), date(2026, 5, 10))

    def test_not_due_before_return_day(self):
        assert not due_for_completion(self.ongoing(date(2026, 5, 10)), datetime(2026, 5, 9, 23, 59))

    def test_only_ongoing_rentals_are_due(self):
        rental = Rental(return_date=date(2026, 5, 1), status=RentalStatus.PENDING)
        assert not due_for_completion(rental, date(2026, 5, 20))
