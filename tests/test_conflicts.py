"""Unit tests for booking conflict detection.

Run with: pytest tests/test_conflicts.py -v
"""

import pytest

from rentals.domain import (
    EquipmentCondition,
    EquipmentId,
    MemberId,
    Money,
    Rental,
    Reservation,
    ensure_no_conflicts,
    find_conflicts,
)
from rentals.domain.errors import BookingConflictError
from tests.factories import NOW, period

EQUIPMENT = EquipmentId.generate()


def reservation_for(booking_period, equipment_id=EQUIPMENT) -> Reservation:
    reservation, _ = Reservation.create(
        equipment_id=equipment_id,
        member_id=MemberId.generate(),
        period=booking_period,
        now=NOW,
    )
    return reservation


def rental_for(booking_period, equipment_id=EQUIPMENT) -> Rental:
    rental, _ = Rental.create(
        equipment_id=equipment_id,
        member_id=MemberId.generate(),
        period=booking_period,
        base_cost=Money.dollars(100),
        condition_at_start=EquipmentCondition.GOOD,
        now=NOW,
    )
    return rental


class TestFindConflicts:
    """Tests for find_conflicts."""

    def test_overlapping_reservation_conflicts(self):
        existing = reservation_for(period(5, 3))
        assert find_conflicts(EQUIPMENT, period(6, 3), [existing]) == [existing]

    def test_other_equipment_never_conflicts(self):
        other = reservation_for(period(5, 3), equipment_id=EquipmentId.generate())
        assert find_conflicts(EQUIPMENT, period(5, 3), [other]) == []

    def test_back_to_back_bookings_do_not_conflict(self):
        existing = rental_for(period(0, 3))
        assert find_conflicts(EQUIPMENT, period(3, 3), [existing]) == []

    def test_cancelled_reservation_does_not_conflict(self):
        cancelled, _ = reservation_for(period(5, 3)).cancel(NOW)
        assert find_conflicts(EQUIPMENT, period(5, 3), [cancelled]) == []

    def test_returned_rental_does_not_conflict(self):
        returned, _ = rental_for(period(0, 3)).return_rental(
            EquipmentCondition.GOOD, Money.zero(), NOW
        )
        assert find_conflicts(EQUIPMENT, period(1, 3), [returned]) == []

    def test_overdue_rental_still_conflicts(self):
        overdue, _ = rental_for(period(-5, 3)).mark_as_overdue(Money.dollars(10), NOW)
        assert find_conflicts(EQUIPMENT, period(-3, 3), [overdue]) == [overdue]

    def test_excluded_booking_is_ignored(self):
        rental = rental_for(period(0, 3))
        assert find_conflicts(EQUIPMENT, period(1, 3), [rental], exclude=[rental.id]) == []

    def test_mixed_bookings(self):
        reservation = reservation_for(period(5, 3))
        rental = rental_for(period(0, 6))
        conflicts = find_conflicts(EQUIPMENT, period(4, 2), [reservation, rental])
        assert set(item.id for item in conflicts) == {reservation.id, rental.id}


class TestEnsureNoConflicts:
    """Tests for ensure_no_conflicts."""

    def test_raises_with_conflicting_ids(self):
        existing = reservation_for(period(5, 3))
        with pytest.raises(BookingConflictError) as exc_info:
            ensure_no_conflicts(EQUIPMENT, period(7, 2), [existing])
        assert exc_info.value.conflicting_ids == [str(existing.id)]
        assert exc_info.value.equipment_id == str(EQUIPMENT)

    def test_passes_without_conflicts(self):
        ensure_no_conflicts(EQUIPMENT, period(0, 2), [reservation_for(period(5, 3))])
