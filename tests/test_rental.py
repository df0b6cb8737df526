"""Unit tests for the Rental aggregate and its state machine.

Run with: pytest tests/test_rental.py -v
"""

from dataclasses import replace

import pytest

from rentals.domain import (
    EquipmentCondition,
    EquipmentId,
    MemberId,
    Money,
    Rental,
    RentalCreated,
    RentalOverdue,
    RentalReturned,
    RentalStatus,
)
from rentals.domain.errors import (
    InvalidRentalStateError,
    InvariantViolationError,
    RentalAlreadyReturnedError,
)
from tests.factories import NOW, days, period

LATE_RATE = Money.dollars(10)


def make_rental(
    rental_period=None,
    base_cost: str = "250.00",
    condition: EquipmentCondition = EquipmentCondition.EXCELLENT,
) -> Rental:
    rental, _ = Rental.create(
        equipment_id=EquipmentId.generate(),
        member_id=MemberId.generate(),
        period=rental_period or period(0, 5),
        base_cost=Money.dollars(base_cost),
        condition_at_start=condition,
        now=NOW,
    )
    return rental


class TestRentalCreation:
    """Tests for Rental.create."""

    def test_new_rental_is_active(self):
        rental = make_rental()
        assert rental.status is RentalStatus.ACTIVE
        assert rental.total_cost == rental.base_cost
        assert rental.late_fee.is_zero()

    def test_create_emits_rental_created(self):
        rental, events = Rental.create(
            equipment_id=EquipmentId.generate(),
            member_id=MemberId.generate(),
            period=period(0, 5),
            base_cost=Money.dollars(225),
            condition_at_start=EquipmentCondition.GOOD,
            now=NOW,
        )
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, RentalCreated)
        assert event.rental_id == rental.id
        assert event.total_cost == Money.dollars(225)
        assert event.occurred_at == NOW

    def test_create_rejects_zero_cost(self):
        with pytest.raises(ValueError):
            make_rental(base_cost="0")

    def test_total_must_match_charges(self):
        with pytest.raises(InvariantViolationError):
            replace(make_rental(), total_cost=Money.dollars(1))

    def test_duration_days(self):
        assert make_rental(period(0, 5)).duration_days == 5


class TestRentalOverdue:
    """Tests for overdue detection and late fees."""

    def test_not_overdue_before_end(self):
        rental = make_rental(period(0, 5))
        assert not rental.is_overdue(NOW)
        assert rental.days_overdue(NOW) == 0

    def test_overdue_exactly_at_end(self):
        rental = make_rental(period(-5, 5))
        assert rental.is_overdue(NOW)

    def test_three_days_late_costs_thirty_dollars(self):
        """A rental that ended three days ago at $10/day owes a $30 late fee."""
        rental = make_rental(period(-8, 5))
        overdue, events = rental.mark_as_overdue(LATE_RATE, NOW)
        assert overdue.status is RentalStatus.OVERDUE
        assert overdue.late_fee == Money.dollars(30)
        assert overdue.total_cost == Money.dollars(280)
        assert isinstance(events[0], RentalOverdue)
        assert events[0].days_overdue == 3

    def test_partial_day_late_counts_as_full_day(self):
        rental = make_rental(period(-5.5, 5))
        overdue, _ = rental.mark_as_overdue(LATE_RATE, NOW)
        assert overdue.late_fee == Money.dollars(10)

    def test_cannot_mark_overdue_before_end(self):
        with pytest.raises(InvalidRentalStateError):
            make_rental(period(0, 5)).mark_as_overdue(LATE_RATE, NOW)

    def test_cannot_mark_overdue_twice(self):
        overdue, _ = make_rental(period(-8, 5)).mark_as_overdue(LATE_RATE, NOW)
        with pytest.raises(InvalidRentalStateError):
            overdue.mark_as_overdue(LATE_RATE, NOW + days(1))


class TestRentalDamage:
    """Tests for the damage fee formula."""

    def test_excellent_to_fair_costs_one_level(self):
        """Two levels of degradation with one free level costs $50."""
        rental = make_rental(condition=EquipmentCondition.EXCELLENT)
        assert rental.calculate_damage_fee(EquipmentCondition.FAIR) == Money.dollars(50)

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (EquipmentCondition.EXCELLENT, EquipmentCondition.EXCELLENT, "0"),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.GOOD, "0"),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.POOR, "100"),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.DAMAGED, "150"),
            (EquipmentCondition.GOOD, EquipmentCondition.DAMAGED, "100"),
            (EquipmentCondition.FAIR, EquipmentCondition.EXCELLENT, "0"),
        ],
    )
    def test_damage_fee_formula(self, start, end, expected):
        rental = make_rental(condition=start)
        expected_fee = Money.dollars(50).multiply(max(0, start.rank - end.rank - 1))
        assert rental.calculate_damage_fee(end) == expected_fee == Money.dollars(expected)

    def test_custom_fee_per_level(self):
        rental = make_rental(condition=EquipmentCondition.EXCELLENT)
        fee = rental.calculate_damage_fee(EquipmentCondition.POOR, Money.dollars(20))
        assert fee == Money.dollars(40)


class TestRentalReturn:
    """Tests for returning rentals."""

    def test_on_time_return(self):
        rental = make_rental(period(-4, 5))
        returned, events = rental.return_rental(EquipmentCondition.EXCELLENT, Money.zero(), NOW)
        assert returned.status is RentalStatus.RETURNED
        assert returned.returned_at == NOW
        assert returned.total_cost == Money.dollars(250)
        assert isinstance(events[0], RentalReturned)

    def test_late_return_adds_late_fee(self):
        rental = make_rental(period(-7, 5))
        returned, _ = rental.return_rental(
            EquipmentCondition.EXCELLENT, Money.zero(), NOW, daily_late_fee_rate=LATE_RATE
        )
        assert returned.late_fee == Money.dollars(20)
        assert returned.total_cost == Money.dollars(270)

    def test_return_adds_damage_fee(self):
        rental = make_rental(period(-4, 5))
        returned, events = rental.return_rental(EquipmentCondition.FAIR, Money.dollars(50), NOW)
        assert returned.damage_fee == Money.dollars(50)
        assert returned.total_cost == Money.dollars(300)
        assert events[0].condition_at_return is EquipmentCondition.FAIR

    def test_return_after_overdue_never_lowers_late_fee(self):
        overdue, _ = make_rental(period(-8, 5)).mark_as_overdue(LATE_RATE, NOW)
        returned, _ = overdue.return_rental(
            EquipmentCondition.GOOD, Money.zero(), NOW, daily_late_fee_rate=Money.dollars(1)
        )
        assert returned.late_fee == Money.dollars(30)

    def test_return_after_overdue_recomputes_late_fee(self):
        overdue, _ = make_rental(period(-8, 5)).mark_as_overdue(LATE_RATE, NOW)
        returned, _ = overdue.return_rental(
            EquipmentCondition.GOOD, Money.zero(), NOW + days(2), daily_late_fee_rate=LATE_RATE
        )
        assert returned.late_fee == Money.dollars(50)

    def test_cannot_return_twice(self):
        returned, _ = make_rental().return_rental(EquipmentCondition.GOOD, Money.zero(), NOW)
        with pytest.raises(RentalAlreadyReturnedError):
            returned.return_rental(EquipmentCondition.GOOD, Money.zero(), NOW)

    def test_cannot_return_cancelled_rental(self):
        cancelled, _ = make_rental(period(1, 5)).cancel(NOW)
        with pytest.raises(InvalidRentalStateError):
            cancelled.return_rental(EquipmentCondition.GOOD, Money.zero(), NOW)

    def test_total_cost_never_decreases_until_terminal(self):
        rental = make_rental(period(-8, 5))
        costs = [rental.total_cost]
        rental, _ = rental.mark_as_overdue(LATE_RATE, NOW)
        costs.append(rental.total_cost)
        rental, _ = rental.return_rental(EquipmentCondition.FAIR, Money.dollars(50), NOW)
        costs.append(rental.total_cost)
        assert costs == sorted(costs)


class TestRentalExtension:
    """Tests for extending rentals."""

    def test_extend_period_moves_end_and_adds_cost(self):
        rental = make_rental(period(0, 5))
        extended, events = rental.extend_period(2, Money.dollars(90))
        assert extended.period.end == rental.period.end + days(2)
        assert extended.period.start == rental.period.start
        assert extended.base_cost == Money.dollars(340)
        assert extended.total_cost == Money.dollars(340)
        assert events == []

    def test_extension_period_is_trailing_interval(self):
        rental = make_rental(period(0, 5))
        trailing = rental.extension_period(3)
        assert trailing.start == rental.period.end
        assert trailing.days == 3

    def test_cannot_extend_overdue_rental(self):
        overdue, _ = make_rental(period(-8, 5)).mark_as_overdue(LATE_RATE, NOW)
        with pytest.raises(InvalidRentalStateError):
            overdue.extend_period(1, Money.dollars(50))

    def test_extension_days_must_be_positive(self):
        with pytest.raises(ValueError):
            make_rental().extend_period(0, Money.dollars(50))


class TestRentalCancellation:
    """Tests for cancelling rentals."""

    def test_cancel_before_start(self):
        cancelled, _ = make_rental(period(1, 5)).cancel(NOW)
        assert cancelled.status is RentalStatus.CANCELLED
        assert cancelled.total_cost.is_zero()
        assert cancelled.cancelled_at == NOW
        assert not cancelled.is_blocking

    def test_cannot_cancel_after_start(self):
        with pytest.raises(InvalidRentalStateError):
            make_rental(period(0, 5)).cancel(NOW)

    def test_cannot_cancel_returned_rental(self):
        returned, _ = make_rental(period(1, 5)).return_rental(
            EquipmentCondition.GOOD, Money.zero(), NOW
        )
        with pytest.raises(InvalidRentalStateError):
            returned.cancel(NOW)


class TestRentalSnapshot:
    """Tests for snapshot and reconstitution."""

    def test_round_trip_returned_rental(self):
        rental, _ = make_rental(period(-8, 5)).mark_as_overdue(LATE_RATE, NOW)
        rental, _ = rental.return_rental(EquipmentCondition.POOR, Money.dollars(100), NOW)
        assert Rental.reconstitute(rental.to_snapshot()) == rental

    def test_reconstitute_rejects_inconsistent_total(self):
        snapshot = make_rental().to_snapshot()
        snapshot["total_cost"] = "999.00"
        with pytest.raises(InvariantViolationError):
            Rental.reconstitute(snapshot)

    def test_reconstitute_rejects_returned_without_timestamp(self):
        snapshot = make_rental().to_snapshot()
        snapshot["status"] = RentalStatus.RETURNED.value
        with pytest.raises(InvariantViolationError):
            Rental.reconstitute(snapshot)
