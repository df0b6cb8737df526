"""Unit tests for the Equipment aggregate.

Run with: pytest tests/test_equipment.py -v
"""

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from rentals.domain import Equipment, EquipmentCondition, Money, RentalId
from rentals.domain.errors import (
    EquipmentNotAvailableError,
    EquipmentNotRentedError,
    InvariantViolationError,
)
from tests.factories import make_equipment


class TestEquipmentCreation:
    """Tests for Equipment.create."""

    def test_new_equipment_is_available(self):
        """Freshly created equipment is available and holds no rental."""
        equipment = make_equipment()
        assert equipment.is_available
        assert equipment.current_rental_id is None

    def test_create_strips_name(self):
        assert make_equipment(name="  Ladder ").name == "Ladder"

    def test_create_rejects_blank_name(self):
        with pytest.raises(ValueError):
            make_equipment(name="   ")

    def test_create_rejects_blank_category(self):
        with pytest.raises(ValueError):
            make_equipment(category="")

    def test_create_rejects_zero_rate(self):
        with pytest.raises(ValueError):
            make_equipment(daily_rate="0")

    def test_available_without_rental_id_is_enforced(self):
        """is_available must be true exactly when no rental holds the equipment."""
        equipment = make_equipment()
        with pytest.raises(InvariantViolationError):
            replace(equipment, is_available=False)
        with pytest.raises(InvariantViolationError):
            replace(equipment, current_rental_id=RentalId.generate())


class TestEquipmentRenting:
    """Tests for renting and returning equipment."""

    def test_mark_as_rented(self):
        rental_id = RentalId.generate()
        rented = make_equipment().mark_as_rented(rental_id)
        assert not rented.is_available
        assert rented.current_rental_id == rental_id

    def test_mark_as_rented_does_not_change_original(self):
        equipment = make_equipment()
        equipment.mark_as_rented(RentalId.generate())
        assert equipment.is_available

    def test_cannot_rent_twice(self):
        rented = make_equipment().mark_as_rented(RentalId.generate())
        with pytest.raises(EquipmentNotAvailableError):
            rented.mark_as_rented(RentalId.generate())

    @pytest.mark.parametrize("condition", [EquipmentCondition.POOR, EquipmentCondition.DAMAGED])
    def test_cannot_rent_in_unrentable_condition(self, condition):
        equipment = make_equipment(condition=condition)
        assert not equipment.can_be_rented
        with pytest.raises(EquipmentNotAvailableError):
            equipment.mark_as_rented(RentalId.generate())

    def test_mark_as_returned_records_condition(self):
        rented = make_equipment().mark_as_rented(RentalId.generate())
        returned = rented.mark_as_returned(EquipmentCondition.GOOD)
        assert returned.is_available
        assert returned.current_rental_id is None
        assert returned.condition is EquipmentCondition.GOOD

    def test_cannot_return_equipment_that_is_not_rented(self):
        with pytest.raises(EquipmentNotRentedError):
            make_equipment().mark_as_returned(EquipmentCondition.GOOD)

    def test_ensure_rentable(self):
        make_equipment(condition=EquipmentCondition.FAIR).ensure_rentable()
        with pytest.raises(EquipmentNotAvailableError):
            make_equipment(condition=EquipmentCondition.POOR).ensure_rentable()

    def test_rental_cost(self):
        assert make_equipment(daily_rate="12.50").calculate_rental_cost(3) == Money.dollars("37.50")

    def test_rental_cost_rejects_non_positive_days(self):
        with pytest.raises(ValueError):
            make_equipment().calculate_rental_cost(0)


class TestEquipmentUpkeep:
    """Tests for condition, rate and maintenance updates."""

    def test_update_daily_rate(self):
        updated = make_equipment().update_daily_rate(Money.dollars(75))
        assert updated.daily_rate == Money.dollars(75)

    def test_update_daily_rate_rejects_zero(self):
        with pytest.raises(ValueError):
            make_equipment().update_daily_rate(Money.zero())

    def test_update_condition(self):
        updated = make_equipment().update_condition(EquipmentCondition.DAMAGED)
        assert updated.condition.needs_repair
        assert not updated.can_be_rented

    def test_needs_maintenance_counts_from_purchase(self):
        equipment = make_equipment()  # purchased 2025-01-15
        assert not equipment.needs_maintenance(datetime(2025, 4, 1, tzinfo=timezone.utc))
        assert equipment.needs_maintenance(datetime(2025, 5, 1, tzinfo=timezone.utc))

    def test_maintenance_resets_interval(self):
        serviced = make_equipment().record_maintenance(date(2025, 4, 20))
        assert not serviced.needs_maintenance(datetime(2025, 5, 1, tzinfo=timezone.utc))

    def test_custom_maintenance_interval(self):
        equipment = make_equipment()
        assert equipment.needs_maintenance(datetime(2025, 2, 20, tzinfo=timezone.utc), 30)


class TestEquipmentSnapshot:
    """Tests for snapshot and reconstitution."""

    def test_reconstitute_restores_equal_entity(self):
        equipment = make_equipment().mark_as_rented(RentalId.generate())
        assert Equipment.reconstitute(equipment.to_snapshot()) == equipment

    def test_reconstitute_revalidates_invariants(self):
        snapshot = make_equipment().to_snapshot()
        snapshot["is_available"] = False
        with pytest.raises(InvariantViolationError):
            Equipment.reconstitute(snapshot)

    def test_reconstitute_rejects_unreadable_snapshot(self):
        snapshot = make_equipment().to_snapshot()
        snapshot["condition"] = "SHINY"
        with pytest.raises(InvariantViolationError):
            Equipment.reconstitute(snapshot)

    @pytest.mark.parametrize("field", ["name", "category"])
    def test_reconstitute_rejects_non_text_fields(self, field):
        snapshot = make_equipment().to_snapshot()
        snapshot[field] = None
        with pytest.raises(InvariantViolationError):
            Equipment.reconstitute(snapshot)

    def test_reconstitute_rejects_non_string_id(self):
        snapshot = make_equipment().to_snapshot()
        snapshot["id"] = 42
        with pytest.raises(InvariantViolationError):
            Equipment.reconstitute(snapshot)
