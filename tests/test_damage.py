"""Unit tests for the DamageAssessment record.

Run with: pytest tests/test_damage.py -v
"""

from dataclasses import replace

import pytest

from rentals.domain import (
    DamageAssessment,
    EquipmentCondition,
    MemberId,
    Money,
    Rental,
)
from rentals.domain.errors import InvalidRentalStateError, InvariantViolationError
from tests.factories import NOW, days, make_equipment, period


def returned_rental(condition_at_start=EquipmentCondition.EXCELLENT) -> Rental:
    rental, _ = Rental.create(
        equipment_id=make_equipment().id,
        member_id=MemberId.generate(),
        period=period(0, 3),
        base_cost=Money.dollars(150),
        condition_at_start=condition_at_start,
        now=NOW,
    )
    returned, _ = rental.return_rental(EquipmentCondition.GOOD, Money.zero(), NOW + days(3))
    return returned


def assess(rental, condition_after, **kwargs) -> DamageAssessment:
    kwargs.setdefault("assessed_by", "Margaret Hamilton")
    return DamageAssessment.for_rental(rental, condition_after, now=NOW + days(4), **kwargs)


class TestDamageAssessmentCreation:
    """Tests for DamageAssessment.for_rental."""

    def test_records_rental_and_conditions(self):
        rental = returned_rental()
        assessment = assess(rental, EquipmentCondition.FAIR, notes="  Scratched casing ")
        assert assessment.rental_id == rental.id
        assert assessment.equipment_id == rental.equipment_id
        assert assessment.condition_before is EquipmentCondition.EXCELLENT
        assert assessment.condition_after is EquipmentCondition.FAIR
        assert assessment.notes == "Scratched casing"
        assert assessment.assessed_at == NOW + days(4)

    @pytest.mark.parametrize(
        ("before", "after", "levels", "fee"),
        [
            (EquipmentCondition.GOOD, EquipmentCondition.EXCELLENT, 0, 0),
            (EquipmentCondition.GOOD, EquipmentCondition.GOOD, 0, 0),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.GOOD, 1, 0),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.FAIR, 2, 50),
            (EquipmentCondition.EXCELLENT, EquipmentCondition.DAMAGED, 4, 150),
        ],
    )
    def test_fee_matches_rental_pricing(self, before, after, levels, fee):
        """Only condition lost past one level of acceptable wear is charged."""
        rental = returned_rental(before)
        assessment = assess(rental, after)
        assert assessment.degradation_levels == levels
        assert assessment.damage_fee == Money.dollars(fee)
        assert assessment.damage_fee == rental.calculate_damage_fee(after)

    def test_wear_is_degradation_without_damage(self):
        assessment = assess(returned_rental(), EquipmentCondition.GOOD)
        assert assessment.has_condition_degraded
        assert not assessment.has_damage

    def test_damage(self):
        assert assess(returned_rental(), EquipmentCondition.POOR).has_damage

    def test_custom_fee_per_level(self):
        assessment = assess(
            returned_rental(), EquipmentCondition.POOR, fee_per_level=Money.dollars(80)
        )
        assert assessment.damage_fee == Money.dollars(160)

    @pytest.mark.parametrize("assessor", ["", "   "])
    def test_assessor_is_required(self, assessor):
        with pytest.raises(ValueError, match="Assessor name cannot be empty"):
            assess(returned_rental(), EquipmentCondition.GOOD, assessed_by=assessor)

    def test_rental_must_be_returned(self):
        rental, _ = Rental.create(
            equipment_id=make_equipment().id,
            member_id=MemberId.generate(),
            period=period(0, 3),
            base_cost=Money.dollars(150),
            condition_at_start=EquipmentCondition.EXCELLENT,
            now=NOW,
        )
        with pytest.raises(InvalidRentalStateError):
            assess(rental, EquipmentCondition.GOOD)


class TestDamageAssessmentSnapshot:
    """Tests for snapshot and reconstitution."""

    def test_snapshot_round_trip(self):
        assessment = assess(returned_rental(), EquipmentCondition.FAIR, notes="Dented")
        assert DamageAssessment.reconstitute(assessment.to_snapshot()) == assessment

    def test_fee_without_degradation_is_rejected(self):
        assessment = assess(returned_rental(), EquipmentCondition.EXCELLENT)
        with pytest.raises(InvariantViolationError):
            replace(assessment, damage_fee=Money.dollars(50))

    def test_reconstitute_rejects_blank_assessor(self):
        snapshot = assess(returned_rental(), EquipmentCondition.GOOD).to_snapshot()
        snapshot["assessed_by"] = None
        with pytest.raises(InvariantViolationError):
            DamageAssessment.reconstitute(snapshot)
