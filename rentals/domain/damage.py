"""Damage assessment: the inspection record of a returned rental."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Self

from rentals.domain.errors import InvalidRentalStateError, InvariantViolationError
from rentals.domain.rental import DAMAGE_FEE_PER_LEVEL, Rental
from rentals.domain.types import EquipmentCondition, RentalStatus
from rentals.domain.value_objects import DamageAssessmentId, EquipmentId, Money, RentalId


@dataclass(frozen=True)
class DamageAssessment:
    """Condition of equipment before and after a rental, and what the loss costs.

    The fee follows the rental's damage pricing, so an assessment never
    disagrees with what ``Rental.calculate_damage_fee`` would charge.
    """

    id: DamageAssessmentId
    rental_id: RentalId
    equipment_id: EquipmentId
    condition_before: EquipmentCondition
    condition_after: EquipmentCondition
    damage_fee: Money
    notes: str
    assessed_by: str
    assessed_at: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.assessed_by, str) or not self.assessed_by.strip():
            raise InvariantViolationError("DamageAssessment", "assessor cannot be empty")
        if not isinstance(self.notes, str):
            raise InvariantViolationError("DamageAssessment", "notes must be text")
        if not self.has_condition_degraded and not self.damage_fee.is_zero():
            raise InvariantViolationError(
                "DamageAssessment", "a damage fee needs a drop in condition"
            )

    @classmethod
    def for_rental(
        cls,
        rental: Rental,
        condition_after: EquipmentCondition,
        *,
        assessed_by: str,
        now: datetime,
        notes: str = "",
        fee_per_level: Money = DAMAGE_FEE_PER_LEVEL,
    ) -> Self:
        """Assess a returned rental against the condition it started in.

        Raises:
            ValueError: If ``assessed_by`` is blank.
            InvalidRentalStateError: If the rental has not been returned.
        """
        if not assessed_by or not assessed_by.strip():
            raise ValueError("Assessor name cannot be empty")
        if rental.status is not RentalStatus.RETURNED:
            raise InvalidRentalStateError(
                str(rental.id), rental.status.value, "only returned rentals can be assessed"
            )
        return cls(
            id=DamageAssessmentId.generate(),
            rental_id=rental.id,
            equipment_id=rental.equipment_id,
            condition_before=rental.condition_at_start,
            condition_after=condition_after,
            damage_fee=rental.calculate_damage_fee(condition_after, fee_per_level),
            notes=notes.strip(),
            assessed_by=assessed_by.strip(),
            assessed_at=now,
        )

    @property
    def degradation_levels(self) -> int:
        return self.condition_before.degradation_to(self.condition_after)

    @property
    def has_condition_degraded(self) -> bool:
        return self.degradation_levels > 0

    @property
    def has_damage(self) -> bool:
        """Whether the loss in condition went past acceptable wear."""
        return not self.damage_fee.is_zero()

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "rental_id": str(self.rental_id),
            "equipment_id": str(self.equipment_id),
            "condition_before": self.condition_before.value,
            "condition_after": self.condition_after.value,
            "damage_fee": self.damage_fee.amount,
            "notes": self.notes,
            "assessed_by": self.assessed_by,
            "assessed_at": self.assessed_at,
        }

    @classmethod
    def reconstitute(cls, snapshot: dict[str, Any]) -> Self:
        try:
            return cls(
                id=DamageAssessmentId.from_string(snapshot["id"]),
                rental_id=RentalId.from_string(snapshot["rental_id"]),
                equipment_id=EquipmentId.from_string(snapshot["equipment_id"]),
                condition_before=EquipmentCondition(snapshot["condition_before"]),
                condition_after=EquipmentCondition(snapshot["condition_after"]),
                damage_fee=Money(Decimal(snapshot["damage_fee"])),
                notes=snapshot["notes"],
                assessed_by=snapshot["assessed_by"],
                assessed_at=snapshot["assessed_at"],
            )
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise InvariantViolationError(
                "DamageAssessment", f"unreadable snapshot: {exc!r}"
            ) from exc
