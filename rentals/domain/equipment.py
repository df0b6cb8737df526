"""Equipment aggregate: a rentable asset with availability tracking."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Self

from rentals.domain.errors import (
    EquipmentNotAvailableError,
    EquipmentNotRentedError,
    InvariantViolationError,
)
from rentals.domain.types import EquipmentCondition
from rentals.domain.value_objects import EquipmentId, Money, RentalId, optional_str

MAINTENANCE_INTERVAL_DAYS = 90


@dataclass(frozen=True)
class Equipment:
    """Domain representation of a piece of rentable equipment.

    ``is_available`` is true exactly when no rental holds the equipment.
    Whether its condition allows renting is a separate question, answered
    by ``can_be_rented``.
    """

    id: EquipmentId
    name: str
    description: str
    category: str
    daily_rate: Money
    condition: EquipmentCondition
    is_available: bool
    purchase_date: date
    current_rental_id: RentalId | None = None
    last_maintenance_date: date | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvariantViolationError("Equipment", "name cannot be empty")
        if not isinstance(self.category, str) or not self.category.strip():
            raise InvariantViolationError("Equipment", "category cannot be empty")
        if self.daily_rate.is_zero():
            raise InvariantViolationError("Equipment", "daily rate must be greater than zero")
        if self.is_available != (self.current_rental_id is None):
            raise InvariantViolationError(
                "Equipment", "is_available must be true exactly when no rental is held"
            )

    @classmethod
    def create(
        cls,
        *,
        name: str,
        category: str,
        daily_rate: Money,
        condition: EquipmentCondition,
        purchase_date: date,
        description: str = "",
    ) -> Self:
        if not name or not name.strip():
            raise ValueError("Equipment name cannot be empty")
        if not category or not category.strip():
            raise ValueError("Equipment category cannot be empty")
        if daily_rate.is_zero():
            raise ValueError("Daily rate must be greater than zero")
        return cls(
            id=EquipmentId.generate(),
            name=name.strip(),
            description=description,
            category=category.strip(),
            daily_rate=daily_rate,
            condition=condition,
            is_available=True,
            purchase_date=purchase_date,
        )

    @property
    def can_be_rented(self) -> bool:
        return self.is_available and self.condition.is_rentable

    def calculate_rental_cost(self, days: int) -> Money:
        if days <= 0:
            raise ValueError("Number of days must be positive")
        return self.daily_rate.multiply(days)

    def ensure_rentable(self) -> None:
        """Raise why this equipment cannot go out on a new rental, if it cannot."""
        if not self.is_available:
            raise EquipmentNotAvailableError(str(self.id), "it is currently rented")
        if not self.condition.is_rentable:
            raise EquipmentNotAvailableError(
                str(self.id), f"condition {self.condition.value} does not allow rental"
            )

    def mark_as_rented(self, rental_id: RentalId) -> "Equipment":
        self.ensure_rentable()
        return replace(self, is_available=False, current_rental_id=rental_id)

    def mark_as_returned(self, condition: EquipmentCondition) -> "Equipment":
        if self.is_available:
            raise EquipmentNotRentedError(str(self.id))
        return replace(self, is_available=True, current_rental_id=None, condition=condition)

    def update_condition(self, condition: EquipmentCondition) -> "Equipment":
        return replace(self, condition=condition)

    def update_daily_rate(self, daily_rate: Money) -> "Equipment":
        if daily_rate.is_zero():
            raise ValueError("Daily rate must be greater than zero")
        return replace(self, daily_rate=daily_rate)

    def record_maintenance(self, performed_on: date) -> "Equipment":
        return replace(self, last_maintenance_date=performed_on)

    def needs_maintenance(
        self, now: datetime, interval_days: int = MAINTENANCE_INTERVAL_DAYS
    ) -> bool:
        reference = self.last_maintenance_date or self.purchase_date
        return (now.date() - reference).days > interval_days

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "daily_rate": self.daily_rate.amount,
            "condition": self.condition.value,
            "is_available": self.is_available,
            "current_rental_id": optional_str(self.current_rental_id),
            "purchase_date": self.purchase_date,
            "last_maintenance_date": self.last_maintenance_date,
        }

    @classmethod
    def reconstitute(cls, snapshot: dict[str, Any]) -> Self:
        try:
            rental_id = snapshot["current_rental_id"]
            return cls(
                id=EquipmentId.from_string(snapshot["id"]),
                name=snapshot["name"],
                description=snapshot["description"],
                category=snapshot["category"],
                daily_rate=Money(Decimal(snapshot["daily_rate"])),
                condition=EquipmentCondition(snapshot["condition"]),
                is_available=snapshot["is_available"],
                current_rental_id=RentalId.from_string(rental_id) if rental_id else None,
                purchase_date=snapshot["purchase_date"],
                last_maintenance_date=snapshot["last_maintenance_date"],
            )
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise InvariantViolationError("Equipment", f"unreadable snapshot: {exc!r}") from exc
