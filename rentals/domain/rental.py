"""Rental aggregate: the lifecycle and pricing of one booking.

State machine::

    ACTIVE ──> OVERDUE ──> RETURNED
      │  └────────────────> RETURNED
      └──> CANCELLED

Every operation returns ``(rental, events)``: the new rental state and the
domain events the caller should publish once that state is saved.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Self

from rentals.domain.errors import (
    InvalidRentalStateError,
    InvariantViolationError,
    RentalAlreadyReturnedError,
)
from rentals.domain.events import DomainEvent, RentalCreated, RentalOverdue, RentalReturned
from rentals.domain.types import EquipmentCondition, RentalStatus
from rentals.domain.value_objects import (
    DateRange,
    EquipmentId,
    MemberId,
    Money,
    RentalId,
)

DEFAULT_DAILY_LATE_FEE = Money.dollars(10)
DAMAGE_FEE_PER_LEVEL = Money.dollars(50)

# Condition levels a rental may lose before a damage fee applies.
ACCEPTABLE_WEAR_LEVELS = 1

RentalOutcome = tuple["Rental", list[DomainEvent]]


@dataclass(frozen=True)
class Rental:
    """Domain representation of a Rental.

    ``base_cost`` is the discounted booking cost plus any paid extensions.
    Outside of cancellation, ``total_cost`` is always
    ``base_cost + late_fee + damage_fee``; a cancelled rental costs nothing.
    """

    id: RentalId
    equipment_id: EquipmentId
    member_id: MemberId
    period: DateRange
    status: RentalStatus
    base_cost: Money
    total_cost: Money
    condition_at_start: EquipmentCondition
    created_at: datetime
    late_fee: Money = Money.zero()
    damage_fee: Money = Money.zero()
    condition_at_return: EquipmentCondition | None = None
    returned_at: datetime | None = None
    cancelled_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.base_cost.is_zero():
            self._violation("base cost must be greater than zero")
        if self.status is RentalStatus.CANCELLED:
            if not self.total_cost.is_zero():
                self._violation("a cancelled rental cannot carry a cost")
            if self.cancelled_at is None:
                self._violation("a cancelled rental needs cancelled_at")
        else:
            if self.total_cost != self._charges():
                self._violation("total cost must equal base cost plus fees")
            if self.cancelled_at is not None:
                self._violation("only a cancelled rental has cancelled_at")

        returned = self.status is RentalStatus.RETURNED
        if returned != (self.returned_at is not None):
            self._violation("returned_at is set exactly when the rental is returned")
        if returned != (self.condition_at_return is not None):
            self._violation("condition_at_return is set exactly when the rental is returned")
        if not returned and not self.damage_fee.is_zero():
            self._violation("only a returned rental carries a damage fee")
        if self.status is RentalStatus.ACTIVE and not self.late_fee.is_zero():
            self._violation("an active rental carries no late fee")

    def _violation(self, reason: str) -> None:
        raise InvariantViolationError("Rental", reason)

    def _charges(self) -> Money:
        return self.base_cost.add(self.late_fee).add(self.damage_fee)

    @classmethod
    def create(
        cls,
        *,
        equipment_id: EquipmentId,
        member_id: MemberId,
        period: DateRange,
        base_cost: Money,
        condition_at_start: EquipmentCondition,
        now: datetime,
    ) -> tuple[Self, list[DomainEvent]]:
        if base_cost.is_zero():
            raise ValueError("Rental base cost must be greater than zero")
        rental = cls(
            id=RentalId.generate(),
            equipment_id=equipment_id,
            member_id=member_id,
            period=period,
            status=RentalStatus.ACTIVE,
            base_cost=base_cost,
            total_cost=base_cost,
            condition_at_start=condition_at_start,
            created_at=now,
        )
        event = RentalCreated(
            occurred_at=now,
            rental_id=rental.id,
            member_id=member_id,
            equipment_id=equipment_id,
            period=period,
            total_cost=rental.total_cost,
        )
        return rental, [event]

    @property
    def duration_days(self) -> int:
        return self.period.days

    @property
    def is_blocking(self) -> bool:
        """Whether this rental still holds its equipment for its period."""
        return self.status.is_in_possession

    def is_overdue(self, now: datetime) -> bool:
        return self.status.is_in_possession and self.period.has_ended(now)

    def days_overdue(self, now: datetime) -> int:
        return self.period.days_past_end(now) if self.status.is_in_possession else 0

    def calculate_damage_fee(
        self,
        condition_at_return: EquipmentCondition,
        fee_per_level: Money = DAMAGE_FEE_PER_LEVEL,
    ) -> Money:
        """Fee for condition lost during the rental.

        The first level of degradation is acceptable wear; each level past it
        costs ``fee_per_level``. Improvements cost nothing.
        """
        degradation = self.condition_at_start.degradation_to(condition_at_return)
        return fee_per_level.multiply(max(0, degradation - ACCEPTABLE_WEAR_LEVELS))

    def mark_as_overdue(self, daily_late_fee_rate: Money, now: datetime) -> RentalOutcome:
        if self.status is not RentalStatus.ACTIVE:
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "only active rentals can become overdue"
            )
        if not self.is_overdue(now):
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "rental period has not ended yet"
            )
        days = self.period.days_past_end(now)
        late_fee = daily_late_fee_rate.multiply(days)
        rental = replace(
            self,
            status=RentalStatus.OVERDUE,
            late_fee=late_fee,
            total_cost=self.base_cost.add(late_fee).add(self.damage_fee),
        )
        event = RentalOverdue(
            occurred_at=now,
            rental_id=self.id,
            member_id=self.member_id,
            equipment_id=self.equipment_id,
            days_overdue=days,
            late_fee=late_fee,
        )
        return rental, [event]

    def return_rental(
        self,
        condition_at_return: EquipmentCondition,
        damage_fee: Money,
        now: datetime,
        daily_late_fee_rate: Money = DEFAULT_DAILY_LATE_FEE,
    ) -> RentalOutcome:
        if self.status is RentalStatus.RETURNED:
            raise RentalAlreadyReturnedError(str(self.id))
        if not self.status.can_transition_to(RentalStatus.RETURNED):
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "only active or overdue rentals can be returned"
            )
        # Late fees are recomputed as of the return, never lowered.
        late_fee = max(self.late_fee, daily_late_fee_rate.multiply(self.days_overdue(now)))
        rental = replace(
            self,
            status=RentalStatus.RETURNED,
            late_fee=late_fee,
            damage_fee=damage_fee,
            total_cost=self.base_cost.add(late_fee).add(damage_fee),
            condition_at_return=condition_at_return,
            returned_at=now,
        )
        event = RentalReturned(
            occurred_at=now,
            rental_id=self.id,
            member_id=self.member_id,
            equipment_id=self.equipment_id,
            returned_at=now,
            condition_at_return=condition_at_return,
            late_fee=late_fee,
            damage_fee=damage_fee,
            total_cost=rental.total_cost,
        )
        return rental, [event]

    def extension_period(self, additional_days: int) -> DateRange:
        """The trailing interval an extension would add to the rental."""
        if additional_days <= 0:
            raise ValueError("Extension days must be positive")
        return DateRange(
            start=self.period.end,
            end=self.period.end + timedelta(days=additional_days),
        )

    def extend_period(self, additional_days: int, additional_cost: Money) -> RentalOutcome:
        if self.status is not RentalStatus.ACTIVE:
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "only active rentals can be extended"
            )
        base_cost = self.base_cost.add(additional_cost)
        rental = replace(
            self,
            period=self.period.extend_by(additional_days),
            base_cost=base_cost,
            total_cost=base_cost.add(self.late_fee).add(self.damage_fee),
        )
        return rental, []

    def cancel(self, now: datetime) -> RentalOutcome:
        """Cancel a rental that has not been used yet.

        Only an ACTIVE rental whose period has not started can be cancelled;
        once the equipment may have been used, it has to be returned instead.
        """
        if self.status is not RentalStatus.ACTIVE:
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "only active rentals can be cancelled"
            )
        if self.period.has_started(now):
            raise InvalidRentalStateError(
                str(self.id), self.status.value, "rental period has already started"
            )
        rental = replace(
            self,
            status=RentalStatus.CANCELLED,
            total_cost=Money.zero(),
            cancelled_at=now,
        )
        return rental, []

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "equipment_id": str(self.equipment_id),
            "member_id": str(self.member_id),
            "period_start": self.period.start,
            "period_end": self.period.end,
            "status": self.status.value,
            "base_cost": self.base_cost.amount,
            "late_fee": self.late_fee.amount,
            "damage_fee": self.damage_fee.amount,
            "total_cost": self.total_cost.amount,
            "condition_at_start": self.condition_at_start.value,
            "condition_at_return": (
                self.condition_at_return.value if self.condition_at_return else None
            ),
            "created_at": self.created_at,
            "returned_at": self.returned_at,
            "cancelled_at": self.cancelled_at,
        }

    @classmethod
    def reconstitute(cls, snapshot: dict[str, Any]) -> Self:
        try:
            condition_at_return = snapshot["condition_at_return"]
            return cls(
                id=RentalId.from_string(snapshot["id"]),
                equipment_id=EquipmentId.from_string(snapshot["equipment_id"]),
                member_id=MemberId.from_string(snapshot["member_id"]),
                period=DateRange(start=snapshot["period_start"], end=snapshot["period_end"]),
                status=RentalStatus(snapshot["status"]),
                base_cost=Money(Decimal(snapshot["base_cost"])),
                late_fee=Money(Decimal(snapshot["late_fee"])),
                damage_fee=Money(Decimal(snapshot["damage_fee"])),
                total_cost=Money(Decimal(snapshot["total_cost"])),
                condition_at_start=EquipmentCondition(snapshot["condition_at_start"]),
                condition_at_return=(
                    EquipmentCondition(condition_at_return) if condition_at_return else None
                ),
                created_at=snapshot["created_at"],
                returned_at=snapshot["returned_at"],
                cancelled_at=snapshot["cancelled_at"],
            )
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise InvariantViolationError("Rental", f"unreadable snapshot: {exc!r}") from exc
