"""Domain events returned by entity operations.

Entities never publish; they hand events back to the caller, which decides
when and how to deliver them once the new state has been saved.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from rentals.domain.types import EquipmentCondition
from rentals.domain.value_objects import (
    DateRange,
    EquipmentId,
    MemberId,
    Money,
    RentalId,
    ReservationId,
)


@dataclass(frozen=True, kw_only=True)
class DomainEvent(ABC):
    """Something that happened to an aggregate."""

    occurred_at: datetime
    event_id: UUID = field(default_factory=uuid4)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    @property
    @abstractmethod
    def aggregate_id(self) -> str:
        """ID of the aggregate the event belongs to."""

    def to_payload(self) -> dict[str, Any]:
        """Flatten the event into primitives for logging and transport."""
        payload: dict[str, Any] = {
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
        }
        for name, value in vars(self).items():
            payload[name] = _primitive(value)
        return payload


def _primitive(value: Any) -> Any:
    if isinstance(value, Money):
        return str(value.amount)
    if isinstance(value, DateRange):
        return {"start": value.start.isoformat(), "end": value.end.isoformat()}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, EquipmentCondition):
        return value.value
    if isinstance(value, (UUID, EquipmentId, MemberId, RentalId, ReservationId)):
        return str(value)
    return value


@dataclass(frozen=True, kw_only=True)
class RentalCreated(DomainEvent):
    rental_id: RentalId
    member_id: MemberId
    equipment_id: EquipmentId
    period: DateRange
    total_cost: Money

    @property
    def aggregate_id(self) -> str:
        return str(self.rental_id)


@dataclass(frozen=True, kw_only=True)
class RentalReturned(DomainEvent):
    rental_id: RentalId
    member_id: MemberId
    equipment_id: EquipmentId
    returned_at: datetime
    condition_at_return: EquipmentCondition
    late_fee: Money
    damage_fee: Money
    total_cost: Money

    @property
    def aggregate_id(self) -> str:
        return str(self.rental_id)


@dataclass(frozen=True, kw_only=True)
class RentalOverdue(DomainEvent):
    rental_id: RentalId
    member_id: MemberId
    equipment_id: EquipmentId
    days_overdue: int
    late_fee: Money

    @property
    def aggregate_id(self) -> str:
        return str(self.rental_id)


@dataclass(frozen=True, kw_only=True)
class ReservationCreated(DomainEvent):
    reservation_id: ReservationId
    member_id: MemberId
    equipment_id: EquipmentId
    period: DateRange

    @property
    def aggregate_id(self) -> str:
        return str(self.reservation_id)


@dataclass(frozen=True, kw_only=True)
class ReservationCancelled(DomainEvent):
    reservation_id: ReservationId
    member_id: MemberId
    equipment_id: EquipmentId
    reason: str | None = None

    @property
    def aggregate_id(self) -> str:
        return str(self.reservation_id)
