"""Reservation aggregate: a member's intent to rent equipment later.

State machine::

    PENDING ──> CONFIRMED ──> FULFILLED
       │            ├───────> EXPIRED
       └────────────┴───────> CANCELLED

Turning a fulfilled reservation into a rental is the reservation service's
job; this entity only tracks its own lifecycle.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Self

from rentals.domain.errors import (
    InvalidReservationStateError,
    InvariantViolationError,
    ReservationAlreadyCancelledError,
)
from rentals.domain.events import DomainEvent, ReservationCancelled, ReservationCreated
from rentals.domain.types import ReservationStatus
from rentals.domain.value_objects import DateRange, EquipmentId, MemberId, ReservationId

ReservationOutcome = tuple["Reservation", list[DomainEvent]]

_CONFIRMED_STATES = frozenset(
    {ReservationStatus.CONFIRMED, ReservationStatus.FULFILLED, ReservationStatus.EXPIRED}
)


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation."""

    id: ReservationId
    equipment_id: EquipmentId
    member_id: MemberId
    period: DateRange
    status: ReservationStatus
    created_at: datetime
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    fulfilled_at: datetime | None = None
    expired_at: datetime | None = None
    cancellation_reason: str | None = None

    def __post_init__(self) -> None:
        if self.status in _CONFIRMED_STATES and self.confirmed_at is None:
            self._violation(f"a {self.status.value} reservation needs confirmed_at")
        if self.status is ReservationStatus.PENDING and self.confirmed_at is not None:
            self._violation("a pending reservation cannot have confirmed_at")
        self._check_timestamp(ReservationStatus.CANCELLED, self.cancelled_at, "cancelled_at")
        self._check_timestamp(ReservationStatus.FULFILLED, self.fulfilled_at, "fulfilled_at")
        self._check_timestamp(ReservationStatus.EXPIRED, self.expired_at, "expired_at")
        if self.cancellation_reason and self.status is not ReservationStatus.CANCELLED:
            self._violation("only a cancelled reservation has a cancellation reason")

    def _check_timestamp(
        self, status: ReservationStatus, value: datetime | None, name: str
    ) -> None:
        if (self.status is status) != (value is not None):
            self._violation(f"{name} is set exactly when the reservation is {status.value}")

    def _violation(self, reason: str) -> None:
        raise InvariantViolationError("Reservation", reason)

    def _invalid(self, reason: str) -> InvalidReservationStateError:
        return InvalidReservationStateError(str(self.id), self.status.value, reason)

    @classmethod
    def create(
        cls,
        *,
        equipment_id: EquipmentId,
        member_id: MemberId,
        period: DateRange,
        now: datetime,
    ) -> tuple[Self, list[DomainEvent]]:
        if period.has_started(now):
            raise InvalidReservationStateError(
                "new", ReservationStatus.PENDING.value, "reservation period must be in the future"
            )
        reservation = cls(
            id=ReservationId.generate(),
            equipment_id=equipment_id,
            member_id=member_id,
            period=period,
            status=ReservationStatus.PENDING,
            created_at=now,
        )
        event = ReservationCreated(
            occurred_at=now,
            reservation_id=reservation.id,
            member_id=member_id,
            equipment_id=equipment_id,
            period=period,
        )
        return reservation, [event]

    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_blocking(self) -> bool:
        """Whether this reservation still holds its equipment for its period."""
        return self.is_active()

    def is_ready_to_fulfill(self, now: datetime) -> bool:
        return self.status is ReservationStatus.CONFIRMED and self.period.is_active(now)

    def confirm(self, now: datetime) -> ReservationOutcome:
        if self.status is not ReservationStatus.PENDING:
            raise self._invalid("only pending reservations can be confirmed")
        if self.period.has_started(now):
            raise self._invalid("reservation period has already started")
        return replace(self, status=ReservationStatus.CONFIRMED, confirmed_at=now), []

    def cancel(self, now: datetime, reason: str | None = None) -> ReservationOutcome:
        if self.status is ReservationStatus.CANCELLED:
            raise ReservationAlreadyCancelledError(str(self.id))
        if not self.status.can_transition_to(ReservationStatus.CANCELLED):
            raise self._invalid("only pending or confirmed reservations can be cancelled")
        reservation = replace(
            self,
            status=ReservationStatus.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
        )
        event = ReservationCancelled(
            occurred_at=now,
            reservation_id=self.id,
            member_id=self.member_id,
            equipment_id=self.equipment_id,
            reason=reason,
        )
        return reservation, [event]

    def fulfill(self, now: datetime) -> ReservationOutcome:
        if self.status is not ReservationStatus.CONFIRMED:
            raise self._invalid("only confirmed reservations can be fulfilled")
        if not self.period.has_started(now):
            raise self._invalid("cannot fulfill a reservation before its start")
        if self.period.has_ended(now):
            raise self._invalid("reservation period has already ended")
        return replace(self, status=ReservationStatus.FULFILLED, fulfilled_at=now), []

    def mark_as_expired(self, now: datetime) -> ReservationOutcome:
        if self.status is not ReservationStatus.CONFIRMED:
            raise self._invalid("only confirmed reservations can expire")
        if not self.period.has_ended(now):
            raise self._invalid("reservation period has not ended yet")
        return replace(self, status=ReservationStatus.EXPIRED, expired_at=now), []

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "equipment_id": str(self.equipment_id),
            "member_id": str(self.member_id),
            "period_start": self.period.start,
            "period_end": self.period.end,
            "status": self.status.value,
            "created_at": self.created_at,
            "confirmed_at": self.confirmed_at,
            "cancelled_at": self.cancelled_at,
            "fulfilled_at": self.fulfilled_at,
            "expired_at": self.expired_at,
            "cancellation_reason": self.cancellation_reason,
        }

    @classmethod
    def reconstitute(cls, snapshot: dict[str, Any]) -> Self:
        try:
            return cls(
                id=ReservationId.from_string(snapshot["id"]),
                equipment_id=EquipmentId.from_string(snapshot["equipment_id"]),
                member_id=MemberId.from_string(snapshot["member_id"]),
                period=DateRange(start=snapshot["period_start"], end=snapshot["period_end"]),
                status=ReservationStatus(snapshot["status"]),
                created_at=snapshot["created_at"],
                confirmed_at=snapshot["confirmed_at"],
                cancelled_at=snapshot["cancelled_at"],
                fulfilled_at=snapshot["fulfilled_at"],
                expired_at=snapshot["expired_at"],
                cancellation_reason=snapshot["cancellation_reason"],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InvariantViolationError("Reservation", f"unreadable snapshot: {exc!r}") from exc
