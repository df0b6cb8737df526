"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar, Self
from uuid import UUID, uuid4

from django.utils.timezone import is_aware

CENT = Decimal("0.01")
ONE_DAY = timedelta(days=1)


def _ceil_days(delta: timedelta) -> int:
    return -(-delta // ONE_DAY)


@dataclass(frozen=True)
class Identifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EquipmentId(Identifier):
    """Unique identifier for a piece of Equipment."""


@dataclass(frozen=True)
class MemberId(Identifier):
    """Unique identifier for a Member."""


@dataclass(frozen=True)
class RentalId(Identifier):
    """Unique identifier for a Rental."""


@dataclass(frozen=True)
class ReservationId(Identifier):
    """Unique identifier for a Reservation."""


@dataclass(frozen=True)
class DamageAssessmentId(Identifier):
    """Unique identifier for a DamageAssessment."""


@dataclass(frozen=True, order=True)
class Money:
    """Non-negative amount of money held as an exact Decimal in cents.

    Arithmetic never goes through binary floats, so add and subtract are
    exact and associative. Multiplication rounds half-up to the cent.
    """

    amount: Decimal
    CURRENCY: ClassVar[str] = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise TypeError("Money amount must be a Decimal")
        if not self.amount.is_finite():
            raise ValueError("Money amount must be finite")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        if self.amount != self.amount.quantize(CENT):
            raise ValueError("Money amount must have at most 2 decimal places")
        object.__setattr__(self, "amount", self.amount.quantize(CENT))

    @classmethod
    def dollars(cls, amount: int | str | Decimal) -> Self:
        if isinstance(amount, (float, bool)):
            raise TypeError("Money cannot be built from a float or bool")
        return cls(amount=Decimal(amount))

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0.00"))

    def add(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def subtract(self, other: "Money") -> "Money":
        if other.amount > self.amount:
            raise ValueError(f"Cannot subtract {other} from {self}")
        return Money(self.amount - other.amount)

    def multiply(self, factor: int | Decimal) -> "Money":
        if isinstance(factor, (float, bool)):
            raise TypeError("Money can only be multiplied by an int or Decimal")
        product = (self.amount * Decimal(factor)).quantize(CENT, rounding=ROUND_HALF_UP)
        return Money(product)

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"${self.amount:.2f}"


@dataclass(frozen=True)
class DateRange:
    """Half-open interval ``[start, end)`` between two instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not (is_aware(self.start) and is_aware(self.end)):
            raise ValueError("Invalid date range: start and end must be timezone-aware")
        if self.start >= self.end:
            raise ValueError("Invalid date range: start must be before end")

    def overlaps(self, other: "DateRange") -> bool:
        # A range ending exactly when the other starts does not overlap.
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def has_started(self, now: datetime) -> bool:
        return self.start <= now

    def has_ended(self, now: datetime) -> bool:
        return self.end <= now

    def is_active(self, now: datetime) -> bool:
        return self.has_started(now) and not self.has_ended(now)

    @property
    def days(self) -> int:
        """Rental days in the range; any partial day counts as a full one."""
        return _ceil_days(self.end - self.start)

    def days_until_end(self, now: datetime) -> int:
        """Days left until ``end``, rounded up. Negative once ``end`` has passed."""
        return _ceil_days(self.end - now)

    def days_past_end(self, now: datetime) -> int:
        """Started days elapsed since ``end``, or 0 if the range has not ended."""
        if not self.has_ended(now):
            return 0
        return _ceil_days(now - self.end)

    def extend_by(self, days: int) -> "DateRange":
        if days <= 0:
            raise ValueError("Extension days must be positive")
        return DateRange(start=self.start, end=self.end + timedelta(days=days))

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


def optional_str(value: object | None) -> str | None:
    """Render an optional value object for a snapshot."""
    return None if value is None else str(value)
