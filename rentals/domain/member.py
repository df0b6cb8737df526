"""Member aggregate: a renter account with tier-based rules."""

import re
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Self

from rentals.domain.errors import (
    InvariantViolationError,
    MemberHasActiveRentalsError,
    MemberInactiveError,
    RentalLimitExceededError,
    RentalPeriodExceededError,
)
from rentals.domain.types import MembershipTier
from rentals.domain.value_objects import DateRange, MemberId, Money

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class Member:
    """Domain representation of a Member.

    Email uniqueness across members is the member store's job.
    """

    id: MemberId
    name: str
    email: str
    tier: MembershipTier
    join_date: date
    is_active: bool = True
    active_rental_count: int = 0
    total_rentals: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvariantViolationError("Member", "name cannot be empty")
        if not isinstance(self.email, str) or not EMAIL_PATTERN.match(self.email):
            raise InvariantViolationError("Member", "email is not valid")
        if self.active_rental_count < 0:
            raise InvariantViolationError("Member", "active rental count cannot be negative")
        if self.total_rentals < self.active_rental_count:
            raise InvariantViolationError(
                "Member", "total rentals cannot be lower than active rentals"
            )

    @classmethod
    def create(
        cls,
        *,
        name: str,
        email: str,
        join_date: date,
        tier: MembershipTier = MembershipTier.BASIC,
    ) -> Self:
        if not name or not name.strip():
            raise ValueError("Member name cannot be empty")
        if not email or not EMAIL_PATTERN.match(email):
            raise ValueError("Invalid email address")
        return cls(
            id=MemberId.generate(),
            name=name.strip(),
            email=email.lower(),
            tier=tier,
            join_date=join_date,
        )

    @property
    def max_rental_days(self) -> int:
        return self.tier.policy.max_rental_days

    @property
    def max_concurrent_rentals(self) -> int:
        return self.tier.policy.max_concurrent_rentals

    @property
    def discount_rate(self) -> Decimal:
        return self.tier.policy.discount_rate

    def can_rent(self) -> bool:
        return self.is_active and self.active_rental_count < self.max_concurrent_rentals

    def ensure_can_rent(self) -> None:
        """Raise the specific reason this member cannot take another rental."""
        if not self.is_active:
            raise MemberInactiveError(str(self.id))
        if self.active_rental_count >= self.max_concurrent_rentals:
            raise RentalLimitExceededError(
                str(self.id), self.active_rental_count, self.max_concurrent_rentals
            )

    def ensure_period_allowed(self, period: DateRange) -> None:
        if period.days > self.max_rental_days:
            raise RentalPeriodExceededError(str(self.id), period.days, self.max_rental_days)

    def apply_discount(self, cost: Money) -> Money:
        if self.discount_rate == 0:
            return cost
        return cost.multiply(Decimal(1) - self.discount_rate)

    def increment_active_rentals(self) -> "Member":
        self.ensure_can_rent()
        return replace(
            self,
            active_rental_count=self.active_rental_count + 1,
            total_rentals=self.total_rentals + 1,
        )

    def decrement_active_rentals(self) -> "Member":
        return replace(self, active_rental_count=max(0, self.active_rental_count - 1))

    def upgrade_tier(self, tier: MembershipTier) -> "Member":
        return replace(self, tier=tier)

    def deactivate(self) -> "Member":
        if self.active_rental_count > 0:
            raise MemberHasActiveRentalsError(str(self.id), self.active_rental_count)
        return replace(self, is_active=False)

    def reactivate(self) -> "Member":
        return replace(self, is_active=True)

    def update_name(self, name: str) -> "Member":
        if not name or not name.strip():
            raise ValueError("Member name cannot be empty")
        return replace(self, name=name.strip())

    def update_email(self, email: str) -> "Member":
        if not email or not EMAIL_PATTERN.match(email):
            raise ValueError("Invalid email address")
        return replace(self, email=email.lower())

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "tier": self.tier.value,
            "join_date": self.join_date,
            "is_active": self.is_active,
            "active_rental_count": self.active_rental_count,
            "total_rentals": self.total_rentals,
        }

    @classmethod
    def reconstitute(cls, snapshot: dict[str, Any]) -> Self:
        try:
            return cls(
                id=MemberId.from_string(snapshot["id"]),
                name=snapshot["name"],
                email=snapshot["email"],
                tier=MembershipTier(snapshot["tier"]),
                join_date=snapshot["join_date"],
                is_active=snapshot["is_active"],
                active_rental_count=snapshot["active_rental_count"],
                total_rentals=snapshot["total_rentals"],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InvariantViolationError("Member", f"unreadable snapshot: {exc!r}") from exc
