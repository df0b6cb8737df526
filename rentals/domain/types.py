"""Enumerations with explicit rank and policy tables.

Ordering never relies on string comparison: conditions and tiers are ranked
through the tables below, and status transitions are listed exhaustively.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class EquipmentCondition(Enum):
    """Physical condition of equipment, best first."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    DAMAGED = "DAMAGED"

    @property
    def rank(self) -> int:
        return CONDITION_RANK[self]

    @property
    def is_rentable(self) -> bool:
        return self.rank >= CONDITION_RANK[EquipmentCondition.FAIR]

    @property
    def needs_repair(self) -> bool:
        return self is EquipmentCondition.DAMAGED

    def degradation_to(self, other: "EquipmentCondition") -> int:
        """Levels lost going from this condition to ``other`` (0 if not worse)."""
        return max(0, self.rank - other.rank)


CONDITION_RANK: dict[EquipmentCondition, int] = {
    EquipmentCondition.EXCELLENT: 5,
    EquipmentCondition.GOOD: 4,
    EquipmentCondition.FAIR: 3,
    EquipmentCondition.POOR: 2,
    EquipmentCondition.DAMAGED: 1,
}


@dataclass(frozen=True)
class TierPolicy:
    """Limits and discount granted by a membership tier."""

    rank: int
    max_concurrent_rentals: int
    max_rental_days: int
    discount_rate: Decimal


class MembershipTier(Enum):
    """Membership levels, lowest first."""

    BASIC = "BASIC"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @property
    def policy(self) -> TierPolicy:
        return TIER_POLICIES[self]

    @property
    def rank(self) -> int:
        return self.policy.rank


TIER_POLICIES: dict[MembershipTier, TierPolicy] = {
    MembershipTier.BASIC: TierPolicy(
        rank=1, max_concurrent_rentals=2, max_rental_days=7, discount_rate=Decimal("0.00")
    ),
    MembershipTier.SILVER: TierPolicy(
        rank=2, max_concurrent_rentals=3, max_rental_days=14, discount_rate=Decimal("0.05")
    ),
    MembershipTier.GOLD: TierPolicy(
        rank=3, max_concurrent_rentals=5, max_rental_days=30, discount_rate=Decimal("0.10")
    ),
    MembershipTier.PLATINUM: TierPolicy(
        rank=4, max_concurrent_rentals=10, max_rental_days=60, discount_rate=Decimal("0.15")
    ),
}


class RentalStatus(Enum):
    """Lifecycle state of a rental."""

    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"

    @property
    def is_in_possession(self) -> bool:
        """Equipment is still with the member."""
        return self in (RentalStatus.ACTIVE, RentalStatus.OVERDUE)

    @property
    def is_terminal(self) -> bool:
        return not RENTAL_TRANSITIONS[self]

    def can_transition_to(self, target: "RentalStatus") -> bool:
        return target in RENTAL_TRANSITIONS[self]


RENTAL_TRANSITIONS: dict[RentalStatus, frozenset[RentalStatus]] = {
    RentalStatus.ACTIVE: frozenset(
        {RentalStatus.OVERDUE, RentalStatus.RETURNED, RentalStatus.CANCELLED}
    ),
    RentalStatus.OVERDUE: frozenset({RentalStatus.RETURNED}),
    RentalStatus.RETURNED: frozenset(),
    RentalStatus.CANCELLED: frozenset(),
}


class ReservationStatus(Enum):
    """Lifecycle state of a reservation."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FULFILLED = "FULFILLED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_active(self) -> bool:
        return self in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

    @property
    def is_terminal(self) -> bool:
        return not RESERVATION_TRANSITIONS[self]

    def can_transition_to(self, target: "ReservationStatus") -> bool:
        return target in RESERVATION_TRANSITIONS[self]


RESERVATION_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.FULFILLED, ReservationStatus.EXPIRED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.FULFILLED: frozenset(),
    ReservationStatus.EXPIRED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}
