from rentals.domain.conflicts import ensure_no_conflicts, find_conflicts
from rentals.domain.damage import DamageAssessment
from rentals.domain.equipment import Equipment
from rentals.domain.errors import DomainError, ErrorCode
from rentals.domain.events import (
    DomainEvent,
    RentalCreated,
    RentalOverdue,
    RentalReturned,
    ReservationCancelled,
    ReservationCreated,
)
from rentals.domain.member import Member
from rentals.domain.rental import Rental
from rentals.domain.reservation import Reservation
from rentals.domain.types import (
    EquipmentCondition,
    MembershipTier,
    RentalStatus,
    ReservationStatus,
)
from rentals.domain.value_objects import (
    DamageAssessmentId,
    DateRange,
    EquipmentId,
    MemberId,
    Money,
    RentalId,
    ReservationId,
)

__all__ = [
    "DamageAssessment",
    "DamageAssessmentId",
    "DateRange",
    "DomainError",
    "DomainEvent",
    "Equipment",
    "EquipmentCondition",
    "EquipmentId",
    "ErrorCode",
    "Member",
    "MemberId",
    "MembershipTier",
    "Money",
    "Rental",
    "RentalCreated",
    "RentalId",
    "RentalOverdue",
    "RentalReturned",
    "RentalStatus",
    "Reservation",
    "ReservationCancelled",
    "ReservationCreated",
    "ReservationId",
    "ReservationStatus",
    "ensure_no_conflicts",
    "find_conflicts",
]
