"""Domain error codes for the rentals module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EQUIPMENT_NOT_FOUND = "EQUIPMENT_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    RENTAL_NOT_FOUND = "RENTAL_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    EQUIPMENT_NOT_AVAILABLE = "EQUIPMENT_NOT_AVAILABLE"
    EQUIPMENT_NOT_RENTED = "EQUIPMENT_NOT_RENTED"
    INVALID_RENTAL_STATE = "INVALID_RENTAL_STATE"
    RENTAL_ALREADY_RETURNED = "RENTAL_ALREADY_RETURNED"
    INVALID_RESERVATION_STATE = "INVALID_RESERVATION_STATE"
    RESERVATION_ALREADY_CANCELLED = "RESERVATION_ALREADY_CANCELLED"
    RENTAL_LIMIT_EXCEEDED = "RENTAL_LIMIT_EXCEEDED"
    RENTAL_PERIOD_EXCEEDED = "RENTAL_PERIOD_EXCEEDED"
    MEMBER_INACTIVE = "MEMBER_INACTIVE"
    MEMBER_HAS_OVERDUE_RENTALS = "MEMBER_HAS_OVERDUE_RENTALS"
    MEMBER_HAS_ACTIVE_RENTALS = "MEMBER_HAS_ACTIVE_RENTALS"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    EQUIPMENT_MISMATCH = "EQUIPMENT_MISMATCH"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when an identifier has no backing entity."""


class EquipmentNotFoundError(NotFoundError):
    def __init__(self, equipment_id: str) -> None:
        super().__init__(
            code=ErrorCode.EQUIPMENT_NOT_FOUND,
            message=f"Equipment {equipment_id} not found",
        )
        self.equipment_id = equipment_id


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: str) -> None:
        super().__init__(
            code=ErrorCode.MEMBER_NOT_FOUND,
            message=f"Member {member_id} not found",
        )
        self.member_id = member_id


class RentalNotFoundError(NotFoundError):
    def __init__(self, rental_id: str) -> None:
        super().__init__(
            code=ErrorCode.RENTAL_NOT_FOUND,
            message=f"Rental {rental_id} not found",
        )
        self.rental_id = rental_id


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_NOT_FOUND,
            message=f"Reservation {reservation_id} not found",
        )
        self.reservation_id = reservation_id


class EquipmentNotAvailableError(DomainError):
    """Raised when booking unavailable or non-rentable equipment."""

    def __init__(self, equipment_id: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.EQUIPMENT_NOT_AVAILABLE,
            message=f"Equipment {equipment_id} is not available: {reason}",
        )
        self.equipment_id = equipment_id
        self.reason = reason


class EquipmentNotRentedError(DomainError):
    """Raised when returning equipment that is not out on a rental."""

    def __init__(self, equipment_id: str) -> None:
        super().__init__(
            code=ErrorCode.EQUIPMENT_NOT_RENTED,
            message=f"Equipment {equipment_id} is not currently rented",
        )
        self.equipment_id = equipment_id


class EquipmentMismatchError(DomainError):
    """Raised when equipment named alongside a rental is not the rented one."""

    def __init__(self, rental_id: str, equipment_id: str, rented_equipment_id: str) -> None:
        super().__init__(
            code=ErrorCode.EQUIPMENT_MISMATCH,
            message=(
                f"Equipment {equipment_id} does not match rental {rental_id}, "
                f"which rented {rented_equipment_id}"
            ),
        )
        self.rental_id = rental_id
        self.equipment_id = equipment_id
        self.rented_equipment_id = rented_equipment_id


class InvalidStateError(DomainError):
    """Raised when an operation is attempted from a state that forbids it."""


class InvalidRentalStateError(InvalidStateError):
    def __init__(self, rental_id: str, current_state: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RENTAL_STATE,
            message=f"Rental {rental_id} in state {current_state}: {reason}",
        )
        self.rental_id = rental_id
        self.current_state = current_state
        self.reason = reason


class RentalAlreadyReturnedError(InvalidStateError):
    def __init__(self, rental_id: str) -> None:
        super().__init__(
            code=ErrorCode.RENTAL_ALREADY_RETURNED,
            message=f"Rental {rental_id} has already been returned",
        )
        self.rental_id = rental_id


class InvalidReservationStateError(InvalidStateError):
    def __init__(self, reservation_id: str, current_state: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RESERVATION_STATE,
            message=f"Reservation {reservation_id} in state {current_state}: {reason}",
        )
        self.reservation_id = reservation_id
        self.current_state = current_state
        self.reason = reason


class ReservationAlreadyCancelledError(DomainError):
    """Raised when cancelling a reservation twice."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_ALREADY_CANCELLED,
            message=f"Reservation {reservation_id} has already been cancelled",
        )
        self.reservation_id = reservation_id


class LimitExceededError(DomainError):
    """Raised when a request goes past a membership tier limit."""


class RentalLimitExceededError(LimitExceededError):
    def __init__(self, member_id: str, current_rentals: int, max_allowed: int) -> None:
        super().__init__(
            code=ErrorCode.RENTAL_LIMIT_EXCEEDED,
            message=(
                f"Member {member_id} has reached the rental limit "
                f"({current_rentals}/{max_allowed})"
            ),
        )
        self.member_id = member_id
        self.current_rentals = current_rentals
        self.max_allowed = max_allowed


class RentalPeriodExceededError(LimitExceededError):
    def __init__(self, member_id: str, requested_days: int, max_days: int) -> None:
        super().__init__(
            code=ErrorCode.RENTAL_PERIOD_EXCEEDED,
            message=(
                f"Rental period of {requested_days} days exceeds the maximum "
                f"of {max_days} days for member {member_id}"
            ),
        )
        self.member_id = member_id
        self.requested_days = requested_days
        self.max_days = max_days


class MemberInactiveError(DomainError):
    def __init__(self, member_id: str) -> None:
        super().__init__(
            code=ErrorCode.MEMBER_INACTIVE,
            message=f"Member {member_id} account is inactive",
        )
        self.member_id = member_id


class MemberHasOverdueRentalsError(DomainError):
    def __init__(self, member_id: str, overdue_count: int) -> None:
        super().__init__(
            code=ErrorCode.MEMBER_HAS_OVERDUE_RENTALS,
            message=f"Member {member_id} has {overdue_count} overdue rental(s)",
        )
        self.member_id = member_id
        self.overdue_count = overdue_count


class MemberHasActiveRentalsError(DomainError):
    def __init__(self, member_id: str, active_count: int) -> None:
        super().__init__(
            code=ErrorCode.MEMBER_HAS_ACTIVE_RENTALS,
            message=f"Member {member_id} still has {active_count} active rental(s)",
        )
        self.member_id = member_id
        self.active_count = active_count


class DuplicateEmailError(DomainError):
    def __init__(self, email: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_EMAIL,
            message="A member with this email already exists",
        )
        self.email = email


class BookingConflictError(DomainError):
    """Raised when a period overlaps an existing booking of the same equipment."""

    def __init__(self, equipment_id: str, period: str, conflicting_ids: list[str]) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_CONFLICT,
            message=(
                f"Equipment {equipment_id} is already booked during {period} "
                f"({len(conflicting_ids)} conflicting booking(s))"
            ),
        )
        self.equipment_id = equipment_id
        self.period = period
        self.conflicting_ids = conflicting_ids


class InvalidIdentifierError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str, value: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_IDENTIFIER,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind
        self.value = value


class InvariantViolationError(DomainError):
    """Raised when an entity is built from state that breaks its invariants."""

    def __init__(self, entity: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVARIANT_VIOLATION,
            message=f"{entity} invariant violated: {reason}",
        )
        self.entity = entity
        self.reason = reason
