"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every read hands back an
independent copy: mutating a loaded aggregate never changes stored state
until it is saved again.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from rentals.domain import (
    DateRange,
    Equipment,
    EquipmentId,
    Member,
    MemberId,
    Rental,
    RentalId,
    RentalStatus,
    Reservation,
    ReservationId,
    ReservationStatus,
)


class EquipmentStore(ABC):
    """Interface for equipment persistence operations."""

    @abstractmethod
    def save(self, equipment: Equipment) -> None:
        """Insert or replace an equipment record."""
        ...

    @abstractmethod
    def get(self, equipment_id: EquipmentId) -> Equipment | None:
        """Return equipment by ID, or None if not found."""
        ...

    @abstractmethod
    def list_all(self) -> list[Equipment]:
        ...

    @abstractmethod
    def find_available(self) -> list[Equipment]:
        """Return equipment that is not held and in a rentable condition."""
        ...

    @abstractmethod
    def find_by_category(self, category: str) -> list[Equipment]:
        ...


class MemberStore(ABC):
    """Interface for member persistence operations."""

    @abstractmethod
    def add(self, member: Member) -> None:
        """Insert a new member.

        Checking that no other member uses the same email and inserting
        happen atomically.

        Raises:
            DuplicateEmailError: If another member already uses the email.
        """
        ...

    @abstractmethod
    def save(self, member: Member) -> None:
        """Replace an existing member record.

        Raises:
            DuplicateEmailError: If the member's email now belongs to another member.
        """
        ...

    @abstractmethod
    def get(self, member_id: MemberId) -> Member | None:
        """Return a member by ID, or None if not found."""
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Member | None:
        ...


class RentalStore(ABC):
    """Interface for rental persistence operations."""

    @abstractmethod
    def save(self, rental: Rental) -> None:
        ...

    @abstractmethod
    def get(self, rental_id: RentalId) -> Rental | None:
        """Return a rental by ID, or None if not found."""
        ...

    @abstractmethod
    def find_by_member(self, member_id: MemberId) -> list[Rental]:
        """Return a member's rentals, ordered by created_at ascending."""
        ...

    @abstractmethod
    def find_by_equipment(self, equipment_id: EquipmentId) -> list[Rental]:
        ...

    @abstractmethod
    def find_by_status(self, status: RentalStatus) -> list[Rental]:
        ...

    @abstractmethod
    def find_conflicting(self, equipment_id: EquipmentId, period: DateRange) -> list[Rental]:
        """Return blocking rentals of the equipment that overlap ``period``."""
        ...

    @abstractmethod
    def find_overdue(self, now: datetime) -> list[Rental]:
        """Return ACTIVE rentals whose period has ended by ``now``."""
        ...


class ReservationStore(ABC):
    """Interface for reservation persistence operations."""

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        ...

    @abstractmethod
    def get(self, reservation_id: ReservationId) -> Reservation | None:
        """Return a reservation by ID, or None if not found."""
        ...

    @abstractmethod
    def find_by_member(self, member_id: MemberId) -> list[Reservation]:
        ...

    @abstractmethod
    def find_by_equipment(self, equipment_id: EquipmentId) -> list[Reservation]:
        ...

    @abstractmethod
    def find_by_status(self, status: ReservationStatus) -> list[Reservation]:
        ...

    @abstractmethod
    def find_conflicting(
        self, equipment_id: EquipmentId, period: DateRange
    ) -> list[Reservation]:
        """Return active reservations of the equipment that overlap ``period``."""
        ...

    @abstractmethod
    def find_ready_to_fulfill(self, now: datetime) -> list[Reservation]:
        """Return CONFIRMED reservations whose period contains ``now``."""
        ...

    @abstractmethod
    def find_expirable(self, now: datetime) -> list[Reservation]:
        """Return CONFIRMED reservations whose period has ended by ``now``."""
        ...


class BookingLock(ABC):
    """Serializes read-check-write sequences on the same equipment or member.

    Services hold the lock around load, conflict check, mutation and save,
    so two requests touching the same keys never interleave.
    """

    @abstractmethod
    def hold(self, *keys: object) -> AbstractContextManager[None]:
        """Return a context manager holding every key for its duration."""
        ...
