"""In-memory implementations of the store interfaces.

Records are kept as snapshots and rebuilt on every read, so callers always
receive independent copies. Used by the test suite and for local runs.
"""

import logging
import threading
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generic, TypeVar

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
from rentals.domain.conflicts import find_conflicts
from rentals.domain.errors import DuplicateEmailError
from rentals.stores.interfaces import (
    BookingLock,
    EquipmentStore,
    MemberStore,
    RentalStore,
    ReservationStore,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", Equipment, Member, Rental, Reservation)


class _SnapshotTable(Generic[T]):
    """Thread-safe table of snapshots keyed by identifier string."""

    def __init__(self, reconstitute: Callable[[dict[str, Any]], T]) -> None:
        self._reconstitute = reconstitute
        self._rows: dict[str, dict[str, Any]] = {}
        self.lock = threading.RLock()

    def put(self, key: object, snapshot: dict[str, Any]) -> None:
        with self.lock:
            self._rows[str(key)] = dict(snapshot)

    def get(self, key: object) -> T | None:
        with self.lock:
            row = self._rows.get(str(key))
        return None if row is None else self._reconstitute(dict(row))

    def all(self) -> list[T]:
        with self.lock:
            rows = [dict(row) for row in self._rows.values()]
        return [self._reconstitute(row) for row in rows]

    def where(self, predicate: Callable[[T], bool]) -> list[T]:
        return [item for item in self.all() if predicate(item)]


class InMemoryEquipmentStore(EquipmentStore):
    def __init__(self) -> None:
        self._table: _SnapshotTable[Equipment] = _SnapshotTable(Equipment.reconstitute)

    def save(self, equipment: Equipment) -> None:
        self._table.put(equipment.id, equipment.to_snapshot())
        logger.debug("Saved equipment %s", equipment.id)

    def get(self, equipment_id: EquipmentId) -> Equipment | None:
        return self._table.get(equipment_id)

    def list_all(self) -> list[Equipment]:
        return sorted(self._table.all(), key=lambda item: item.name)

    def find_available(self) -> list[Equipment]:
        return [item for item in self.list_all() if item.can_be_rented]

    def find_by_category(self, category: str) -> list[Equipment]:
        wanted = category.strip().lower()
        return [item for item in self.list_all() if item.category.lower() == wanted]


class InMemoryMemberStore(MemberStore):
    def __init__(self) -> None:
        self._table: _SnapshotTable[Member] = _SnapshotTable(Member.reconstitute)

    def _email_taken(self, member: Member) -> bool:
        owner = self.get_by_email(member.email)
        return owner is not None and owner.id != member.id

    def add(self, member: Member) -> None:
        with self._table.lock:
            if self.get_by_email(member.email) is not None:
                raise DuplicateEmailError(member.email)
            self._table.put(member.id, member.to_snapshot())
        logger.debug("Added member %s", member.id)

    def save(self, member: Member) -> None:
        with self._table.lock:
            if self._email_taken(member):
                raise DuplicateEmailError(member.email)
            self._table.put(member.id, member.to_snapshot())
        logger.debug("Saved member %s", member.id)

    def get(self, member_id: MemberId) -> Member | None:
        return self._table.get(member_id)

    def get_by_email(self, email: str) -> Member | None:
        wanted = email.strip().lower()
        matches = self._table.where(lambda member: member.email == wanted)
        return matches[0] if matches else None


class InMemoryRentalStore(RentalStore):
    def __init__(self) -> None:
        self._table: _SnapshotTable[Rental] = _SnapshotTable(Rental.reconstitute)

    def _select(self, predicate: Callable[[Rental], bool]) -> list[Rental]:
        return sorted(self._table.where(predicate), key=lambda rental: rental.created_at)

    def save(self, rental: Rental) -> None:
        self._table.put(rental.id, rental.to_snapshot())
        logger.debug("Saved rental %s (%s)", rental.id, rental.status.value)

    def get(self, rental_id: RentalId) -> Rental | None:
        return self._table.get(rental_id)

    def find_by_member(self, member_id: MemberId) -> list[Rental]:
        return self._select(lambda rental: rental.member_id == member_id)

    def find_by_equipment(self, equipment_id: EquipmentId) -> list[Rental]:
        return self._select(lambda rental: rental.equipment_id == equipment_id)

    def find_by_status(self, status: RentalStatus) -> list[Rental]:
        return self._select(lambda rental: rental.status is status)

    def find_conflicting(self, equipment_id: EquipmentId, period: DateRange) -> list[Rental]:
        return find_conflicts(equipment_id, period, self.find_by_equipment(equipment_id))

    def find_overdue(self, now: datetime) -> list[Rental]:
        return self._select(
            lambda rental: rental.status is RentalStatus.ACTIVE and rental.is_overdue(now)
        )


class InMemoryReservationStore(ReservationStore):
    def __init__(self) -> None:
        self._table: _SnapshotTable[Reservation] = _SnapshotTable(Reservation.reconstitute)

    def _select(self, predicate: Callable[[Reservation], bool]) -> list[Reservation]:
        return sorted(self._table.where(predicate), key=lambda item: item.period.start)

    def save(self, reservation: Reservation) -> None:
        self._table.put(reservation.id, reservation.to_snapshot())
        logger.debug("Saved reservation %s (%s)", reservation.id, reservation.status.value)

    def get(self, reservation_id: ReservationId) -> Reservation | None:
        return self._table.get(reservation_id)

    def find_by_member(self, member_id: MemberId) -> list[Reservation]:
        return self._select(lambda item: item.member_id == member_id)

    def find_by_equipment(self, equipment_id: EquipmentId) -> list[Reservation]:
        return self._select(lambda item: item.equipment_id == equipment_id)

    def find_by_status(self, status: ReservationStatus) -> list[Reservation]:
        return self._select(lambda item: item.status is status)

    def find_conflicting(
        self, equipment_id: EquipmentId, period: DateRange
    ) -> list[Reservation]:
        return find_conflicts(equipment_id, period, self.find_by_equipment(equipment_id))

    def find_ready_to_fulfill(self, now: datetime) -> list[Reservation]:
        return self._select(lambda item: item.is_ready_to_fulfill(now))

    def find_expirable(self, now: datetime) -> list[Reservation]:
        return self._select(
            lambda item: item.status is ReservationStatus.CONFIRMED
            and item.period.has_ended(now)
        )


class InMemoryBookingLock(BookingLock):
    """Per-key locks, always acquired in sorted key order.

    A key's lock lives only while some caller holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *keys: object) -> Iterator[None]:
        ordered = sorted({f"{type(key).__name__}:{key}" for key in keys})
        locks = [self._lock_for(key) for key in ordered]
        acquired: list[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
