"""Pytest configuration and shared fixtures."""

import pytest

from rentals.domain import Equipment, Member, MembershipTier
from rentals.publishers import InMemoryEventPublisher
from rentals.services import EquipmentService, MemberService, RentalService, ReservationService
from rentals.stores import (
    InMemoryBookingLock,
    InMemoryEquipmentStore,
    InMemoryMemberStore,
    InMemoryRentalStore,
    InMemoryReservationStore,
)
from tests.factories import FakeClock, make_equipment, make_member


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def equipment_store() -> InMemoryEquipmentStore:
    return InMemoryEquipmentStore()


@pytest.fixture
def member_store() -> InMemoryMemberStore:
    return InMemoryMemberStore()


@pytest.fixture
def rental_store() -> InMemoryRentalStore:
    return InMemoryRentalStore()


@pytest.fixture
def reservation_store() -> InMemoryReservationStore:
    return InMemoryReservationStore()


@pytest.fixture
def booking_lock() -> InMemoryBookingLock:
    return InMemoryBookingLock()


@pytest.fixture
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def equipment_service(equipment_store, booking_lock, clock) -> EquipmentService:
    return EquipmentService(equipment_store, booking_lock, clock=clock)


@pytest.fixture
def member_service(member_store, booking_lock, clock) -> MemberService:
    return MemberService(member_store, booking_lock, clock=clock)


@pytest.fixture
def service_stores(
    equipment_store, member_store, rental_store, reservation_store, booking_lock, publisher, clock
) -> dict:
    return {
        "equipment_store": equipment_store,
        "member_store": member_store,
        "rental_store": rental_store,
        "reservation_store": reservation_store,
        "lock": booking_lock,
        "publisher": publisher,
        "clock": clock,
    }


@pytest.fixture
def rental_service(service_stores) -> RentalService:
    return RentalService(**service_stores)


@pytest.fixture
def reservation_service(service_stores) -> ReservationService:
    return ReservationService(**service_stores)


@pytest.fixture
def drill(equipment_store) -> Equipment:
    equipment = make_equipment()
    equipment_store.save(equipment)
    return equipment


@pytest.fixture
def member(member_store) -> Member:
    basic = make_member()
    member_store.add(basic)
    return basic


@pytest.fixture
def gold_member(member_store) -> Member:
    gold = make_member(tier=MembershipTier.GOLD, email="grace@example.com", name="Grace Hopper")
    member_store.add(gold)
    return gold
