from rentals.stores.interfaces import (
    BookingLock,
    EquipmentStore,
    MemberStore,
    RentalStore,
    ReservationStore,
)
from rentals.stores.memory_store import (
    InMemoryBookingLock,
    InMemoryEquipmentStore,
    InMemoryMemberStore,
    InMemoryRentalStore,
    InMemoryReservationStore,
)

__all__ = [
    "BookingLock",
    "EquipmentStore",
    "InMemoryBookingLock",
    "InMemoryEquipmentStore",
    "InMemoryMemberStore",
    "InMemoryRentalStore",
    "InMemoryReservationStore",
    "MemberStore",
    "RentalStore",
    "ReservationStore",
]
