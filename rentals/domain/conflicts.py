"""Double-booking detection across rentals and reservations.

A booking conflicts with a candidate ``(equipment_id, period)`` when it is for
the same equipment, its period overlaps the candidate's, and it still blocks
the equipment. Returned or cancelled rentals and finished or cancelled
reservations never conflict.
"""

from collections.abc import Iterable
from typing import Protocol

from rentals.domain.errors import BookingConflictError
from rentals.domain.value_objects import DateRange, EquipmentId


class Booking(Protocol):
    """Anything that can hold equipment for a period."""

    @property
    def id(self) -> object: ...

    @property
    def equipment_id(self) -> EquipmentId: ...

    @property
    def period(self) -> DateRange: ...

    @property
    def is_blocking(self) -> bool: ...


def conflicts_with(booking: Booking, equipment_id: EquipmentId, period: DateRange) -> bool:
    return (
        booking.is_blocking
        and booking.equipment_id == equipment_id
        and booking.period.overlaps(period)
    )


def find_conflicts(
    equipment_id: EquipmentId,
    period: DateRange,
    bookings: Iterable[Booking],
    exclude: Iterable[object] = (),
) -> list[Booking]:
    """Return the bookings that would double-book ``equipment_id`` during ``period``.

    Bookings whose id is in ``exclude`` are ignored, so a booking being
    changed is never reported as conflicting with itself.
    """
    excluded = set(exclude)
    return [
        booking
        for booking in bookings
        if booking.id not in excluded and conflicts_with(booking, equipment_id, period)
    ]


def ensure_no_conflicts(
    equipment_id: EquipmentId,
    period: DateRange,
    bookings: Iterable[Booking],
    exclude: Iterable[object] = (),
) -> None:
    conflicts = find_conflicts(equipment_id, period, bookings, exclude)
    if conflicts:
        raise BookingConflictError(
            str(equipment_id),
            str(period),
            [str(booking.id) for booking in conflicts],
        )
