"""Reservation service - booking equipment ahead of time.

Reservations hold equipment for a future period. Once the period starts, a
confirmed reservation is fulfilled into a rental; if the period ends first,
it expires.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from rentals.conf import rental_settings
from rentals.domain import (
    DateRange,
    DomainEvent,
    Equipment,
    EquipmentId,
    Member,
    MemberId,
    Money,
    Rental,
    Reservation,
    ReservationId,
    ReservationStatus,
    ensure_no_conflicts,
)
from rentals.domain.errors import (
    DomainError,
    EquipmentNotFoundError,
    MemberHasOverdueRentalsError,
    MemberInactiveError,
    MemberNotFoundError,
    ReservationNotFoundError,
)
from rentals.publishers import EventPublisher
from rentals.services.base import Clock, parse_id, publish_events
from rentals.stores import (
    BookingLock,
    EquipmentStore,
    MemberStore,
    RentalStore,
    ReservationStore,
)

logger = logging.getLogger(__name__)

UNCONFIRMED_REASON = "Not confirmed before the reservation period started"


@dataclass(frozen=True)
class ReservationReceipt:
    """A new reservation with the price the member can expect to pay."""

    reservation: Reservation
    equipment_name: str
    estimated_cost: Money
    discount_applied: Money


class ReservationService:
    """Service for reservation operations."""

    def __init__(
        self,
        *,
        equipment_store: EquipmentStore,
        member_store: MemberStore,
        rental_store: RentalStore,
        reservation_store: ReservationStore,
        lock: BookingLock,
        publisher: EventPublisher,
        clock: Clock = timezone.now,
    ) -> None:
        self._equipment = equipment_store
        self._members = member_store
        self._rentals = rental_store
        self._reservations = reservation_store
        self._lock = lock
        self._publisher = publisher
        self._clock = clock

    def _load_equipment(self, equipment_id: EquipmentId) -> Equipment:
        equipment = self._equipment.get(equipment_id)
        if equipment is None:
            raise EquipmentNotFoundError(str(equipment_id))
        return equipment

    def _load_member(self, member_id: MemberId) -> Member:
        member = self._members.get(member_id)
        if member is None:
            raise MemberNotFoundError(str(member_id))
        return member

    def _load_reservation(self, reservation_id: ReservationId) -> Reservation:
        reservation = self._reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(str(reservation_id))
        return reservation

    def get_reservation(self, reservation_id: str | ReservationId) -> Reservation:
        """Return a reservation by ID.

        Raises:
            InvalidIdentifierError: If the reservation_id is not a valid UUID.
            ReservationNotFoundError: If the reservation does not exist.
        """
        return self._load_reservation(parse_id(ReservationId, reservation_id, "reservation"))

    def list_member_reservations(self, member_id: str | MemberId) -> list[Reservation]:
        parsed = parse_id(MemberId, member_id, "member")
        self._load_member(parsed)
        return self._reservations.find_by_member(parsed)

    def create_reservation(
        self,
        *,
        equipment_id: str | EquipmentId,
        member_id: str | MemberId,
        start: datetime,
        end: datetime,
    ) -> ReservationReceipt:
        """Reserve equipment for a future period.

        With ``AUTO_CONFIRM_RESERVATIONS`` on, the reservation is confirmed
        straight away.

        Raises:
            InvalidIdentifierError: If either ID is not a valid UUID.
            ValueError: If ``start`` is not before ``end`` or either is naive.
            EquipmentNotFoundError, MemberNotFoundError: If either does not exist.
            MemberInactiveError: If the member account is inactive.
            MemberHasOverdueRentalsError: If the member has overdue rentals.
            RentalPeriodExceededError: If the period is longer than the tier allows.
            BookingConflictError: If a reservation or rental overlaps the period.
            InvalidReservationStateError: If the period has already started.
        """
        equipment_id = parse_id(EquipmentId, equipment_id, "equipment")
        member_id = parse_id(MemberId, member_id, "member")
        period = DateRange(start=start, end=end)

        try:
            with self._lock.hold(equipment_id, member_id):
                now = self._clock()
                equipment = self._load_equipment(equipment_id)
                member = self._load_member(member_id)

                if not member.is_active:
                    raise MemberInactiveError(str(member_id))
                overdue = [r for r in self._rentals.find_by_member(member_id) if r.is_overdue(now)]
                if overdue:
                    raise MemberHasOverdueRentalsError(str(member_id), len(overdue))
                member.ensure_period_allowed(period)
                ensure_no_conflicts(
                    equipment_id,
                    period,
                    [
                        *self._reservations.find_by_equipment(equipment_id),
                        *self._rentals.find_by_equipment(equipment_id),
                    ],
                )

                reservation, events = Reservation.create(
                    equipment_id=equipment_id,
                    member_id=member_id,
                    period=period,
                    now=now,
                )
                if rental_settings.AUTO_CONFIRM_RESERVATIONS:
                    reservation, confirm_events = reservation.confirm(now)
                    events.extend(confirm_events)
                self._reservations.save(reservation)
        except DomainError as exc:
            logger.warning("Reservation of %s for %s rejected: %s", equipment_id, member_id, exc)
            raise

        full_cost = equipment.calculate_rental_cost(period.days)
        estimated_cost = member.apply_discount(full_cost)
        logger.info(
            "Created %s reservation %s of %s for %s (%s)",
            reservation.status.value, reservation.id, equipment_id, member_id, period,
        )
        publish_events(self._publisher, events)
        return ReservationReceipt(
            reservation=reservation,
            equipment_name=equipment.name,
            estimated_cost=estimated_cost,
            discount_applied=full_cost.subtract(estimated_cost),
        )

    def confirm_reservation(self, reservation_id: str | ReservationId) -> Reservation:
        reservation_id = parse_id(ReservationId, reservation_id, "reservation")
        booked = self._load_reservation(reservation_id)

        with self._lock.hold(booked.equipment_id, booked.member_id):
            reservation, events = self._load_reservation(reservation_id).confirm(self._clock())
            self._reservations.save(reservation)

        logger.info("Confirmed reservation %s", reservation_id)
        publish_events(self._publisher, events)
        return reservation

    def cancel_reservation(
        self, reservation_id: str | ReservationId, reason: str | None = None
    ) -> Reservation:
        """Cancel a pending or confirmed reservation, releasing its period.

        Raises:
            ReservationAlreadyCancelledError: If it was already cancelled.
            InvalidReservationStateError: If it was fulfilled or has expired.
        """
        reservation_id = parse_id(ReservationId, reservation_id, "reservation")
        booked = self._load_reservation(reservation_id)

        with self._lock.hold(booked.equipment_id, booked.member_id):
            reservation, events = self._load_reservation(reservation_id).cancel(
                self._clock(), reason
            )
            self._reservations.save(reservation)

        logger.info("Cancelled reservation %s (%s)", reservation_id, reason or "no reason given")
        publish_events(self._publisher, events)
        return reservation

    def fulfill_reservation(
        self, reservation_id: str | ReservationId
    ) -> tuple[Reservation, Rental]:
        """Turn a confirmed reservation whose period has started into a rental.

        Raises:
            InvalidReservationStateError: If the reservation is not confirmed
                or its period is not current.
            MemberInactiveError, RentalLimitExceededError: If the member cannot rent.
            EquipmentNotAvailableError: If the equipment is out or unrentable.
        """
        reservation_id = parse_id(ReservationId, reservation_id, "reservation")
        booked = self._load_reservation(reservation_id)

        try:
            with self._lock.hold(booked.equipment_id, booked.member_id):
                now = self._clock()
                reservation, events = self._load_reservation(reservation_id).fulfill(now)
                equipment = self._load_equipment(reservation.equipment_id)
                member = self._load_member(reservation.member_id)

                member.ensure_can_rent()
                cost = member.apply_discount(
                    equipment.calculate_rental_cost(reservation.period.days)
                )
                rental, rental_events = Rental.create(
                    equipment_id=reservation.equipment_id,
                    member_id=reservation.member_id,
                    period=reservation.period,
                    base_cost=cost,
                    condition_at_start=equipment.condition,
                    now=now,
                )
                events.extend(rental_events)
                equipment = equipment.mark_as_rented(rental.id)
                member = member.increment_active_rentals()

                self._rentals.save(rental)
                self._equipment.save(equipment)
                self._members.save(member)
                self._reservations.save(reservation)
        except DomainError as exc:
            logger.warning("Fulfillment of reservation %s rejected: %s", reservation_id, exc)
            raise

        logger.info("Fulfilled reservation %s as rental %s", reservation_id, rental.id)
        publish_events(self._publisher, events)
        return reservation, rental

    def expire_reservations(self) -> list[Reservation]:
        """Close reservations whose time has passed.

        Confirmed reservations whose period ended without fulfillment expire.
        Pending reservations whose period started without confirmation can
        no longer be confirmed and are cancelled.
        """
        now = self._clock()
        stale = [
            *self._reservations.find_expirable(now),
            *(
                item
                for item in self._reservations.find_by_status(ReservationStatus.PENDING)
                if item.period.has_started(now)
            ),
        ]
        closed: list[Reservation] = []
        events: list[DomainEvent] = []

        for candidate in stale:
            with self._lock.hold(candidate.equipment_id, candidate.member_id):
                reservation = self._load_reservation(candidate.id)
                if reservation.status is not candidate.status:
                    continue
                if reservation.status is ReservationStatus.CONFIRMED:
                    reservation, new_events = reservation.mark_as_expired(now)
                else:
                    reservation, new_events = reservation.cancel(now, UNCONFIRMED_REASON)
                self._reservations.save(reservation)
            closed.append(reservation)
            events.extend(new_events)
            logger.info(
                "Closed stale reservation %s as %s", reservation.id, reservation.status.value
            )

        publish_events(self._publisher, events)
        return closed
