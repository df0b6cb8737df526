"""Rental service - booking, returning and extending rentals.

Every mutation follows the same shape: hold the booking lock for the
equipment and member, load the aggregates, let them decide, save the new
state, release the lock, then publish the events the aggregates returned.
"""

import logging
from datetime import datetime

from django.utils import timezone

from rentals.conf import rental_settings
from rentals.domain import (
    DamageAssessment,
    DateRange,
    DomainEvent,
    Equipment,
    EquipmentCondition,
    EquipmentId,
    Member,
    MemberId,
    Rental,
    RentalId,
    RentalStatus,
    ensure_no_conflicts,
)
from rentals.domain.errors import (
    DomainError,
    EquipmentMismatchError,
    EquipmentNotFoundError,
    MemberHasOverdueRentalsError,
    MemberInactiveError,
    MemberNotFoundError,
    RentalNotFoundError,
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


class RentalService:
    """Service for rental operations."""

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

    def _load_rental(self, rental_id: RentalId) -> Rental:
        rental = self._rentals.get(rental_id)
        if rental is None:
            raise RentalNotFoundError(str(rental_id))
        return rental

    def _ensure_no_overdue_rentals(self, member: Member, now: datetime) -> None:
        overdue = [r for r in self._rentals.find_by_member(member.id) if r.is_overdue(now)]
        if overdue:
            raise MemberHasOverdueRentalsError(str(member.id), len(overdue))

    def _bookings_for(self, equipment_id: EquipmentId) -> list:
        return [
            *self._rentals.find_by_equipment(equipment_id),
            *self._reservations.find_by_equipment(equipment_id),
        ]

    def get_rental(self, rental_id: str | RentalId) -> Rental:
        """Return a rental by ID.

        Raises:
            InvalidIdentifierError: If the rental_id is not a valid UUID.
            RentalNotFoundError: If the rental does not exist.
        """
        return self._load_rental(parse_id(RentalId, rental_id, "rental"))

    def list_member_rentals(self, member_id: str | MemberId) -> list[Rental]:
        parsed = parse_id(MemberId, member_id, "member")
        self._load_member(parsed)
        return self._rentals.find_by_member(parsed)

    def create_rental(
        self,
        *,
        equipment_id: str | EquipmentId,
        member_id: str | MemberId,
        start: datetime,
        end: datetime,
    ) -> Rental:
        """Book equipment for a member over ``[start, end)``.

        The cost is the equipment's daily rate times the rental days, less
        the member's tier discount.

        Raises:
            InvalidIdentifierError: If either ID is not a valid UUID.
            ValueError: If ``start`` is not before ``end`` or either is naive.
            EquipmentNotFoundError, MemberNotFoundError: If either does not exist.
            EquipmentNotAvailableError: If the equipment is rented or unrentable.
            MemberInactiveError: If the member account is inactive.
            MemberHasOverdueRentalsError: If the member has overdue rentals.
            RentalLimitExceededError: If the member is at the tier's rental limit.
            RentalPeriodExceededError: If the period is longer than the tier allows.
            BookingConflictError: If another booking overlaps the period.
        """
        equipment_id = parse_id(EquipmentId, equipment_id, "equipment")
        member_id = parse_id(MemberId, member_id, "member")
        period = DateRange(start=start, end=end)

        try:
            with self._lock.hold(equipment_id, member_id):
                now = self._clock()
                equipment = self._load_equipment(equipment_id)
                member = self._load_member(member_id)

                equipment.ensure_rentable()
                if not member.is_active:
                    raise MemberInactiveError(str(member_id))
                self._ensure_no_overdue_rentals(member, now)
                member.ensure_can_rent()
                member.ensure_period_allowed(period)
                ensure_no_conflicts(equipment_id, period, self._bookings_for(equipment_id))

                cost = member.apply_discount(equipment.calculate_rental_cost(period.days))
                rental, events = Rental.create(
                    equipment_id=equipment_id,
                    member_id=member_id,
                    period=period,
                    base_cost=cost,
                    condition_at_start=equipment.condition,
                    now=now,
                )
                equipment = equipment.mark_as_rented(rental.id)
                member = member.increment_active_rentals()

                self._rentals.save(rental)
                self._equipment.save(equipment)
                self._members.save(member)
        except DomainError as exc:
            logger.warning("Rental of %s for %s rejected: %s", equipment_id, member_id, exc)
            raise

        logger.info(
            "Created rental %s of %s for %s (%s, %s)",
            rental.id, equipment_id, member_id, period, rental.total_cost,
        )
        publish_events(self._publisher, events)
        return rental

    def return_rental(
        self, rental_id: str | RentalId, condition_at_return: EquipmentCondition
    ) -> Rental:
        """Close a rental, charging late and damage fees as of now.

        Raises:
            RentalAlreadyReturnedError: If the rental was already returned.
            InvalidRentalStateError: If the rental was cancelled.
        """
        rental_id = parse_id(RentalId, rental_id, "rental")
        booked = self._load_rental(rental_id)

        with self._lock.hold(booked.equipment_id, booked.member_id):
            now = self._clock()
            rental = self._load_rental(rental_id)
            equipment = self._load_equipment(rental.equipment_id)
            member = self._load_member(rental.member_id)

            damage_fee = rental.calculate_damage_fee(
                condition_at_return, rental_settings.DAMAGE_FEE_PER_LEVEL
            )
            rental, events = rental.return_rental(
                condition_at_return,
                damage_fee,
                now,
                daily_late_fee_rate=rental_settings.DAILY_LATE_FEE,
            )
            equipment = equipment.mark_as_returned(condition_at_return)
            member = member.decrement_active_rentals()

            self._rentals.save(rental)
            self._equipment.save(equipment)
            self._members.save(member)

        logger.info(
            "Returned rental %s in %s condition (late fee %s, damage fee %s)",
            rental_id, condition_at_return.value, rental.late_fee, rental.damage_fee,
        )
        if condition_at_return.needs_repair:
            logger.warning("Equipment %s came back damaged", rental.equipment_id)
        publish_events(self._publisher, events)
        return rental

    def assess_damage(
        self,
        rental_id: str | RentalId,
        equipment_id: str | EquipmentId,
        condition_after: EquipmentCondition,
        *,
        assessed_by: str,
        notes: str = "",
    ) -> DamageAssessment:
        """Record an inspection of equipment from a returned rental.

        Raises:
            InvalidIdentifierError: If either ID is not a valid UUID.
            RentalNotFoundError, EquipmentNotFoundError: If either does not exist.
            InvalidRentalStateError: If the rental has not been returned.
            EquipmentMismatchError: If the equipment is not the one rented.
            ValueError: If ``assessed_by`` is blank.
        """
        rental_id = parse_id(RentalId, rental_id, "rental")
        equipment_id = parse_id(EquipmentId, equipment_id, "equipment")
        rental = self._load_rental(rental_id)
        self._load_equipment(equipment_id)
        if rental.equipment_id != equipment_id:
            raise EquipmentMismatchError(
                str(rental_id), str(equipment_id), str(rental.equipment_id)
            )

        assessment = DamageAssessment.for_rental(
            rental,
            condition_after,
            assessed_by=assessed_by,
            now=self._clock(),
            notes=notes,
            fee_per_level=rental_settings.DAMAGE_FEE_PER_LEVEL,
        )
        logger.info(
            "Assessed rental %s: %s to %s, fee %s",
            rental_id, assessment.condition_before.value, condition_after.value,
            assessment.damage_fee,
        )
        return assessment

    def extend_rental(self, rental_id: str | RentalId, additional_days: int) -> Rental:
        """Push back the end of an active rental.

        Only the added days are checked for conflicts, and the whole extended
        period must stay within the member's tier limit. The added days are
        charged at the discounted daily rate.

        Raises:
            ValueError: If ``additional_days`` is not positive.
            InvalidRentalStateError: If the rental is not ACTIVE.
            BookingConflictError: If another booking overlaps the added days.
            RentalPeriodExceededError: If the extended period is too long.
        """
        if additional_days <= 0:
            raise ValueError("Extension days must be positive")
        rental_id = parse_id(RentalId, rental_id, "rental")
        booked = self._load_rental(rental_id)

        try:
            with self._lock.hold(booked.equipment_id, booked.member_id):
                rental = self._load_rental(rental_id)
                equipment = self._load_equipment(rental.equipment_id)
                member = self._load_member(rental.member_id)

                additional_cost = member.apply_discount(
                    equipment.calculate_rental_cost(additional_days)
                )
                extended, events = rental.extend_period(additional_days, additional_cost)
                ensure_no_conflicts(
                    rental.equipment_id,
                    rental.extension_period(additional_days),
                    self._bookings_for(rental.equipment_id),
                    exclude=[rental.id],
                )
                member.ensure_period_allowed(extended.period)

                self._rentals.save(extended)
        except DomainError as exc:
            logger.warning("Extension of rental %s rejected: %s", rental_id, exc)
            raise

        logger.info(
            "Extended rental %s by %d day(s) for %s", rental_id, additional_days, additional_cost
        )
        publish_events(self._publisher, events)
        return extended

    def cancel_rental(self, rental_id: str | RentalId) -> Rental:
        """Cancel a rental before its period starts, freeing the equipment."""
        rental_id = parse_id(RentalId, rental_id, "rental")
        booked = self._load_rental(rental_id)

        with self._lock.hold(booked.equipment_id, booked.member_id):
            rental = self._load_rental(rental_id)
            rental, events = rental.cancel(self._clock())
            equipment = self._load_equipment(rental.equipment_id)
            member = self._load_member(rental.member_id)

            self._rentals.save(rental)
            self._equipment.save(equipment.mark_as_returned(equipment.condition))
            self._members.save(member.decrement_active_rentals())

        logger.info("Cancelled rental %s", rental_id)
        publish_events(self._publisher, events)
        return rental

    def process_overdue_rentals(self) -> list[Rental]:
        """Mark every active rental past its end as overdue and charge late fees."""
        now = self._clock()
        rate = rental_settings.DAILY_LATE_FEE
        processed: list[Rental] = []
        events: list[DomainEvent] = []

        for candidate in self._rentals.find_overdue(now):
            with self._lock.hold(candidate.equipment_id, candidate.member_id):
                rental = self._load_rental(candidate.id)
                if rental.status is not RentalStatus.ACTIVE or not rental.is_overdue(now):
                    continue
                rental, rental_events = rental.mark_as_overdue(rate, now)
                self._rentals.save(rental)
            processed.append(rental)
            events.extend(rental_events)
            logger.info(
                "Rental %s is overdue by %d day(s), late fee %s",
                rental.id, rental.days_overdue(now), rental.late_fee,
            )

        publish_events(self._publisher, events)
        return processed
