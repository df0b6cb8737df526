"""Equipment service - catalog and upkeep of rentable equipment."""

import logging
from datetime import date

from django.utils import timezone

from rentals.conf import rental_settings
from rentals.domain import Equipment, EquipmentCondition, EquipmentId, Money
from rentals.domain.errors import EquipmentNotFoundError
from rentals.services.base import Clock, parse_id
from rentals.stores import BookingLock, EquipmentStore

logger = logging.getLogger(__name__)


class EquipmentService:
    """Service for equipment catalog operations."""

    def __init__(
        self,
        equipment_store: EquipmentStore,
        lock: BookingLock,
        clock: Clock = timezone.now,
    ) -> None:
        self._equipment = equipment_store
        self._lock = lock
        self._clock = clock

    def register_equipment(
        self,
        *,
        name: str,
        category: str,
        daily_rate: Money,
        condition: EquipmentCondition = EquipmentCondition.EXCELLENT,
        purchase_date: date | None = None,
        description: str = "",
    ) -> Equipment:
        equipment = Equipment.create(
            name=name,
            category=category,
            daily_rate=daily_rate,
            condition=condition,
            purchase_date=purchase_date or self._clock().date(),
            description=description,
        )
        self._equipment.save(equipment)
        logger.info("Registered equipment %s (%s)", equipment.id, equipment.name)
        return equipment

    def get_equipment(self, equipment_id: str | EquipmentId) -> Equipment:
        """Return equipment by ID.

        Raises:
            InvalidIdentifierError: If the equipment_id is not a valid UUID.
            EquipmentNotFoundError: If the equipment does not exist.
        """
        parsed = parse_id(EquipmentId, equipment_id, "equipment")
        equipment = self._equipment.get(parsed)
        if equipment is None:
            raise EquipmentNotFoundError(str(parsed))
        return equipment

    def list_available_equipment(self, category: str | None = None) -> list[Equipment]:
        """Return equipment that can be rented right now, optionally by category."""
        if category is None:
            return self._equipment.find_available()
        return [item for item in self._equipment.find_by_category(category) if item.can_be_rented]

    def update_condition(
        self, equipment_id: str | EquipmentId, condition: EquipmentCondition
    ) -> Equipment:
        parsed = parse_id(EquipmentId, equipment_id, "equipment")
        with self._lock.hold(parsed):
            equipment = self.get_equipment(parsed).update_condition(condition)
            self._equipment.save(equipment)
        logger.info("Equipment %s condition set to %s", parsed, condition.value)
        if condition.needs_repair:
            logger.warning("Equipment %s is damaged and needs repair", parsed)
        return equipment

    def update_daily_rate(self, equipment_id: str | EquipmentId, daily_rate: Money) -> Equipment:
        parsed = parse_id(EquipmentId, equipment_id, "equipment")
        with self._lock.hold(parsed):
            equipment = self.get_equipment(parsed).update_daily_rate(daily_rate)
            self._equipment.save(equipment)
        logger.info("Equipment %s daily rate set to %s", parsed, daily_rate)
        return equipment

    def record_maintenance(
        self, equipment_id: str | EquipmentId, performed_on: date | None = None
    ) -> Equipment:
        parsed = parse_id(EquipmentId, equipment_id, "equipment")
        with self._lock.hold(parsed):
            equipment = self.get_equipment(parsed).record_maintenance(
                performed_on or self._clock().date()
            )
            self._equipment.save(equipment)
        logger.info("Recorded maintenance for equipment %s", parsed)
        return equipment

    def list_needing_maintenance(self) -> list[Equipment]:
        now = self._clock()
        interval = rental_settings.MAINTENANCE_INTERVAL_DAYS
        return [
            item for item in self._equipment.list_all() if item.needs_maintenance(now, interval)
        ]
