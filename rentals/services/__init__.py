from rentals.services.equipment_service import EquipmentService
from rentals.services.member_service import MemberService
from rentals.services.rental_service import RentalService
from rentals.services.reservation_service import ReservationReceipt, ReservationService

__all__ = [
    "EquipmentService",
    "MemberService",
    "RentalService",
    "ReservationReceipt",
    "ReservationService",
]
