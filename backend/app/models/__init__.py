from .church import Church
from .venue import Venue, Amenity
from .equipment import Equipment, EquipmentCategory
from .booking import Booking, BookingEquipment
from .booking_status import (
    ACTIVE_STATUSES,
    ALLOWED_TRANSITIONS,
    BookingStatus,
    BookingType,
    PriceOption,
)

__all__ = [
    "Church",
    "Venue",
    "Amenity",
    "Equipment",
    "EquipmentCategory",
    "Booking",
    "BookingEquipment",
    "BookingStatus",
    "BookingType",
    "PriceOption",
    "ACTIVE_STATUSES",
    "ALLOWED_TRANSITIONS",
]
