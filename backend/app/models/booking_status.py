import enum


class BookingStatus(str, enum.Enum):
    """Lifecycle states of a booking."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that hold a venue or equipment unit for their time window
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)

# Legal edges of the status machine; terminal states have no entry
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
}


class BookingType(str, enum.Enum):
    VENUE = "venue"
    EQUIPMENT = "equipment"
    VENUE_WITH_EQUIPMENT = "venue_with_equipment"

    @property
    def involves_venue(self) -> bool:
        return self in (BookingType.VENUE, BookingType.VENUE_WITH_EQUIPMENT)


class PriceOption(str, enum.Enum):
    """Venue pricing tiers; equipment is always charged per hour."""

    HOURLY = "hourly"
    HALF_DAY = "half_day"
    FULL_DAY = "full_day"
