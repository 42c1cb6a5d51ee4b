"""Price computation for bookings.

All arithmetic is Decimal; only the final total is rounded to cents so
per-hour fractions of daily equipment rates do not accumulate rounding
error.
"""

from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from ..models import BookingType, Equipment, PriceOption, Venue

_CENT = Decimal("0.01")
_ZERO = Decimal("0")
HALF_DAY_HOURS = 4
FULL_DAY_HOURS = 8


def billable_hours(start: datetime, end: datetime) -> int:
    """Whole hours charged for a window; any started hour counts."""
    return math.ceil((end - start).total_seconds() / 3600)


def _money(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def venue_price(venue: Venue, option: PriceOption, hours: int) -> Decimal:
    per_hour = _money(venue.price_per_hour) or _ZERO
    if option == PriceOption.HALF_DAY:
        flat = _money(venue.price_per_half_day)
        return flat if flat is not None else per_hour * HALF_DAY_HOURS
    if option == PriceOption.FULL_DAY:
        flat = _money(venue.price_per_day)
        return flat if flat is not None else per_hour * FULL_DAY_HOURS
    return per_hour * hours


def hourly_equivalent(equipment: Equipment) -> Decimal:
    """Hourly rate, or the daily rate spread over 24 hours."""
    per_hour = _money(equipment.price_per_hour)
    if per_hour is not None:
        return per_hour
    per_day = _money(equipment.price_per_day)
    if per_day is not None:
        return per_day / 24
    return _ZERO


def equipment_price(equipment: Equipment, hours: int) -> Decimal:
    return hourly_equivalent(equipment) * hours


def compute_total_price(
    booking_type: BookingType,
    start: datetime,
    end: datetime,
    option: PriceOption = PriceOption.HOURLY,
    venue: Optional[Venue] = None,
    equipment: Optional[Equipment] = None,
    add_ons: Iterable[Equipment] = (),
) -> Decimal:
    """Total for a booking, rounded half-up to cents."""
    hours = billable_hours(start, end)
    if booking_type == BookingType.EQUIPMENT:
        if equipment is None:
            raise ValueError("equipment booking priced without equipment")
        total = equipment_price(equipment, hours)
    else:
        if venue is None:
            raise ValueError("venue booking priced without venue")
        total = venue_price(venue, option, hours)
        if booking_type == BookingType.VENUE_WITH_EQUIPMENT:
            total += sum((equipment_price(item, hours) for item in add_ons), _ZERO)
    return total.quantize(_CENT, rounding=ROUND_HALF_UP)
