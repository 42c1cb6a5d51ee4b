from pydantic import BaseModel, Field
from typing import Optional, List, Annotated
from datetime import datetime
from decimal import Decimal

from ..models.booking_status import BookingStatus, BookingType, PriceOption
from .church import ChurchSummary
from .venue import VenueNested
from .equipment import EquipmentNested


# Properties to receive on booking creation (from the booking church).
# Values stay loosely typed here; the booking engine validates them so the
# caller gets one error naming the offending field.
class BookingCreate(BaseModel):
    booking_type: Optional[str] = None
    venue_id: Optional[int] = None
    equipment_id: Optional[int] = None
    equipment_ids: Optional[List[int]] = None
    start_date: Optional[str | datetime] = None
    end_date: Optional[str | datetime] = None
    price_option: Optional[str] = None
    notes: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: Optional[str] = None


class BookingCreated(BaseModel):
    id: int
    message: str = "Booking created successfully"


class MessageResponse(BaseModel):
    message: str


class BookingEquipmentResponse(BaseModel):
    equipment_id: int
    quantity: int
    equipment: Optional[EquipmentNested] = None

    model_config = {
        "from_attributes": True
    }


# Properties to return to both bookers and owners
class BookingResponse(BaseModel):
    id: int
    church_id: int
    venue_id: Optional[int] = None
    equipment_id: Optional[int] = None
    booking_type: BookingType
    start_date: datetime
    end_date: datetime
    price_option: PriceOption
    total_price: Annotated[Decimal, Field()]
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    owner_church_id: Optional[int] = None
    item_name: Optional[str] = None

    church: Optional[ChurchSummary] = None
    venue: Optional[VenueNested] = None
    equipment: Optional[EquipmentNested] = None
    equipment_items: List[BookingEquipmentResponse] = []

    model_config = {
        "from_attributes": True
    }


class AdminStats(BaseModel):
    churches: int
    venues: int
    equipment: int
    bookings: int
    pending_bookings: int
