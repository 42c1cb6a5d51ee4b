# backend/app/models/venue.py
import enum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import JSONEncodedList


class Amenity(str, enum.Enum):
    """Tags a church can attach to a venue listing."""

    WIFI = "wifi"
    PARKING = "parking"
    RESTROOMS = "restrooms"
    KITCHEN = "kitchen"
    SOUND_SYSTEM = "sound_system"
    PROJECTOR = "projector"
    AIR_CONDITIONING = "air_conditioning"
    WHEELCHAIR_ACCESS = "wheelchair_access"


class Venue(BaseModel):
    __tablename__ = "venues"

    id                 = Column(Integer, primary_key=True, index=True)
    church_id          = Column(Integer, ForeignKey("churches.id"), nullable=False, index=True)
    name               = Column(String, nullable=False)
    description        = Column(Text, nullable=True)
    capacity           = Column(Integer, nullable=True)
    price_per_hour     = Column(Numeric(10, 2), nullable=False)
    price_per_half_day = Column(Numeric(10, 2), nullable=True)
    price_per_day      = Column(Numeric(10, 2), nullable=True)
    address            = Column(String, nullable=True)
    city               = Column(String, nullable=True)
    province           = Column(String, nullable=True)
    zip_code           = Column(String, nullable=True)
    amenities          = Column(JSONEncodedList, nullable=True)
    images             = Column(JSONEncodedList, nullable=True)
    is_available       = Column(Boolean, default=True, nullable=False)

    church   = relationship("Church", back_populates="venues")
    bookings = relationship("Booking", back_populates="venue")
