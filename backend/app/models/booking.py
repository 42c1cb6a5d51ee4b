# backend/app/models/booking.py

from sqlalchemy import Column, Integer, DateTime, Numeric, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .booking_status import BookingStatus, BookingType, PriceOption
from .types import CaseInsensitiveEnum


class Booking(BaseModel):
    __tablename__ = "bookings"
    __table_args__ = (CheckConstraint("end_date > start_date", name="ck_booking_window"),)

    id           = Column(Integer, primary_key=True, index=True)
    # The booking church; owners are resolved through the venue or equipment
    church_id    = Column(Integer, ForeignKey("churches.id"), nullable=False, index=True)
    venue_id     = Column(Integer, ForeignKey("venues.id"), nullable=True, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=True, index=True)
    booking_type = Column(CaseInsensitiveEnum(BookingType, name="bookingtype"), nullable=False)
    start_date   = Column(DateTime, nullable=False, index=True)
    end_date     = Column(DateTime, nullable=False, index=True)
    price_option = Column(
        CaseInsensitiveEnum(PriceOption, name="priceoption"),
        nullable=False,
        default=PriceOption.HOURLY,
    )
    total_price  = Column(Numeric(10, 2), nullable=False)
    status       = Column(
        CaseInsensitiveEnum(BookingStatus, name="bookingstatus"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    notes        = Column(Text, nullable=True)

    # Relationships
    church    = relationship("Church", foreign_keys=[church_id], back_populates="bookings")
    venue     = relationship("Venue", back_populates="bookings")
    equipment = relationship("Equipment", back_populates="bookings")
    equipment_items = relationship(
        "BookingEquipment",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def owner_church_id(self) -> int | None:
        """The church that listed the booked venue, else the equipment."""
        if self.venue is not None:
            return self.venue.church_id
        if self.equipment is not None:
            return self.equipment.church_id
        return None

    @property
    def item_name(self) -> str | None:
        if self.venue is not None:
            return self.venue.name
        if self.equipment is not None:
            return self.equipment.name
        return None


class BookingEquipment(BaseModel):
    """Equipment add-on attached to a venue_with_equipment booking."""

    __tablename__ = "booking_equipment"

    id           = Column(Integer, primary_key=True, index=True)
    booking_id   = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False, index=True)
    quantity     = Column(Integer, nullable=False, default=1)

    booking   = relationship("Booking", back_populates="equipment_items")
    equipment = relationship("Equipment")
