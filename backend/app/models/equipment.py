# backend/app/models/equipment.py
import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Enum as SQLAlchemyEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import JSONEncodedList


class EquipmentCategory(str, enum.Enum):
    AUDIO = "Audio"
    VIDEO = "Video"
    LIGHTING = "Lighting"
    STAGING = "Staging"
    OTHER = "Other"


class Equipment(BaseModel):
    __tablename__ = "equipment"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_equipment_quantity_positive"),)

    id             = Column(Integer, primary_key=True, index=True)
    church_id      = Column(Integer, ForeignKey("churches.id"), nullable=False, index=True)
    name           = Column(String, nullable=False)
    description    = Column(Text, nullable=True)
    category       = Column(
        SQLAlchemyEnum(
            EquipmentCategory,
            values_callable=lambda enum: [e.value for e in enum],
            native_enum=False,
        ),
        nullable=True,
    )
    price_per_hour = Column(Numeric(10, 2), nullable=True)
    price_per_day  = Column(Numeric(10, 2), nullable=True)
    # Number of units that can be out on loan at the same time
    quantity       = Column(Integer, nullable=False, default=1)
    images         = Column(JSONEncodedList, nullable=True)
    is_available   = Column(Boolean, default=True, nullable=False)

    church   = relationship("Church", back_populates="equipment")
    bookings = relationship("Booking", back_populates="equipment")
