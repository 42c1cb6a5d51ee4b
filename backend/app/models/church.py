# backend/app/models/church.py

from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class Church(BaseModel):
    __tablename__ = "churches"

    id          = Column(Integer, primary_key=True, index=True)
    name        = Column(String, nullable=False)
    email       = Column(String, unique=True, index=True, nullable=False)
    password    = Column(String, nullable=False)
    phone       = Column(String, nullable=True)
    address     = Column(String, nullable=True)
    city        = Column(String, nullable=True)
    province    = Column(String, nullable=True)
    zip_code    = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    is_admin    = Column(Boolean, default=False, nullable=False)

    venues = relationship("Venue", back_populates="church")
    equipment = relationship("Equipment", back_populates="church")
    bookings = relationship(
        "Booking",
        foreign_keys="Booking.church_id",
        back_populates="church",
    )

    def __repr__(self):
        return f"Church(id={self.id!r}, email={self.email!r})"
