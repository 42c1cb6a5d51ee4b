# backend/app/schemas/venue.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.venue import Amenity
from .church import ChurchSummary


class VenueBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    price_per_hour: Decimal = Field(ge=0)
    price_per_half_day: Optional[Decimal] = Field(default=None, ge=0)
    price_per_day: Optional[Decimal] = Field(default=None, ge=0)
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip_code: Optional[str] = None
    amenities: List[Amenity] = []
    images: List[str] = []


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    # Every field optional; only fields present in the body are applied
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    price_per_hour: Optional[Decimal] = Field(default=None, ge=0)
    price_per_half_day: Optional[Decimal] = Field(default=None, ge=0)
    price_per_day: Optional[Decimal] = Field(default=None, ge=0)
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip_code: Optional[str] = None
    amenities: Optional[List[Amenity]] = None
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None


class VenueFilters(BaseModel):
    city: Optional[str] = None
    province: Optional[str] = None
    min_capacity: Optional[int] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)


class VenueNested(BaseModel):
    id: int
    church_id: int
    name: str
    price_per_hour: Decimal

    model_config = {
        "from_attributes": True
    }


class VenueResponse(VenueBase):
    id: int
    church_id: int
    is_available: bool
    created_at: Optional[datetime] = None
    church: Optional[ChurchSummary] = None

    model_config = {
        "from_attributes": True
    }
