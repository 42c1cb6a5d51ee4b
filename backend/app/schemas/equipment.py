# backend/app/schemas/equipment.py

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.equipment import EquipmentCategory
from .church import ChurchSummary


class EquipmentBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[EquipmentCategory] = None
    price_per_hour: Optional[Decimal] = Field(default=None, ge=0)
    price_per_day: Optional[Decimal] = Field(default=None, ge=0)
    quantity: int = Field(default=1, ge=1)
    images: List[str] = []


class EquipmentCreate(EquipmentBase):
    pass


class EquipmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[EquipmentCategory] = None
    price_per_hour: Optional[Decimal] = Field(default=None, ge=0)
    price_per_day: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=1)
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None


class EquipmentFilters(BaseModel):
    category: Optional[EquipmentCategory] = None
    max_price: Optional[Decimal] = Field(default=None, ge=0)


class EquipmentNested(BaseModel):
    id: int
    church_id: int
    name: str
    category: Optional[EquipmentCategory] = None

    model_config = {
        "from_attributes": True
    }


class EquipmentResponse(EquipmentBase):
    id: int
    church_id: int
    is_available: bool
    created_at: Optional[datetime] = None
    church: Optional[ChurchSummary] = None

    model_config = {
        "from_attributes": True
    }
