# backend/app/schemas/church.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ChurchBase(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip_code: Optional[str] = None
    description: Optional[str] = None


class ChurchCreate(ChurchBase):
    password: str


class ChurchLogin(BaseModel):
    email: EmailStr
    password: str


class ChurchSummary(BaseModel):
    """Public contact card shown next to listings and bookings."""

    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class ChurchProfile(BaseModel):
    """Directory entry; never carries credentials or the admin flag."""

    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip_code: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class ChurchResponse(ChurchBase):
    id: int
    is_admin: bool = False
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    church: ChurchResponse


# Claims carried in the JWT ("sub" is the church id)
class TokenData(BaseModel):
    church_id: Optional[int] = None
    is_admin: bool = False
