# backend/modules/customers/schemas/customer_schemas.py

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class CustomerOut(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    total_orders: int
    total_spent: float
    created_at: datetime
    last_order_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerAddressCreate(BaseModel):
    label: Optional[str] = Field(None, max_length=50)
    address: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    landmark: Optional[str] = Field(None, max_length=255)
    is_default: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Address cannot be blank")
        return v.strip()


class CustomerAddressOut(BaseModel):
    id: int
    customer_id: int
    label: Optional[str] = None
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    landmark: Optional[str] = None
    is_default: bool
    created_at: datetime

    class Config:
        from_attributes = True
