# backend/modules/delivery/schemas/delivery_schemas.py

from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class DeliveryZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    delivery_fee: float = Field(0, ge=0)
    estimated_time: Optional[str] = Field(None, max_length=50)
    max_distance: float = Field(..., gt=0, description="Upper bound in kilometers")
    min_order_amount: float = Field(0, ge=0)
    active: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DeliveryZoneOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    delivery_fee: float
    estimated_time: Optional[str] = None
    max_distance: float
    min_order_amount: float
    active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class DeliveryQuoteOut(BaseModel):
    distance_km: Optional[float] = None
    delivery_fee: float
    deliverable: bool
    zone: Optional[DeliveryZoneOut] = None
