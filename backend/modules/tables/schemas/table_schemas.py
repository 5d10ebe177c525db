# backend/modules/tables/schemas/table_schemas.py

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime

from modules.orders.enums.order_enums import PaymentMethod
from ..models.table_models import TableSessionStatus, PaymentStatus


# Table session schemas
class TableSessionCreate(BaseModel):
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TableSessionStatusUpdate(BaseModel):
    status: TableSessionStatus
    total_amount: Optional[float] = Field(None, ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TableSessionOut(BaseModel):
    id: int
    table_id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    session_start: datetime
    session_end: Optional[datetime] = None
    status: str
    total_amount: float
    payment_status: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class TableSessionHistoryOut(TableSessionOut):
    order_count: int = 0
    total_paid: float = 0


class TableStatusOut(BaseModel):
    """One floor-plan slot; ``status`` is ``empty`` when no session is active"""

    table_id: int
    status: str
    session_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    session_start: Optional[datetime] = None
    total_amount: float = 0
    payment_status: Optional[str] = None
    active_orders: int = 0


class ClearTableResponse(BaseModel):
    success: bool = True
    message: str
    moved_to_history: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Payment schemas
class TablePaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    transaction_id: Optional[str] = Field(None, max_length=100)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    gateway_response: Optional[Dict[str, Any]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TablePaymentOut(BaseModel):
    id: int
    table_session_id: int
    amount: float
    payment_method: str
    transaction_id: Optional[str] = None
    payment_status: str
    gateway_response: Optional[Dict[str, Any]] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Cart draft schemas
class CartDraftSave(BaseModel):
    cart_items: List[Dict[str, Any]] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CartDraftOut(BaseModel):
    exists: bool
    cart_items: List[Dict[str, Any]] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CartDraftSaveResponse(BaseModel):
    success: bool = True
    message: str


class CartDraftClearResponse(BaseModel):
    success: bool = True
    cleared: int


class CartCacheStats(BaseModel):
    backend: str
    active_drafts: int
    ttl_seconds: int
    table_ids: List[int] = []
