from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime
from ..enums.order_enums import OrderStatus, OrderType, PaymentMethod


class OrderItemCreate(BaseModel):
    menu_item_id: Optional[Union[int, str]] = Field(
        None, validation_alias=AliasChoices("menuItemId", "menu_item_id", "id")
    )
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    special_instructions: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Item name cannot be blank")
        return v.strip()


class DeliveryCoordinates(BaseModel):
    latitude: Optional[Union[float, str]] = None
    longitude: Optional[Union[float, str]] = None
    landmark: Optional[str] = None


class OrderCreate(BaseModel):
    """
    Cart submission from the ordering app.

    Accepts the app's camelCase body (``customerName``, ``tableId``,
    ``address``, ``coordinates``, ``deliveryNotes``) as well as the field
    names. ``customer_name``, ``phone`` and ``items`` are checked by the
    order builder so that direct callers get the same error as HTTP
    clients. A ``table_id`` of ``"Delivery"`` is treated as a delivery order.
    """
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    items: List[OrderItemCreate] = Field(default_factory=list)
    order_type: Optional[OrderType] = None
    table_id: Optional[Union[int, str]] = None

    delivery_address: Optional[str] = Field(
        None, validation_alias=AliasChoices("deliveryAddress", "delivery_address", "address")
    )
    delivery_latitude: Optional[Union[float, str]] = None
    delivery_longitude: Optional[Union[float, str]] = None
    delivery_landmark: Optional[str] = None
    delivery_fee: Optional[float] = Field(None, ge=0)
    coordinates: Optional[DeliveryCoordinates] = None

    discount: float = 0
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = Field(
        None, validation_alias=AliasChoices("notes", "deliveryNotes", "delivery_notes")
    )

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @model_validator(mode="after")
    def unpack_coordinates(self):
        if self.coordinates is not None:
            if self.delivery_latitude is None:
                self.delivery_latitude = self.coordinates.latitude
            if self.delivery_longitude is None:
                self.delivery_longitude = self.coordinates.longitude
            if self.delivery_landmark is None:
                self.delivery_landmark = self.coordinates.landmark
        return self


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    menu_item_id: Optional[str] = None
    item_name: str
    category: Optional[str] = None
    price: float
    quantity: int
    subtotal: float
    special_instructions: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    order_number: str
    order_type: OrderType
    customer_id: Optional[int] = None
    customer_name: str
    customer_phone: str
    table_id: Optional[int] = None
    table_session_id: Optional[int] = None
    delivery_address: Optional[str] = None
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    delivery_landmark: Optional[str] = None
    delivery_distance: Optional[float] = None
    delivery_fee: float
    subtotal: float
    discount: float
    total: float
    status: str
    payment_method: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    items: List[OrderItemOut] = []

    class Config:
        from_attributes = True


class OrderCreateResponse(BaseModel):
    success: bool = True
    message: str
    order: OrderOut


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderStatusResponse(BaseModel):
    success: bool = True
    message: str
    order: OrderOut


class OrderDeleteRequest(BaseModel):
    password: str = ""


class OrderDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_order: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AdminAuthRequest(BaseModel):
    password: str = ""


class AdminAuthResponse(BaseModel):
    success: bool = True
    message: str
