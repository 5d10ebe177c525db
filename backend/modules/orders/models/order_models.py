from sqlalchemy import (Column, Integer, String, ForeignKey, DateTime,
                        Float, Numeric, Text)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin
from ..enums.order_enums import OrderStatus, OrderType, PaymentMethod


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), nullable=False, unique=True, index=True)
    order_type = Column(String(20), nullable=False,
                        default=OrderType.DINE_IN.value, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"),
                         nullable=True, index=True)

    # Snapshot of the customer at order time
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)

    # Dine-in
    table_id = Column(Integer, nullable=True, index=True)
    table_session_id = Column(Integer,
                              ForeignKey("table_sessions.id", ondelete="SET NULL"),
                              nullable=True, index=True)

    # Delivery
    delivery_address = Column(Text, nullable=True)
    delivery_latitude = Column(Float, nullable=True)
    delivery_longitude = Column(Float, nullable=True)
    delivery_landmark = Column(String(255), nullable=True)
    delivery_distance = Column(Numeric(6, 2), nullable=True)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)

    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    status = Column(String(20), nullable=False,
                    default=OrderStatus.PENDING.value, index=True)
    payment_method = Column(String(20), nullable=False,
                            default=PaymentMethod.CASH.value)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    items = relationship("OrderItem", back_populates="order",
                         cascade="all, delete-orphan",
                         passive_deletes=True,
                         order_by="OrderItem.id")
    customer = relationship("Customer", back_populates="orders")
    table_session = relationship("TableSession", back_populates="orders")

    @property
    def is_delivery(self) -> bool:
        return self.order_type == OrderType.DELIVERY.value

    def __repr__(self):
        return f"<Order({self.order_number}, {self.status})>"


class OrderItem(Base, TimestampMixin):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"),
                      nullable=False, index=True)

    # Menu snapshot, kept readable after the menu changes
    menu_item_id = Column(String(50), nullable=True)
    item_name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)

    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    special_instructions = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
