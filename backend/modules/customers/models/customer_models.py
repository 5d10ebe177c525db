# backend/modules/customers/models/customer_models.py

from sqlalchemy import (Column, Integer, String, ForeignKey, Float,
                        Numeric, Text, Boolean)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin


class Customer(Base, TimestampMixin):
    """Customer identified by phone number, created on first order"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)

    # Running totals, incremented with every order
    total_orders = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(12, 2), nullable=False, default=0)

    addresses = relationship("CustomerAddress", back_populates="customer",
                             cascade="all, delete-orphan",
                             order_by="CustomerAddress.id")
    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, phone={self.phone})>"


class CustomerAddress(Base, TimestampMixin):
    """Saved delivery address"""
    __tablename__ = "customer_addresses"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    label = Column(String(50), nullable=True)  # Home, Work, etc.
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    landmark = Column(String(255), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)

    customer = relationship("Customer", back_populates="addresses")
