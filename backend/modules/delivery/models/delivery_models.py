# backend/modules/delivery/models/delivery_models.py

from sqlalchemy import Boolean, Column, Integer, Numeric, String, Text

from core.database import Base
from core.mixins import TimestampMixin


class DeliveryZone(Base, TimestampMixin):
    """Distance tier: orders up to ``max_distance`` km pay ``delivery_fee``"""

    __tablename__ = "delivery_zones"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    estimated_time = Column(String(50), nullable=True)
    max_distance = Column(Numeric(6, 2), nullable=False, index=True)
    min_order_amount = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<DeliveryZone({self.name}, <= {self.max_distance} km)>"
