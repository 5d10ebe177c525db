# backend/modules/settings/models/settings_models.py

from sqlalchemy import Column, Integer, String, Text

from core.database import Base
from core.mixins import TimestampMixin


class RestaurantSetting(Base, TimestampMixin):
    """Single key/value setting; values are stored as text"""

    __tablename__ = "restaurant_settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), nullable=False, unique=True, index=True)
    setting_value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<RestaurantSetting({self.setting_key}={self.setting_value!r})>"
