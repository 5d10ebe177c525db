# backend/modules/settings/services/settings_service.py

"""
Key/value restaurant settings.

Rows in ``restaurant_settings`` override the configured defaults; a missing
or unparsable row falls back to ``core.config.settings``.
"""

from typing import Dict, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from core.config import settings
from core.database_utils import atomic
from core.exceptions import ValidationError
from modules.realtime.events import EventPublisher, RealtimeEvent, notify
from ..models.settings_models import RestaurantSetting

logger = logging.getLogger(__name__)

TABLE_COUNT_KEY = "table_count"
RESTAURANT_NAME_KEY = "restaurant_name"
RESTAURANT_LATITUDE_KEY = "restaurant_latitude"
RESTAURANT_LONGITUDE_KEY = "restaurant_longitude"


def _get_row(db: Session, key: str) -> Optional[RestaurantSetting]:
    return (
        db.query(RestaurantSetting)
        .filter(RestaurantSetting.setting_key == key)
        .first()
    )


async def get_setting(
    db: Session, key: str, default: Optional[str] = None
) -> Optional[str]:
    row = _get_row(db, key)
    if row is None or row.setting_value is None:
        return default
    return row.setting_value


async def set_setting(db: Session, key: str, value: str) -> RestaurantSetting:
    """Insert or update a setting and commit"""
    with atomic(db, f"save setting {key}"):
        row = _get_row(db, key)
        if row is None:
            row = RestaurantSetting(setting_key=key, setting_value=value)
            db.add(row)
        else:
            row.setting_value = value
    db.refresh(row)
    logger.info(f"Setting {key} saved")
    return row


async def get_all_settings(db: Session) -> Dict[str, Optional[str]]:
    rows = db.query(RestaurantSetting).order_by(RestaurantSetting.setting_key).all()
    return {row.setting_key: row.setting_value for row in rows}


async def get_table_count(db: Session) -> int:
    raw = await get_setting(db, TABLE_COUNT_KEY)
    if raw is None:
        return settings.default_table_count
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Stored table count {raw!r} is not an integer, using default")
        return settings.default_table_count


async def set_table_count(
    db: Session, table_count: int, publisher: EventPublisher
) -> int:
    if table_count < 1 or table_count > settings.max_table_count:
        raise ValidationError(
            f"Table count must be between 1 and {settings.max_table_count}"
        )

    await set_setting(db, TABLE_COUNT_KEY, str(table_count))
    logger.info(f"Table count set to {table_count}")

    await notify(publisher, RealtimeEvent.SETTINGS_UPDATED, {"table_count": table_count})
    return table_count


async def get_restaurant_origin(db: Session) -> Tuple[float, float]:
    """Restaurant coordinates used as the origin for delivery distances"""
    latitude = settings.restaurant_latitude
    longitude = settings.restaurant_longitude

    raw_lat = await get_setting(db, RESTAURANT_LATITUDE_KEY)
    raw_lon = await get_setting(db, RESTAURANT_LONGITUDE_KEY)
    if raw_lat is not None and raw_lon is not None:
        try:
            latitude, longitude = float(raw_lat), float(raw_lon)
        except ValueError:
            logger.warning("Stored restaurant coordinates are invalid, using configured origin")

    return latitude, longitude
