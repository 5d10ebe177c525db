import logging
import time
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import settings
from core.mixins import utcnow
from ..models.order_models import Order

logger = logging.getLogger(__name__)


def restaurant_now(at: Optional[datetime] = None) -> datetime:
    """
    Wall-clock time at the restaurant for a naive UTC instant (default now).

    Order numbers follow the restaurant's calendar day, not UTC.
    """
    instant = (at or utcnow()).replace(tzinfo=timezone.utc)
    local = instant.astimezone(ZoneInfo(settings.restaurant_timezone))
    return local.replace(tzinfo=None)


def order_number_prefix(day: datetime) -> str:
    return f"{settings.order_number_prefix}-{day.strftime('%Y%m%d')}-"


def fallback_order_number(prefix: str) -> str:
    return f"{prefix}{int(time.time() * 1000) % 1_000_000:06d}"


def generate_order_number(
    db: Session, now: Optional[datetime] = None, fallback: bool = False
) -> str:
    """
    Next free ``FZ-YYYYMMDD-NNN`` number for the restaurant's day.

    Starts from the count of numbers already issued today and counts
    upwards. When every candidate is taken, or ``fallback`` is set, the suffix
    is built from the millisecond clock so that the order can still be
    placed. The unique index on ``orders.order_number`` remains the final
    arbiter.
    """
    prefix = order_number_prefix(now or restaurant_now())
    if fallback:
        return fallback_order_number(prefix)

    issued_today = (
        db.query(func.count(Order.id))
        .filter(Order.order_number.like(f"{prefix}%"))
        .scalar()
    ) or 0

    for attempt in range(1, settings.order_number_max_attempts + 1):
        candidate = f"{prefix}{issued_today + attempt:03d}"
        taken = db.query(Order.id).filter(Order.order_number == candidate).first()
        if taken is None:
            return candidate

    number = fallback_order_number(prefix)
    logger.warning(
        f"No free order number after {settings.order_number_max_attempts} attempts, "
        f"using {number}"
    )
    return number
