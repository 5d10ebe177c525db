# backend/modules/delivery/services/delivery_zone_service.py

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from core.config import settings
from core.database_utils import atomic
from modules.settings.services.settings_service import get_restaurant_origin
from ..models.delivery_models import DeliveryZone
from ..schemas.delivery_schemas import DeliveryZoneCreate
from .geo_service import distance_km, parse_coordinates, resolve_zone

logger = logging.getLogger(__name__)


@dataclass
class DeliveryQuote:
    """Distance and zone pricing for one delivery destination"""

    distance_km: Optional[float]
    zone: Optional[DeliveryZone]
    delivery_fee: Decimal
    deliverable: bool


async def list_active_zones(db: Session) -> List[DeliveryZone]:
    return (
        db.query(DeliveryZone)
        .filter(DeliveryZone.active.is_(True))
        .order_by(DeliveryZone.max_distance.asc())
        .all()
    )


async def list_zones(db: Session) -> List[DeliveryZone]:
    return db.query(DeliveryZone).order_by(DeliveryZone.max_distance.asc()).all()


async def create_zone(db: Session, zone_data: DeliveryZoneCreate) -> DeliveryZone:
    zone = DeliveryZone(
        name=zone_data.name,
        description=zone_data.description,
        delivery_fee=Decimal(str(zone_data.delivery_fee)),
        estimated_time=zone_data.estimated_time,
        max_distance=Decimal(str(zone_data.max_distance)),
        min_order_amount=Decimal(str(zone_data.min_order_amount)),
        active=zone_data.active,
    )
    with atomic(db, "create delivery zone"):
        db.add(zone)
    db.refresh(zone)

    logger.info(f"Created delivery zone {zone.name} up to {zone.max_distance} km")
    return zone


async def seed_default_zones(
    db: Session, zones: Optional[Iterable[Dict[str, Any]]] = None
) -> int:
    """Insert the configured zones when the table is empty"""
    if db.query(DeliveryZone.id).first() is not None:
        return 0

    zones = list(zones if zones is not None else settings.default_delivery_zones)
    with atomic(db, "seed delivery zones"):
        for zone in zones:
            db.add(DeliveryZone(**zone))

    logger.info(f"Seeded {len(zones)} default delivery zones")
    return len(zones)


async def quote_delivery(db: Session, latitude: Any, longitude: Any) -> DeliveryQuote:
    """
    Price a delivery from the restaurant to the given coordinates.

    Unusable coordinates and an empty zone table both price as free and
    deliverable. A distance beyond every active zone is not deliverable.
    """
    coordinates = parse_coordinates(latitude, longitude)
    if coordinates is None:
        return DeliveryQuote(
            distance_km=None, zone=None, delivery_fee=Decimal("0"), deliverable=True
        )

    origin_lat, origin_lon = await get_restaurant_origin(db)
    raw_distance = distance_km(origin_lat, origin_lon, *coordinates)
    distance = round(raw_distance, 2)

    zones = await list_active_zones(db)
    if not zones:
        return DeliveryQuote(
            distance_km=distance, zone=None, delivery_fee=Decimal("0"), deliverable=True
        )

    zone = resolve_zone(raw_distance, zones)
    if zone is None:
        logger.info(f"No delivery zone covers {distance} km")
        return DeliveryQuote(
            distance_km=distance, zone=None, delivery_fee=Decimal("0"), deliverable=False
        )

    return DeliveryQuote(
        distance_km=distance,
        zone=zone,
        delivery_fee=Decimal(zone.delivery_fee),
        deliverable=True,
    )
