# backend/modules/delivery/services/geo_service.py

"""
Great-circle distance and distance-tier lookup.

Pure functions with no database access; ``delivery_zone_service`` feeds
them the restaurant origin and the active zones.
"""

import logging
import math
from typing import Any, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

Zone = TypeVar("Zone")


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometers between two WGS-84 points"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def resolve_zone(distance: float, zones: Sequence[Zone]) -> Optional[Zone]:
    """
    Return the first zone, by ascending ``max_distance``, that covers
    ``distance``.

    Zones are sorted here so callers may pass them in any order. Returns
    None when the distance is beyond every zone.
    """
    for zone in sorted(zones, key=lambda z: float(z.max_distance)):
        if float(zone.max_distance) >= distance:
            return zone
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def parse_coordinates(latitude: Any, longitude: Any) -> Optional[Tuple[float, float]]:
    """
    Coerce raw request coordinates into a ``(lat, lon)`` pair.

    Missing, non-numeric or out-of-range values return None; a delivery
    without usable coordinates is priced as zero distance by the caller.
    """
    if latitude is None and longitude is None:
        return None

    lat = _to_float(latitude)
    lon = _to_float(longitude)
    if lat is None or lon is None:
        logger.warning(f"Ignoring malformed coordinates ({latitude!r}, {longitude!r})")
        return None

    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        logger.warning(f"Ignoring out-of-range coordinates ({lat}, {lon})")
        return None

    return lat, lon
