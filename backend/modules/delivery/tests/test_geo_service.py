# backend/modules/delivery/tests/test_geo_service.py

"""
Tests for great-circle distance and zone resolution
"""

import math
from dataclasses import dataclass
from decimal import Decimal

import pytest

from ..services.geo_service import (
    EARTH_RADIUS_KM,
    distance_km,
    parse_coordinates,
    resolve_zone,
)


@dataclass
class Zone:
    name: str
    max_distance: Decimal
    delivery_fee: Decimal


ZONES = [
    Zone("Zone 1", Decimal("1"), Decimal("0")),
    Zone("Zone 2", Decimal("2"), Decimal("30")),
    Zone("Zone 3", Decimal("5"), Decimal("50")),
]


class TestDistanceKm:
    def test_same_point_is_zero(self):
        assert distance_km(27.6710, 85.4298, 27.6710, 85.4298) == 0

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_KM * math.pi / 180
        assert distance_km(0, 0, 1, 0) == pytest.approx(expected, rel=1e-12)
        assert distance_km(0, 0, 1, 0) == pytest.approx(111.1949, abs=1e-3)

    def test_quarter_circumference(self):
        assert distance_km(0, 0, 0, 90) == pytest.approx(
            EARTH_RADIUS_KM * math.pi / 2, rel=1e-12
        )

    def test_symmetric(self):
        there = distance_km(27.6710, 85.4298, 27.7172, 85.3240)
        back = distance_km(27.7172, 85.3240, 27.6710, 85.4298)
        assert there == pytest.approx(back)

    def test_antipodal_points(self):
        assert distance_km(0, 0, 0, 180) == pytest.approx(EARTH_RADIUS_KM * math.pi)


class TestResolveZone:
    def test_distance_within_second_tier(self):
        """1.5 km falls in the 2 km tier"""
        zone = resolve_zone(1.5, ZONES)
        assert zone.name == "Zone 2"
        assert zone.delivery_fee == Decimal("30")

    def test_zero_distance_resolves_to_nearest_zone(self):
        assert resolve_zone(0, ZONES).name == "Zone 1"

    def test_boundary_is_inclusive(self):
        assert resolve_zone(1.0, ZONES).name == "Zone 1"
        assert resolve_zone(5.0, ZONES).name == "Zone 3"

    def test_beyond_every_zone(self):
        assert resolve_zone(5.01, ZONES) is None

    def test_no_zones(self):
        assert resolve_zone(0.5, []) is None

    def test_unsorted_zones(self):
        shuffled = [ZONES[2], ZONES[0], ZONES[1]]
        assert resolve_zone(0.7, shuffled).name == "Zone 1"
        assert resolve_zone(1.7, shuffled).name == "Zone 2"

    def test_fee_never_decreases_with_distance(self):
        fees = []
        distance = 0.0
        while distance <= 5.0:
            fees.append(resolve_zone(distance, ZONES).delivery_fee)
            distance = round(distance + 0.25, 2)
        assert fees == sorted(fees)


class TestParseCoordinates:
    def test_numbers(self):
        assert parse_coordinates(27.68, 85.43) == (27.68, 85.43)

    def test_numeric_strings(self):
        assert parse_coordinates("27.68", " 85.43 ") == (27.68, 85.43)

    @pytest.mark.parametrize(
        "latitude,longitude",
        [
            (None, None),
            (None, 85.43),
            ("", ""),
            ("abc", 85.43),
            (27.68, "nan"),
            (95.0, 85.43),
            (27.68, -181),
            (True, 85.43),
        ],
    )
    def test_unusable_values(self, latitude, longitude):
        assert parse_coordinates(latitude, longitude) is None
