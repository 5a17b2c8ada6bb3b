"""Tests for airport zone lookups."""

import pytest

from skyguard.safety.geodesy import haversine_distance
from skyguard.safety.zones import UNKNOWN_ZONE, AirportRef, SafetyZone, ZoneIndex

from conftest import FRA_LAT, FRA_LON


class TestResolveZone:

    def test_airport_center_is_terminal_zone(self, frankfurt_zones):
        """Concentric zones resolve to the tightest one containing the point."""
        zone = frankfurt_zones.resolve_zone(FRA_LAT, FRA_LON)

        assert zone.in_zone is True
        assert zone.zone_name == 'Terminal Zone'
        assert zone.airport_name == 'Frankfurt Airport'
        assert zone.airport_code == 'EDDF'
        assert zone.distance_km == 0

    def test_approach_zone(self, frankfurt_zones):
        # ~5.5 km north of the airport
        zone = frankfurt_zones.resolve_zone(FRA_LAT + 0.05, FRA_LON)

        assert zone.in_zone is True
        assert zone.zone_name == 'Approach Zone'
        assert zone.distance_km == pytest.approx(5.56, abs=0.01)

    def test_outside_reports_nearest_airport(self, frankfurt_zones):
        zone = frankfurt_zones.resolve_zone(50.25, 8.75)

        expected = round(haversine_distance(50.25, 8.75, FRA_LAT, FRA_LON), 2)
        assert zone.in_zone is False
        assert zone.zone_name is None
        assert zone.airport_name == 'Frankfurt Airport'
        assert zone.distance_km == expected

    def test_radius_bounds(self):
        airport = AirportRef('EDDF', 'Frankfurt Airport', FRA_LAT, FRA_LON)
        distance_m = haversine_distance(FRA_LAT, FRA_LON, FRA_LAT + 0.01, FRA_LON) * 1000
        index = ZoneIndex([airport], [
            SafetyZone('Edge', airport.name, airport.code, FRA_LAT, FRA_LON, distance_m),
        ])

        assert index.is_in_zone(FRA_LAT + 0.0101, FRA_LON) is False
        assert index.is_in_zone(FRA_LAT + 0.0099, FRA_LON) is True

    def test_nearest_of_several_airports(self, frankfurt_zones):
        munich = AirportRef('EDDM', 'Munich Airport', 48.3538, 11.7861)
        index = ZoneIndex(frankfurt_zones.airports + [munich], frankfurt_zones.zones)

        zone = index.resolve_zone(48.5, 11.5)
        assert zone.in_zone is False
        assert zone.airport_code == 'EDDM'

    def test_empty_index(self):
        index = ZoneIndex([], [])
        assert index.resolve_zone(50.0, 8.0) == UNKNOWN_ZONE
        assert index.nearest_airport(50.0, 8.0) == (None, None)


class TestSafetyZone:

    @pytest.mark.parametrize('radius', [0, -100])
    def test_radius_must_be_positive(self, radius):
        with pytest.raises(ValueError):
            SafetyZone('Bad', 'Frankfurt Airport', 'EDDF', FRA_LAT, FRA_LON, radius)


class TestFromSession:

    def test_loads_seeded_zones(self, session_factory):
        index = ZoneIndex.from_session(session_factory)

        assert index.stats == {'airports': 1, 'zones': 2}
        assert [z.name for z in index.zones_for('EDDF')] == ['Approach Zone', 'Terminal Zone']
        assert index.zones_for('EDDM') == []

    def test_to_dict(self, frankfurt_zones):
        data = frankfurt_zones.resolve_zone(FRA_LAT, FRA_LON).to_dict()
        assert set(data) == {'in_zone', 'airport_name', 'airport_code', 'zone_name', 'distance_km'}
