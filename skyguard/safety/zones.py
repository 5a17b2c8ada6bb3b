"""
Airport zone index for geofenced altitude checks.

Holds a small, static set of circular zones anchored to airports and
answers "which zone (or nearest airport) is this point in?". Distances to
every zone center are computed in one vectorised step; with tens of zones
this is cheaper than maintaining a spatial tree.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from skyguard.models import Airport, Zone
from skyguard.safety.geodesy import distances_to_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AirportRef:
    """Airport center point."""
    code: str
    name: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class SafetyZone:
    """Circular geofence around a point, owned by an airport."""
    name: str
    airport_name: str
    airport_code: str
    latitude: float
    longitude: float
    radius_m: float

    def __post_init__(self):
        if not self.radius_m or self.radius_m <= 0:
            raise ValueError(f'Zone {self.name!r} radius must be > 0, got {self.radius_m}')


@dataclass(frozen=True)
class ZoneResolution:
    """
    Result of a zone lookup.

    When ``in_zone`` is true the names describe the nearest containing zone
    and ``distance_km`` is the distance to its center. Otherwise
    ``zone_name`` is None and the airport fields describe the nearest
    airport (all None when no airport is known).
    """
    in_zone: bool
    airport_name: Optional[str] = None
    airport_code: Optional[str] = None
    zone_name: Optional[str] = None
    distance_km: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'in_zone': self.in_zone,
            'airport_name': self.airport_name,
            'airport_code': self.airport_code,
            'zone_name': self.zone_name,
            'distance_km': self.distance_km,
        }


# Degraded classification when a lookup cannot be answered
UNKNOWN_ZONE = ZoneResolution(in_zone=False)


class ZoneIndex:
    """
    Nearest-zone and nearest-airport lookups over static zone data.

    Deterministic and side-effect free; safe to share between threads.
    """

    def __init__(self, airports: List[AirportRef], zones: List[SafetyZone]):
        self.airports = list(airports)
        self.zones = list(zones)

        self._zone_lats = np.array([z.latitude for z in self.zones], dtype=float)
        self._zone_lons = np.array([z.longitude for z in self.zones], dtype=float)
        self._zone_radii_km = np.array([z.radius_m / 1000.0 for z in self.zones], dtype=float)

        self._airport_lats = np.array([a.latitude for a in self.airports], dtype=float)
        self._airport_lons = np.array([a.longitude for a in self.airports], dtype=float)

    @classmethod
    def from_session(cls, session_factory: sessionmaker) -> 'ZoneIndex':
        """
        Load every airport and zone from the reference database.

        Raises on database errors: the monitor must not start without its
        zone data.
        """
        with session_factory() as session:
            airport_rows = session.scalars(select(Airport).order_by(Airport.code)).all()
            zone_rows = session.scalars(select(Zone).order_by(Zone.airport_code, Zone.id)).all()

            names = {a.code: a.name for a in airport_rows}
            airports = [
                AirportRef(code=a.code, name=a.name, latitude=a.latitude, longitude=a.longitude)
                for a in airport_rows
            ]
            zones = [
                SafetyZone(
                    name=z.name,
                    airport_name=names.get(z.airport_code, z.airport_code),
                    airport_code=z.airport_code,
                    latitude=z.latitude,
                    longitude=z.longitude,
                    radius_m=z.radius_m,
                )
                for z in zone_rows
            ]

        logger.info(f'Zone index loaded: {len(airports)} airports, {len(zones)} zones')
        return cls(airports, zones)

    def zones_for(self, airport_code: str) -> List[SafetyZone]:
        """Zones of one airport, in provisioning order."""
        return [z for z in self.zones if z.airport_code == airport_code]

    def resolve_zone(self, lat: float, lon: float) -> ZoneResolution:
        """
        Classify a point against the zone set.

        Nearest zone whose radius contains the point wins (smallest radius
        on a tie); otherwise the nearest airport center is reported with
        in_zone=False.
        """
        if len(self.zones):
            distances = distances_to_points(lat, lon, self._zone_lats, self._zone_lons)
            inside = np.flatnonzero(distances < self._zone_radii_km)
            if len(inside):
                # Nearest center; concentric zones resolve to the tightest radius
                order = np.lexsort((self._zone_radii_km[inside], distances[inside]))
                best = inside[order[0]]
                zone = self.zones[best]
                return ZoneResolution(
                    in_zone=True,
                    airport_name=zone.airport_name,
                    airport_code=zone.airport_code,
                    zone_name=zone.name,
                    distance_km=round(float(distances[best]), 2),
                )

        airport, distance = self.nearest_airport(lat, lon)
        if airport is None:
            return UNKNOWN_ZONE

        return ZoneResolution(
            in_zone=False,
            airport_name=airport.name,
            airport_code=airport.code,
            zone_name=None,
            distance_km=round(distance, 2),
        )

    def nearest_airport(self, lat: float, lon: float):
        """Returns (AirportRef, distance_km), or (None, None) with no airports."""
        if not self.airports:
            return None, None

        distances = distances_to_points(lat, lon, self._airport_lats, self._airport_lons)
        best = int(np.argmin(distances))
        return self.airports[best], float(distances[best])

    def is_in_zone(self, lat: float, lon: float) -> bool:
        return self.resolve_zone(lat, lon).in_zone

    @property
    def stats(self) -> Dict[str, int]:
        return {
            'airports': len(self.airports),
            'zones': len(self.zones),
        }
