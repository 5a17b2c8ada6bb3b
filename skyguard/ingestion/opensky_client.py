"""
OpenSky Network client for live positions around the monitored airport.

Only the state-vector columns the position store needs are read:

    0 icao24, 1 callsign, 5 longitude, 6 latitude,
    7 baro_altitude (m), 8 on_ground, 9 velocity (m/s), 10 true_track (deg)

Translation to the store's units happens here: meters become feet,
m/s become knots, a blank callsign becomes "UNKNOWN".
"""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

import requests
from requests.auth import HTTPBasicAuth

from skyguard.config import config
from skyguard.positions import AircraftState

logger = logging.getLogger(__name__)

METERS_TO_FEET = 3.28084
MPS_TO_KNOTS = 1.94384
KM_PER_DEGREE = 111.0

# OpenSky rows carry at least this many columns
STATE_VECTOR_WIDTH = 12


@dataclass
class BoundingBox:
    """Latitude/longitude window for the /states/all query."""
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @classmethod
    def from_center_radius(cls, center_lat: float, center_lon: float, radius_km: float) -> 'BoundingBox':
        """Square window enclosing a circle; longitude span widens with latitude."""
        half_lat = radius_km / KM_PER_DEGREE
        half_lon = radius_km / (KM_PER_DEGREE * abs(math.cos(math.radians(center_lat))))
        return cls(
            lat_min=center_lat - half_lat,
            lat_max=center_lat + half_lat,
            lon_min=center_lon - half_lon,
            lon_max=center_lon + half_lon,
        )

    def to_params(self) -> dict:
        return {
            'lamin': self.lat_min,
            'lamax': self.lat_max,
            'lomin': self.lon_min,
            'lomax': self.lon_max,
        }


@dataclass
class StateVector:
    """One aircraft row from OpenSky; any numeric field may be missing."""
    icao24: str
    callsign: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]

    @classmethod
    def from_array(cls, row: Optional[Sequence[Any]]) -> Optional['StateVector']:
        """Parse a raw row, or None if it is short or has no ICAO24 address."""
        if not row or len(row) < STATE_VECTOR_WIDTH:
            return None

        icao24 = row[0]
        if not isinstance(icao24, str) or not icao24:
            return None

        callsign = (row[1] or '').strip() or None

        return cls(
            icao24=icao24.lower(),
            callsign=callsign,
            latitude=row[6],
            longitude=row[5],
            baro_altitude=row[7],
            on_ground=bool(row[8]),
            velocity=row[9],
            true_track=row[10],
        )

    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_aircraft_state(self) -> AircraftState:
        """Position-store record in feet and knots."""
        return AircraftState(
            callsign=self.callsign or 'UNKNOWN',
            latitude=self.latitude,
            longitude=self.longitude,
            altitude=(self.baro_altitude or 0) * METERS_TO_FEET,
            velocity=(self.velocity or 0) * MPS_TO_KNOTS,
            heading=self.true_track or 0,
            on_ground=self.on_ground,
            last_update=datetime.now(timezone.utc),
        )


class OpenSkyClient:
    """
    Polls /states/all for a bounding box.

    Requests are spaced to respect OpenSky's rate limits (about 10s
    anonymous, 5s with credentials). Network and HTTP errors are logged
    and re-raised; the ingestion pipeline decides whether to retry.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.auth = HTTPBasicAuth(username, password) if username and password else None
        if self.auth is None:
            logger.warning('OpenSky client is anonymous - expect stricter rate limits')

        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', 'SkyGuard/1.0')

        self.min_interval = 5.0 if self.auth else 10.0
        self.last_request_time: float = 0

    @classmethod
    def from_config(cls) -> 'OpenSkyClient':
        return cls(
            username=config.opensky.username,
            password=config.opensky.password,
            base_url=config.opensky.base_url,
        )

    def _wait_for_rate_limit(self) -> None:
        remaining = self.min_interval - (time.time() - self.last_request_time)
        if remaining > 0:
            logger.debug(f'OpenSky rate limit: waiting {remaining:.1f}s')
            time.sleep(remaining)

    def _fetch(self, params: dict) -> dict:
        self._wait_for_rate_limit()
        try:
            response = self.session.get(
                f'{self.base_url}/states/all',
                params=params,
                auth=self.auth,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky returned HTTP {status}: {e}')
            raise
        except requests.RequestException as e:
            logger.error(f'OpenSky request failed: {e}')
            raise
        finally:
            self.last_request_time = time.time()

    def get_states(self, bbox: Optional[BoundingBox] = None) -> Tuple[int, List[StateVector]]:
        """
        Current state vectors that carry a position.

        Returns:
            (OpenSky snapshot time, state vectors)

        Raises:
            requests.RequestException on network/API errors
        """
        data = self._fetch(bbox.to_params() if bbox else {})

        parsed = (StateVector.from_array(row) for row in data.get('states') or [])
        states = [sv for sv in parsed if sv is not None and sv.has_position()]

        logger.info(f'OpenSky: {len(states)} positioned aircraft')
        return data.get('time', int(time.time())), states

    def get_aircraft_states(self, center_lat: float, center_lon: float, radius_km: float) -> List[AircraftState]:
        """Live positions around a point, translated for the position store."""
        bbox = BoundingBox.from_center_radius(center_lat, center_lon, radius_km)
        _, states = self.get_states(bbox)
        return [sv.to_aircraft_state() for sv in states]
