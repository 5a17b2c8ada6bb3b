"""
AviationStack client - flight schedules for the monitored airport.

Fetches departures by IATA code and flattens each record into the
schedule registry's row format. Without an API key the client is
disabled and returns no schedules.
"""

import logging
from datetime import datetime
from typing import List, Optional

import requests

from skyguard.config import config

logger = logging.getLogger(__name__)


def parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime string from the API."""
    if not dt_str:
        return None
    try:
        return datetime.fromisoformat(dt_str.replace('Z', '+00:00'))
    except ValueError:
        return None


def schedule_from_record(flight: dict) -> Optional[dict]:
    """
    Translate one AviationStack flight record into a schedule row.

    Returns None when the record has no usable flight number.
    """
    info = flight.get('flight') or {}
    flight_number = info.get('iata') or info.get('icao')
    if not flight_number:
        return None

    airline = flight.get('airline') or {}
    departure = flight.get('departure') or {}
    arrival = flight.get('arrival') or {}
    aircraft = flight.get('aircraft') or {}

    return {
        'flight_number': flight_number,
        'airline': airline.get('name'),
        'airline_code': airline.get('iata'),
        'status': flight.get('flight_status'),
        'aircraft_registration': aircraft.get('registration'),
        'aircraft_type': aircraft.get('icao') or aircraft.get('iata'),
        'departure_airport': departure.get('airport'),
        'departure_iata': departure.get('iata'),
        'departure_scheduled': parse_datetime(departure.get('scheduled')),
        'departure_estimated': parse_datetime(departure.get('estimated')),
        'departure_actual': parse_datetime(departure.get('actual')),
        'departure_terminal': departure.get('terminal'),
        'departure_gate': departure.get('gate'),
        'arrival_airport': arrival.get('airport'),
        'arrival_iata': arrival.get('iata'),
        'arrival_scheduled': parse_datetime(arrival.get('scheduled')),
        'arrival_estimated': parse_datetime(arrival.get('estimated')),
        'arrival_actual': parse_datetime(arrival.get('actual')),
    }


class AviationStackClient:
    """Schedule lookups against the AviationStack REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url or config.aviationstack.base_url
        self.timeout = timeout
        self.session = session or requests.Session()

        if not self.api_key:
            logger.warning('AviationStack API key not configured - schedule sync disabled')

    @classmethod
    def from_config(cls) -> 'AviationStackClient':
        return cls(api_key=config.aviationstack.api_key)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_departures(self, dep_iata: str, limit: int = 100) -> List[dict]:
        """
        Departures from an airport as schedule rows.

        Raises:
            requests.RequestException on network/API errors
        """
        if not self.api_key:
            return []

        params = {
            'access_key': self.api_key,
            'dep_iata': dep_iata,
            'limit': limit,
        }

        try:
            response = self.session.get(
                f'{self.base_url}/flights',
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f'AviationStack request failed: {e}')
            raise

        if 'error' in data:
            logger.warning(f'AviationStack API error: {data["error"]}')
            return []

        schedules = []
        for record in data.get('data') or []:
            row = schedule_from_record(record)
            if row:
                schedules.append(row)

        logger.info(f'Fetched {len(schedules)} schedules from AviationStack')
        return schedules
