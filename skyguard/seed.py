"""
Reference data provisioning for the Frankfurt demo deployment.

Populates, idempotently:
- Airport EDDF with its approach and terminal zones
- Terminals 1-3 and their gates
- Sample flight schedules and gate assignments

and optionally loads demo aircraft into a position store so that every
altitude severity and the in-zone case can be seen without live data.

Usage:
    python -m skyguard.seed
    SKYGUARD_DEMO=1 python -m skyguard.app   # serve with demo traffic
"""

import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from skyguard.config import config
from skyguard.models import (
    Airport, Zone, Terminal, Gate, GateAssignment, FlightSchedule,
    create_db_engine, init_db, make_session_factory, session_scope,
)
from skyguard.positions import AircraftState, PositionStore
from skyguard.safety.scheduler import PeriodicJob

logger = logging.getLogger(__name__)

AIRPORT = {
    'code': 'EDDF',
    'iata': 'FRA',
    'name': 'Frankfurt Airport',
    'latitude': 50.0379,
    'longitude': 8.5622,
}

ZONES = [
    ('Approach Zone', 10000.0),
    ('Terminal Zone', 2000.0),
]

GATES_BY_TERMINAL = {
    'Terminal 1': [f'A{n}' for n in range(1, 9)],
    'Terminal 2': [f'B{n}' for n in range(1, 7)],
    'Terminal 3': [f'C{n}' for n in range(1, 7)],
}

GATE_CAPACITY = 200

AIRLINES = {
    'LH': 'Lufthansa',
    'BA': 'British Airways',
    'AF': 'Air France',
    'UA': 'United Airlines',
    'EK': 'Emirates',
    'TK': 'Turkish Airlines',
}

# flight number, gate, arrival IATA, hours until departure
SAMPLE_FLIGHTS = [
    ('LH400', 'A1', 'JFK', 1),
    ('BA902', 'A2', 'LHR', 2),
    ('AF1518', 'A3', 'CDG', 3),
    ('LH454', 'B1', 'LAX', 4),
    ('UA960', 'B2', 'ORD', 5),
    ('EK44', 'C1', 'DXB', 6),
    ('TK1590', 'C2', 'IST', 7),
    ('LH716', 'A4', 'PEK', 8),
]

# Live positions for scheduled flights
LIVE_POSITIONS = [
    ('LH400', 50.10, 8.60, 5000.0),
    ('BA902', 50.20, 8.70, 8000.0),
    ('AF1518', 50.00, 8.50, 2000.0),
]

# Low-altitude demo aircraft: one per severity plus in-zone traffic
DEMO_AIRCRAFT = [
    ('DLH401', 50.25, 8.75, 450.0, 180.0, 270.0),   # CRITICAL, outside zone
    ('UAL902', 50.30, 8.30, 650.0, 200.0, 90.0),    # HIGH, outside zone
    ('BAW117', 50.15, 8.80, 850.0, 220.0, 180.0),   # MEDIUM, outside zone
    ('AFR1234', 50.05, 8.58, 800.0, 150.0, 250.0),  # SAFE, approach zone
    ('KLM643', 50.04, 8.57, 600.0, 160.0, 70.0),    # SAFE, departing
]


def _schedule_row(flight_number: str, gate: str, terminal: str, arrival_iata: str, hours: int) -> FlightSchedule:
    now = datetime.now(timezone.utc)
    airline_code = flight_number[:2]
    departure = now + timedelta(hours=hours)
    return FlightSchedule(
        flight_number=flight_number,
        airline=AIRLINES.get(airline_code),
        airline_code=airline_code,
        status='scheduled',
        departure_airport=AIRPORT['name'],
        departure_iata=AIRPORT['iata'],
        departure_scheduled=departure,
        departure_terminal=terminal,
        departure_gate=gate,
        arrival_iata=arrival_iata,
        arrival_scheduled=departure + timedelta(hours=8),
    )


def seed_reference_data(session_factory: sessionmaker) -> dict:
    """
    Provision airport, zones, gates, schedules and assignments.

    Safe to run repeatedly: rows are merged by primary key and zones are
    only created for an airport that has none.

    Returns:
        Counts of provisioned rows by kind.
    """
    gate_terminal = {
        gate: terminal
        for terminal, gates in GATES_BY_TERMINAL.items()
        for gate in gates
    }

    with session_scope(session_factory) as session:
        airport = session.get(Airport, AIRPORT['code'])
        if airport is None:
            airport = Airport(**AIRPORT)
            session.add(airport)
        if not airport.zones:
            for name, radius_m in ZONES:
                airport.zones.append(Zone(
                    name=name,
                    latitude=AIRPORT['latitude'],
                    longitude=AIRPORT['longitude'],
                    radius_m=radius_m,
                ))

        for terminal_name, gates in GATES_BY_TERMINAL.items():
            session.merge(Terminal(name=terminal_name))
            for gate_number in gates:
                session.merge(Gate(
                    gate_number=gate_number,
                    terminal_name=terminal_name,
                    status='available',
                    capacity=GATE_CAPACITY,
                ))
        session.flush()

        assignments = 0
        for flight_number, gate, arrival_iata, hours in SAMPLE_FLIGHTS:
            session.merge(_schedule_row(flight_number, gate, gate_terminal[gate], arrival_iata, hours))
            exists = session.scalars(
                select(GateAssignment).filter_by(callsign=flight_number, gate_number=gate)
            ).first()
            if exists is None:
                session.add(GateAssignment(callsign=flight_number, gate_number=gate))
                assignments += 1

    counts = {
        'zones': len(ZONES),
        'gates': len(gate_terminal),
        'schedules': len(SAMPLE_FLIGHTS),
        'new_assignments': assignments,
    }
    logger.info(f'Reference data provisioned: {counts}')
    return counts


def demo_states() -> List[AircraftState]:
    states = [
        AircraftState(callsign=cs, latitude=lat, longitude=lon, altitude=alt, velocity=250.0, heading=90.0)
        for cs, lat, lon, alt in LIVE_POSITIONS
    ]
    states.extend(
        AircraftState(callsign=cs, latitude=lat, longitude=lon, altitude=alt, velocity=vel, heading=hdg)
        for cs, lat, lon, alt, vel, hdg in DEMO_AIRCRAFT
    )
    return states


def load_demo_positions(store: PositionStore) -> int:
    """Write demo aircraft into a position store. Returns the count written."""
    count = store.upsert_many(demo_states())
    logger.info(f'Loaded {count} demo aircraft positions')
    return count


class DemoTraffic(PeriodicJob):
    """
    Keeps the demo aircraft live in a position store.

    Positions expire like any ingested state, so the demo set is rewritten
    every interval. Started by the app when SKYGUARD_DEMO=1.
    """

    name = 'demo-traffic'

    def __init__(self, store: PositionStore, interval: Optional[float] = None):
        super().__init__(interval or config.demo.refresh_interval)
        self.store = store

    def _run_cycle(self) -> int:
        return load_demo_positions(self.store)

    def _empty_result(self) -> int:
        return 0


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    try:
        engine = create_db_engine(config.database.url)
        init_db(engine)
        seed_reference_data(make_session_factory(engine))
    except SQLAlchemyError as e:
        logger.error(f'Seeding failed: {e}')
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
