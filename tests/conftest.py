"""
Shared fixtures for SkyGuard tests.

Reference data lives in a throwaway SQLite file per test, seeded with the
Frankfurt demo data. Stores that expire entries run on a fake clock.
"""

import pytest

from skyguard.context import build_context
from skyguard.models import create_db_engine, init_db, make_session_factory
from skyguard.positions import AircraftState, PositionStore
from skyguard.safety.alerts import AlertLedger
from skyguard.safety.zones import AirportRef, SafetyZone, ZoneIndex
from skyguard.seed import seed_reference_data
from skyguard.services.registry import GateScheduleRegistry

FRA_LAT = 50.0379
FRA_LON = 8.5622


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_state():
    """Factory for AircraftState with sensible defaults."""
    def _make(callsign, lat=50.5, lon=9.0, alt=10000.0, **kwargs):
        kwargs.setdefault('velocity', 250.0)
        kwargs.setdefault('heading', 90.0)
        return AircraftState(callsign=callsign, latitude=lat, longitude=lon, altitude=alt, **kwargs)
    return _make


@pytest.fixture
def positions(clock):
    return PositionStore(ttl_seconds=300, clock=clock)


@pytest.fixture
def ledger(clock):
    return AlertLedger(ttl_seconds=300, active_limit=100, clock=clock)


@pytest.fixture
def frankfurt_zones():
    """Zone index with Frankfurt's approach and terminal zones."""
    airport = AirportRef(code='EDDF', name='Frankfurt Airport', latitude=FRA_LAT, longitude=FRA_LON)
    zones = [
        SafetyZone('Approach Zone', airport.name, airport.code, FRA_LAT, FRA_LON, 10000.0),
        SafetyZone('Terminal Zone', airport.name, airport.code, FRA_LAT, FRA_LON, 2000.0),
    ]
    return ZoneIndex([airport], zones)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f'sqlite:///{tmp_path / "skyguard-test.db"}')
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = make_session_factory(engine)
    seed_reference_data(factory)
    return factory


@pytest.fixture
def registry(session_factory):
    return GateScheduleRegistry(session_factory)


@pytest.fixture
def context(engine, session_factory):
    ctx = build_context(engine=engine)
    yield ctx
    ctx.close()
