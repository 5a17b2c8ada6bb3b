"""
Database models for SkyGuard reference data.

Everything here is read-mostly and provisioned out-of-band:
1. Airports and their circular safety zones
2. Gate assignment graph (terminal <- gate <- flight)
3. Flight schedules keyed by flight number

Live positions and alerts are not stored here; see skyguard.positions
and skyguard.safety.alerts.
"""

from skyguard.models.base import Base, create_db_engine, make_session_factory, session_scope, init_db
from skyguard.models.airport import Airport, Zone
from skyguard.models.gate import Terminal, Gate, GateAssignment
from skyguard.models.schedule import FlightSchedule

__all__ = [
    'Base',
    'create_db_engine',
    'make_session_factory',
    'session_scope',
    'init_db',
    'Airport',
    'Zone',
    'Terminal',
    'Gate',
    'GateAssignment',
    'FlightSchedule',
]
