"""
SkyGuard Backend Package.

Real-time aircraft safety monitoring built with Flask, SQLAlchemy, and NumPy.

Modules:
    api/         REST endpoints for flights, safety alerts, and system status
    models/      SQLAlchemy ORM models (Airport, Zone, Terminal, Gate, FlightSchedule)
    safety/      Collision and low-altitude detectors, zone index, alert ledger
    services/    Gate/schedule registry and the flight aggregator
    ingestion/   OpenSky and AviationStack adapters with background polling
    positions.py Thread-safe live position store with per-entry expiry
    context.py   Process-wide store handles, built once at startup
    monitor.py   Query facade consumed by the API layer
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
