"""
API module for SkyGuard.

Provides REST endpoints for:
- Flight monitoring (live flights, gates, terminals, summary)
- Safety alerts (collision and low-altitude)
- System status
"""

from skyguard.api.flights import flights_bp
from skyguard.api.alerts import alerts_bp
from skyguard.api.status import status_bp

__all__ = ['flights_bp', 'alerts_bp', 'status_bp']
