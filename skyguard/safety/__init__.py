"""
Safety monitoring core.

Two independent periodic detectors read the live position store:
- CollisionDetector: pairwise horizontal/vertical separation
- AltitudeRiskDetector: altitude floor outside airport zones

Both write to the AlertLedger; the ZoneIndex answers geofence lookups.
"""

from skyguard.safety.alerts import (
    AlertCategory,
    AlertLedger,
    AltitudeAlert,
    CollisionAlert,
    Severity,
)
from skyguard.safety.altitude import AltitudeCheckResult, AltitudeRiskDetector, MonitoredAircraft
from skyguard.safety.collision import CollisionDetector
from skyguard.safety.scheduler import PeriodicJob
from skyguard.safety.zones import AirportRef, SafetyZone, ZoneIndex, ZoneResolution

__all__ = [
    'AlertCategory',
    'AlertLedger',
    'AltitudeAlert',
    'CollisionAlert',
    'Severity',
    'AltitudeCheckResult',
    'AltitudeRiskDetector',
    'MonitoredAircraft',
    'CollisionDetector',
    'PeriodicJob',
    'AirportRef',
    'SafetyZone',
    'ZoneIndex',
    'ZoneResolution',
]
