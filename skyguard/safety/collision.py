"""
Collision detection - pairwise separation check across the live fleet.

Every cycle takes a snapshot of all airborne aircraft, computes horizontal
(Haversine) distance and vertical separation for every unordered pair, and
raises an alert for each pair inside both minima:

    distance < safe_distance_km  AND  altitude_diff < safe_altitude_diff_ft

Severity (first match wins):
- CRITICAL: distance < 2 km and altitude diff < 500 ft
- HIGH:     distance < 3 km and altitude diff < 700 ft
- MEDIUM:   otherwise

This is an illustrative separation check, not a certified ATC algorithm.
Alerts are not deduplicated across cycles: a pair that stays too close is
alerted again on every cycle.
"""

import logging
from typing import List, Optional

import numpy as np

from skyguard.config import config
from skyguard.positions import AircraftState, PositionStore
from skyguard.safety.alerts import (
    AlertCategory,
    AlertLedger,
    CollisionAlert,
    Severity,
    alert_id,
    utc_now,
)
from skyguard.safety.geodesy import haversine_distance, pairwise_distances
from skyguard.safety.scheduler import PeriodicJob

logger = logging.getLogger(__name__)


def classify_collision_severity(distance_km: float, altitude_diff_ft: float) -> Severity:
    """Severity tier for an unsafe pair."""
    if distance_km < 2 and altitude_diff_ft < 500:
        return Severity.CRITICAL
    elif distance_km < 3 and altitude_diff_ft < 700:
        return Severity.HIGH
    else:
        return Severity.MEDIUM


def _position_snapshot(state: AircraftState) -> dict:
    return {
        'latitude': state.latitude,
        'longitude': state.longitude,
        'altitude': state.altitude,
    }


class CollisionDetector(PeriodicJob):
    """
    Periodic pairwise proximity check.

    Reads the position store, writes every unsafe pair to the alert
    ledger under the "collision" category as soon as it is found.
    """

    name = 'collision-detector'

    def __init__(
        self,
        positions: PositionStore,
        ledger: AlertLedger,
        safe_distance_km: Optional[float] = None,
        safe_altitude_diff_ft: Optional[float] = None,
        interval: Optional[float] = None,
    ):
        super().__init__(interval or config.collision.check_interval)
        self.positions = positions
        self.ledger = ledger
        self.safe_distance_km = safe_distance_km or config.collision.safe_distance_km
        self.safe_altitude_diff_ft = safe_altitude_diff_ft or config.collision.safe_altitude_diff_ft

    def _empty_result(self) -> List[CollisionAlert]:
        return []

    def evaluate_collisions(self) -> List[CollisionAlert]:
        """Run one detection cycle synchronously and return its alerts."""
        return self.run_cycle(blocking=True)

    def _is_unsafe(self, distance_km: float, altitude_diff_ft: float) -> bool:
        return distance_km < self.safe_distance_km and altitude_diff_ft < self.safe_altitude_diff_ft

    def _build_alert(
        self,
        aircraft1: AircraftState,
        aircraft2: AircraftState,
        distance_km: float,
        altitude_diff_ft: float,
    ) -> CollisionAlert:
        now = utc_now()
        return CollisionAlert(
            id=alert_id(aircraft1.callsign, aircraft2.callsign, at=now),
            aircraft1=aircraft1.callsign,
            aircraft2=aircraft2.callsign,
            distance_km=round(float(distance_km), 2),
            altitude_diff_ft=int(round(float(altitude_diff_ft))),
            severity=classify_collision_severity(distance_km, altitude_diff_ft),
            positions={
                'aircraft1': _position_snapshot(aircraft1),
                'aircraft2': _position_snapshot(aircraft2),
            },
            timestamp=now,
        )

    def check_pair(self, aircraft1: AircraftState, aircraft2: AircraftState) -> Optional[CollisionAlert]:
        """
        Check a single pair without touching the ledger.

        Returns the alert the pair would raise, or None if separated.
        """
        distance = haversine_distance(
            aircraft1.latitude, aircraft1.longitude,
            aircraft2.latitude, aircraft2.longitude,
        )
        altitude_diff = abs(aircraft1.altitude - aircraft2.altitude)

        if not self._is_unsafe(distance, altitude_diff):
            return None
        return self._build_alert(aircraft1, aircraft2, distance, altitude_diff)

    def _run_cycle(self) -> List[CollisionAlert]:
        # Snapshot first; ingestion may keep writing while we compute
        fleet = sorted(self.positions.airborne(), key=lambda s: s.callsign)

        if len(fleet) < 2:
            return []

        lats = np.array([s.latitude for s in fleet], dtype=float)
        lons = np.array([s.longitude for s in fleet], dtype=float)
        alts = np.array([s.altitude for s in fleet], dtype=float)

        i, j, distances = pairwise_distances(lats, lons)
        altitude_diffs = np.abs(alts[i] - alts[j])

        unsafe = np.flatnonzero(
            (distances < self.safe_distance_km) &
            (altitude_diffs < self.safe_altitude_diff_ft)
        )

        alerts = []
        for k in unsafe:
            alert = self._build_alert(
                fleet[i[k]], fleet[j[k]],
                distances[k], altitude_diffs[k],
            )
            self.ledger.store(alert, AlertCategory.COLLISION)
            alerts.append(alert)

        if alerts:
            logger.warning(f'{len(alerts)} collision risk(s) detected among {len(fleet)} aircraft')
        else:
            logger.debug(f'No collision risks among {len(fleet)} aircraft')

        return alerts
