"""
Low-altitude risk detection outside airport safety zones.

Every cycle classifies each airborne aircraft against the zone index and
the altitude floor:

    altitude >= floor           -> no alert
    below floor, outside zones  -> CRITICAL (<500 ft) / HIGH (<750 ft) / MEDIUM
    below floor, inside a zone  -> SAFE (normal approach/departure traffic)

Risk alerts go to the alert ledger. SAFE entries are returned with the
cycle result and pushed onto the live active list, but are never stored
as individually expiring alerts, so alert history only holds real risks.

Every airborne aircraft also appears in the monitored-aircraft snapshot,
whatever its altitude.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional

from skyguard.config import config
from skyguard.positions import AircraftState, PositionStore
from skyguard.safety.alerts import (
    AlertCategory,
    AlertLedger,
    AltitudeAlert,
    Severity,
    alert_id,
    utc_now,
)
from skyguard.safety.scheduler import PeriodicJob
from skyguard.safety.zones import UNKNOWN_ZONE, ZoneIndex, ZoneResolution

logger = logging.getLogger(__name__)

OUTSIDE_ZONE_MESSAGE = 'Aircraft flying below safe altitude outside airport zone'


def classify_altitude_severity(altitude_ft: float) -> Severity:
    """Severity tier for an aircraft below the floor outside every zone."""
    if altitude_ft < 500:
        return Severity.CRITICAL
    elif altitude_ft < 750:
        return Severity.HIGH
    else:
        return Severity.MEDIUM


@dataclass(frozen=True)
class MonitoredAircraft:
    """One aircraft as seen by the altitude monitor."""
    callsign: str
    altitude: float
    latitude: float
    longitude: float
    velocity: float
    heading: float
    in_airport_zone: bool
    airport_name: Optional[str]
    zone_name: Optional[str]
    distance_to_airport_km: Optional[float]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AltitudeCheckResult:
    """Alerts plus the full monitored snapshot for one cycle."""
    alerts: List[AltitudeAlert] = field(default_factory=list)
    monitored_aircraft: List[MonitoredAircraft] = field(default_factory=list)

    @property
    def total_aircraft(self) -> int:
        return len(self.monitored_aircraft)

    @property
    def risk_alerts(self) -> List[AltitudeAlert]:
        return [a for a in self.alerts if a.severity.is_risk]

    def to_dict(self) -> dict:
        return {
            'alerts': [a.to_dict() for a in self.alerts],
            'total_aircraft': self.total_aircraft,
            'monitored_aircraft': [m.to_dict() for m in self.monitored_aircraft],
        }


@dataclass(frozen=True)
class AltitudeStatus:
    """Point-in-time altitude verdict for a single aircraft."""
    callsign: str
    altitude: float
    latitude: float
    longitude: float
    in_airport_zone: bool
    is_safe: bool
    min_safe_altitude: float
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            'callsign': self.callsign,
            'altitude': self.altitude,
            'position': {
                'latitude': self.latitude,
                'longitude': self.longitude,
            },
            'in_airport_zone': self.in_airport_zone,
            'is_safe': self.is_safe,
            'min_safe_altitude': self.min_safe_altitude,
            'timestamp': self.timestamp.isoformat(),
        }


class AltitudeRiskDetector(PeriodicJob):
    """
    Periodic geofenced altitude check.

    Zone lookups for one cycle are fanned out to a small worker pool and
    collected against a single deadline; a lookup that fails or misses the
    deadline degrades that aircraft to "not in any zone, airport unknown"
    without affecting the rest of the batch.
    """

    name = 'altitude-monitor'

    def __init__(
        self,
        positions: PositionStore,
        zone_index: ZoneIndex,
        ledger: AlertLedger,
        min_safe_altitude_ft: Optional[float] = None,
        interval: Optional[float] = None,
        zone_lookup_timeout: Optional[float] = None,
        max_workers: int = 4,
    ):
        super().__init__(interval or config.altitude.check_interval)
        self.positions = positions
        self.zone_index = zone_index
        self.ledger = ledger
        self.min_safe_altitude_ft = min_safe_altitude_ft or config.altitude.min_safe_altitude_ft
        self.zone_lookup_timeout = zone_lookup_timeout or config.altitude.zone_lookup_timeout

        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='zone-lookup')
        self._lookup_failures = 0

    def _empty_result(self) -> AltitudeCheckResult:
        return AltitudeCheckResult()

    def evaluate_altitude_risk(self) -> AltitudeCheckResult:
        """Run one detection cycle synchronously and return its result."""
        return self.run_cycle(blocking=True)

    def _resolve_zone(self, state: AircraftState) -> ZoneResolution:
        try:
            return self.zone_index.resolve_zone(state.latitude, state.longitude)
        except Exception as e:
            self._lookup_failures += 1
            logger.warning(f'Zone lookup failed for {state.callsign}: {e}')
            return UNKNOWN_ZONE

    def _resolve_zones(self, fleet: List[AircraftState]) -> Dict[str, ZoneResolution]:
        """Zone resolution per callsign, bounded by the lookup timeout."""
        futures = {
            state.callsign: self._executor.submit(self._resolve_zone, state)
            for state in fleet
        }
        wait(futures.values(), timeout=self.zone_lookup_timeout)

        resolved = {}
        for callsign, future in futures.items():
            if future.done():
                resolved[callsign] = future.result()
            else:
                future.cancel()
                self._lookup_failures += 1
                logger.warning(f'Zone lookup timed out for {callsign}')
                resolved[callsign] = UNKNOWN_ZONE
        return resolved

    def _build_alert(self, state: AircraftState, zone: ZoneResolution) -> AltitudeAlert:
        now = utc_now()
        if zone.in_zone:
            severity = Severity.SAFE
            message = f'Aircraft in {zone.airport_name} {zone.zone_name} - Normal operations'
        else:
            severity = classify_altitude_severity(state.altitude)
            message = OUTSIDE_ZONE_MESSAGE

        return AltitudeAlert(
            id=alert_id(state.callsign, at=now),
            callsign=state.callsign,
            altitude=state.altitude,
            latitude=state.latitude,
            longitude=state.longitude,
            velocity=state.velocity or 0,
            heading=state.heading or 0,
            severity=severity,
            message=message,
            in_airport_zone=zone.in_zone,
            airport_name=zone.airport_name if zone.in_zone else None,
            zone_name=zone.zone_name if zone.in_zone else None,
            distance_to_airport_km=zone.distance_km,
            timestamp=now,
        )

    def _run_cycle(self) -> AltitudeCheckResult:
        fleet = sorted(self.positions.airborne(), key=lambda s: s.callsign)
        zones = self._resolve_zones(fleet)

        result = AltitudeCheckResult()
        for state in fleet:
            zone = zones[state.callsign]

            result.monitored_aircraft.append(MonitoredAircraft(
                callsign=state.callsign,
                altitude=state.altitude,
                latitude=state.latitude,
                longitude=state.longitude,
                velocity=state.velocity or 0,
                heading=state.heading or 0,
                in_airport_zone=zone.in_zone,
                airport_name=zone.airport_name,
                zone_name=zone.zone_name,
                distance_to_airport_km=zone.distance_km,
            ))

            if state.altitude >= self.min_safe_altitude_ft:
                continue

            alert = self._build_alert(state, zone)
            # SAFE entries surface on the live list only, never in history
            self.ledger.store(alert, AlertCategory.ALTITUDE, persist=alert.severity.is_risk)
            result.alerts.append(alert)

        risk_count = len(result.risk_alerts)
        if risk_count:
            logger.warning(f'{risk_count} low-altitude alert(s) detected')
        else:
            logger.debug(f'Altitude check: {result.total_aircraft} aircraft, no risks')

        return result

    def get_aircraft_altitude_status(self, callsign: str) -> Optional[AltitudeStatus]:
        """Altitude verdict for one live aircraft, or None if not tracked."""
        state = self.positions.get(callsign)
        if state is None:
            return None

        zone = self._resolve_zone(state)
        return AltitudeStatus(
            callsign=state.callsign,
            altitude=state.altitude,
            latitude=state.latitude,
            longitude=state.longitude,
            in_airport_zone=zone.in_zone,
            is_safe=state.altitude >= self.min_safe_altitude_ft or zone.in_zone,
            min_safe_altitude=self.min_safe_altitude_ft,
            timestamp=utc_now(),
        )

    def shutdown(self) -> None:
        """Stop the timer and release the lookup pool."""
        self.stop()
        self._executor.shutdown(wait=False)

    @property
    def stats(self) -> dict:
        stats = super().stats
        stats['zone_lookup_failures'] = self._lookup_failures
        return stats
