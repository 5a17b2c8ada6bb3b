"""
SafetyMonitor - the query surface of the monitoring core.

Owns the two detectors and the flight aggregator for one MonitorContext
and exposes the read operations consumed by the API layer. The only
operation with side effects is the on-demand altitude evaluation behind
get_active_altitude_alerts, which is equivalent to an early timer fire.
"""

import logging
from typing import List, Optional

from skyguard.context import MonitorContext
from skyguard.safety.alerts import AlertCategory, AltitudeAlert, CollisionAlert
from skyguard.safety.altitude import AltitudeCheckResult, AltitudeRiskDetector, AltitudeStatus
from skyguard.safety.collision import CollisionDetector
from skyguard.services.aggregator import FlightAggregator, FlightView

logger = logging.getLogger(__name__)


class SafetyMonitor:
    """Detectors + aggregator wired to a single context."""

    def __init__(self, ctx: MonitorContext):
        self.ctx = ctx
        cfg = ctx.config

        self.collision_detector = CollisionDetector(
            ctx.positions,
            ctx.ledger,
            safe_distance_km=cfg.collision.safe_distance_km,
            safe_altitude_diff_ft=cfg.collision.safe_altitude_diff_ft,
            interval=cfg.collision.check_interval,
        )
        self.altitude_detector = AltitudeRiskDetector(
            ctx.positions,
            ctx.zone_index,
            ctx.ledger,
            min_safe_altitude_ft=cfg.altitude.min_safe_altitude_ft,
            interval=cfg.altitude.check_interval,
            zone_lookup_timeout=cfg.altitude.zone_lookup_timeout,
        )
        self.aggregator = FlightAggregator(
            ctx.positions,
            ctx.registry,
            timeout_seconds=cfg.registry.timeout_seconds,
            max_workers=cfg.registry.max_workers,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start both detector timers."""
        self.collision_detector.start()
        self.altitude_detector.start()

    def stop(self) -> None:
        """Stop both detector timers. Safe to call repeatedly."""
        self.collision_detector.stop()
        self.altitude_detector.stop()

    def shutdown(self) -> None:
        self.stop()
        self.altitude_detector.shutdown()
        self.aggregator.shutdown()

    # -------------------------------------------------------------------------
    # Collision alerts
    # -------------------------------------------------------------------------

    def check_collisions(self) -> List[CollisionAlert]:
        return self.collision_detector.evaluate_collisions()

    def get_active_collision_alerts(self) -> List[CollisionAlert]:
        return self.ctx.ledger.list_active(AlertCategory.COLLISION)

    def get_collision_history(self, limit: int = 50) -> List[CollisionAlert]:
        return self.ctx.ledger.get_history(AlertCategory.COLLISION, limit)

    # -------------------------------------------------------------------------
    # Altitude alerts
    # -------------------------------------------------------------------------

    def get_active_altitude_alerts(self) -> AltitudeCheckResult:
        """Fresh evaluation: alerts (including SAFE) and the monitored snapshot."""
        return self.altitude_detector.evaluate_altitude_risk()

    def get_altitude_history(self, limit: int = 50) -> List[AltitudeAlert]:
        return self.ctx.ledger.get_history(AlertCategory.ALTITUDE, limit)

    def get_aircraft_altitude_status(self, callsign: str) -> Optional[AltitudeStatus]:
        return self.altitude_detector.get_aircraft_altitude_status(callsign)

    # -------------------------------------------------------------------------
    # Flights
    # -------------------------------------------------------------------------

    def get_live_flights(self) -> List[FlightView]:
        return self.aggregator.list_live_flights()

    def get_flight(self, identifier: str) -> Optional[FlightView]:
        return self.aggregator.get_flight(identifier)

    def get_flights_by_terminal(self, terminal_name: str) -> List[FlightView]:
        return self.aggregator.list_by_terminal(terminal_name)

    def get_summary(self) -> dict:
        return self.aggregator.get_summary()

    def get_gate_status(self):
        return self.aggregator.get_gate_status()

    @property
    def stats(self) -> dict:
        return {
            'collision_detector': self.collision_detector.stats,
            'altitude_detector': self.altitude_detector.stats,
            'positions': self.ctx.positions.stats,
            'alerts': self.ctx.ledger.stats,
            'zones': self.ctx.zone_index.stats,
        }
