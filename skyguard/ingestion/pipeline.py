"""
Ingestion pipeline - orchestrates data flow from providers into the stores.

Pipeline stages per cycle:
1. Fetch: poll OpenSky for live state vectors around the airport
2. Upsert: write positions into the live position store (refreshes TTL)
3. Fetch: poll AviationStack for departures (when configured)
4. Upsert: write schedules into the registry

A failure in one provider is logged and does not stop the other; the
next cycle simply tries again.
"""

import logging
from typing import Callable, List, Optional

from skyguard.config import config
from skyguard.ingestion.aviationstack_client import AviationStackClient
from skyguard.ingestion.opensky_client import OpenSkyClient
from skyguard.positions import PositionStore
from skyguard.safety.scheduler import PeriodicJob
from skyguard.services.registry import GateScheduleRegistry

logger = logging.getLogger(__name__)


class IngestionPipeline(PeriodicJob):
    """
    Background polling of live positions and schedules.

    Runs on the same timer machinery as the detectors.
    """

    name = 'ingestion'

    def __init__(
        self,
        positions: PositionStore,
        registry: GateScheduleRegistry,
        opensky: Optional[OpenSkyClient] = None,
        aviationstack: Optional[AviationStackClient] = None,
        interval: Optional[float] = None,
    ):
        super().__init__(interval or config.ingestion.poll_interval)
        self.positions = positions
        self.registry = registry
        self.opensky = opensky or OpenSkyClient.from_config()
        self.aviationstack = aviationstack or AviationStackClient.from_config()

        self.center = (config.ingestion.airport_latitude, config.ingestion.airport_longitude)
        self.radius_km = config.ingestion.radius_km
        self.airport_iata = config.ingestion.airport_iata

        self._error_count_by_source = {'opensky': 0, 'aviationstack': 0}

        # Callbacks for external integration
        self._on_update_callbacks: List[Callable[[int], None]] = []

    def add_update_callback(self, callback: Callable[[int], None]) -> None:
        """
        Register callback to be invoked after each ingestion cycle.

        Callback receives the count of positions written.
        """
        self._on_update_callbacks.append(callback)

    def _ingest_positions(self) -> int:
        try:
            states = self.opensky.get_aircraft_states(self.center[0], self.center[1], self.radius_km)
        except Exception as e:
            self._error_count_by_source['opensky'] += 1
            logger.error(f'Position ingestion failed: {e}')
            return 0
        return self.positions.upsert_many(states)

    def _ingest_schedules(self) -> int:
        if not self.aviationstack.is_configured:
            return 0
        try:
            schedules = self.aviationstack.get_departures(self.airport_iata)
            return self.registry.upsert_schedules(schedules)
        except Exception as e:
            self._error_count_by_source['aviationstack'] += 1
            logger.error(f'Schedule ingestion failed: {e}')
            return 0

    def _run_cycle(self) -> int:
        live = self._ingest_positions()
        scheduled = self._ingest_schedules()

        logger.info(f'Updated {live} live positions, {scheduled} schedules')

        for callback in self._on_update_callbacks:
            try:
                callback(live)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return live

    def fetch_and_process(self) -> int:
        """Execute one ingestion cycle synchronously."""
        return self.run_cycle(blocking=True)

    def _empty_result(self) -> int:
        return 0

    @property
    def stats(self) -> dict:
        stats = super().stats
        stats['source_errors'] = dict(self._error_count_by_source)
        return stats
