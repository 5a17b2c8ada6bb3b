"""
In-memory position store for live aircraft state.

Holds exactly one current-state slot per callsign:
- Upsert on every ingestion write (refreshes the entry's expiry)
- Passive expiration after a fixed time-to-live, no delete path needed
- Thread-safe operations for ingestion writers, both detectors and
  on-demand API queries running concurrently

Readers always receive copies (snapshots), so a detection cycle can iterate
its fleet while ingestion keeps writing.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from skyguard.config import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AircraftState:
    """
    Last known kinematic state of one aircraft.

    Units follow the ingestion contract: altitude in feet, velocity in
    knots, heading in degrees.
    """
    callsign: str
    latitude: float
    longitude: float
    altitude: float
    velocity: float = 0.0
    heading: float = 0.0
    on_ground: bool = False
    last_update: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def position_dict(self) -> dict:
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'velocity': self.velocity,
            'heading': self.heading,
        }

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'callsign': self.callsign,
            'position': self.position_dict(),
            'on_ground': self.on_ground,
            'last_update': self.last_update.isoformat() if self.last_update else None,
        }


class PositionStore:
    """
    Thread-safe time-bounded table of callsign -> AircraftState.

    An entry is treated as absent once ``ttl_seconds`` have passed since
    its last write. Expired entries are dropped lazily on access.
    """

    def __init__(
        self,
        ttl_seconds: int = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds or config.positions.ttl_seconds
        self._clock = clock

        # callsign -> (state, written_at)
        self._entries: Dict[str, Tuple[AircraftState, float]] = {}
        self._lock = threading.RLock()

        # Statistics
        self._writes = 0
        self._expired = 0

    def _is_live(self, written_at: float, now: float) -> bool:
        return now - written_at < self.ttl_seconds

    def upsert(self, state: AircraftState) -> None:
        """Write the current state for a callsign and refresh its expiry."""
        if not state.callsign:
            raise ValueError('AircraftState requires a callsign')

        with self._lock:
            self._entries[state.callsign] = (state, self._clock())
            self._writes += 1

    def upsert_many(self, states: List[AircraftState]) -> int:
        """Write a batch of states, skipping blank callsigns. Returns count written."""
        written = 0
        with self._lock:
            now = self._clock()
            for state in states:
                if not state.callsign:
                    continue
                self._entries[state.callsign] = (state, now)
                written += 1
            self._writes += written
        return written

    def get(self, callsign: str) -> Optional[AircraftState]:
        """
        Get live state by exact callsign.

        Returns None if never written or expired.
        """
        with self._lock:
            entry = self._entries.get(callsign)
            if entry is None:
                return None
            state, written_at = entry
            if self._is_live(written_at, self._clock()):
                return state
            # Expired
            del self._entries[callsign]
            self._expired += 1
        return None

    def find(self, identifier: str) -> Optional[AircraftState]:
        """
        Resolve an identifier to a live state.

        Exact callsign match first, then the first callsign (in sorted
        order) that starts with the identifier.
        """
        identifier = (identifier or '').strip()
        if not identifier:
            return None

        exact = self.get(identifier)
        if exact:
            return exact

        for state in sorted(self.snapshot(), key=lambda s: s.callsign):
            if state.callsign.startswith(identifier):
                return state
        return None

    def snapshot(self) -> List[AircraftState]:
        """
        Copy of every live entry at call time.

        Expired entries are purged while the lock is held.
        """
        with self._lock:
            now = self._clock()
            live = []
            expired = []
            for callsign, (state, written_at) in self._entries.items():
                if self._is_live(written_at, now):
                    live.append(state)
                else:
                    expired.append(callsign)
            for callsign in expired:
                del self._entries[callsign]
            self._expired += len(expired)

        if expired:
            logger.debug(f'Dropped {len(expired)} expired positions')
        return live

    def airborne(self) -> List[AircraftState]:
        """Snapshot of live, non-grounded aircraft."""
        return [s for s in self.snapshot() if not s.on_ground]

    def clear(self) -> None:
        """Clear entire store."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self.snapshot())

    @property
    def stats(self) -> dict:
        """Get store statistics."""
        live = len(self.snapshot())
        with self._lock:
            return {
                'entries': live,
                'writes': self._writes,
                'expired': self._expired,
                'ttl_seconds': self.ttl_seconds,
            }
