"""
Safety alert types and the alert ledger.

Alerts are immutable once created. The ledger keeps two independent views
per category:
- individually stored alerts, each expiring after a fixed TTL, used for
  history queries
- a capped most-recent-first list used for live dashboards

The two views are not reconciled: an alert may drop off the capped list
while still stored, or expire while still listed.
"""

import itertools
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Tuple, Union

from skyguard.config import config

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """
    Ordinal risk classification.

    CRITICAL > HIGH > MEDIUM > SAFE. SAFE is informational only and never
    counts as a risk.
    """
    CRITICAL = 'CRITICAL'
    HIGH = 'HIGH'
    MEDIUM = 'MEDIUM'
    SAFE = 'SAFE'

    @property
    def is_risk(self) -> bool:
        return self is not Severity.SAFE


class AlertCategory(str, Enum):
    COLLISION = 'collision'
    ALTITUDE = 'altitude'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def alert_id(*parts: str, at: Optional[datetime] = None) -> str:
    """Alert identifier from its subjects and generation time in epoch ms."""
    at = at or utc_now()
    return '-'.join([*parts, str(int(at.timestamp() * 1000))])


@dataclass(frozen=True)
class CollisionAlert:
    """Two aircraft closer than the separation minima."""
    id: str
    aircraft1: str
    aircraft2: str
    distance_km: float
    altitude_diff_ft: int
    severity: Severity
    positions: dict
    timestamp: datetime

    @property
    def pair(self) -> frozenset:
        return frozenset((self.aircraft1, self.aircraft2))

    def to_dict(self) -> dict:
        data = asdict(self)
        data['severity'] = self.severity.value
        data['timestamp'] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class AltitudeAlert:
    """Aircraft below the safe altitude floor."""
    id: str
    callsign: str
    altitude: float
    latitude: float
    longitude: float
    velocity: float
    heading: float
    severity: Severity
    message: str
    in_airport_zone: bool
    airport_name: Optional[str]
    zone_name: Optional[str]
    distance_to_airport_km: Optional[float]
    timestamp: datetime

    def to_dict(self) -> dict:
        data = asdict(self)
        data['severity'] = self.severity.value
        data['timestamp'] = self.timestamp.isoformat()
        return data


Alert = Union[CollisionAlert, AltitudeAlert]


class AlertLedger:
    """
    Thread-safe alert store with per-alert expiry and capped active lists.

    ``store`` with ``persist=False`` only pushes onto the active list; such
    entries never appear in history.
    """

    def __init__(
        self,
        ttl_seconds: int = None,
        active_limit: int = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds or config.alerts.ttl_seconds
        self.active_limit = active_limit or config.alerts.active_limit
        self._clock = clock

        self._active: Dict[str, Deque[Alert]] = {}
        # category -> store sequence -> (alert, expires_at)
        # Repeats sharing an id (same pair, same ms) each get their own slot
        self._stored: Dict[str, Dict[int, Tuple[Alert, float]]] = {}
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    @staticmethod
    def _key(category) -> str:
        return category.value if isinstance(category, AlertCategory) else str(category)

    def store(self, alert: Alert, category, persist: bool = True) -> None:
        """Record an alert: individually with expiry, and on the active list."""
        key = self._key(category)

        with self._lock:
            if persist:
                stored = self._stored.setdefault(key, {})
                stored[next(self._sequence)] = (alert, self._clock() + self.ttl_seconds)

            active = self._active.get(key)
            if active is None:
                active = self._active[key] = deque(maxlen=self.active_limit)
            # Push-front; deque drops the oldest from the right once full
            active.appendleft(alert)

    def list_active(self, category, include_safe: bool = True) -> List[Alert]:
        """Most recently stored alerts first, at most ``active_limit``."""
        key = self._key(category)
        with self._lock:
            alerts = list(self._active.get(key, ()))
        if not include_safe:
            alerts = [a for a in alerts if a.severity.is_risk]
        return alerts

    def _purge_expired(self, key: str) -> None:
        now = self._clock()
        stored = self._stored.get(key)
        if not stored:
            return
        expired = [seq for seq, (_, expires_at) in stored.items() if expires_at <= now]
        for seq in expired:
            del stored[seq]
        if expired:
            logger.debug(f'Expired {len(expired)} {key} alerts')

    def get_history(self, category, limit: int = 50) -> List[Alert]:
        """Non-expired stored risk alerts, newest timestamp first."""
        key = self._key(category)
        with self._lock:
            self._purge_expired(key)
            alerts = [alert for alert, _ in self._stored.get(key, {}).values()]

        alerts = [a for a in alerts if a.severity.is_risk]
        alerts.sort(key=lambda a: a.timestamp, reverse=True)
        if limit is not None and limit >= 0:
            alerts = alerts[:limit]
        return alerts

    def get(self, category, id_: str) -> Optional[Alert]:
        """Most recently stored alert with this id, or None if unknown or expired."""
        key = self._key(category)
        with self._lock:
            self._purge_expired(key)
            matches = [alert for alert, _ in self._stored.get(key, {}).values() if alert.id == id_]
        return matches[-1] if matches else None

    def clear(self) -> None:
        with self._lock:
            self._active.clear()
            self._stored.clear()

    @property
    def stats(self) -> dict:
        """Per-category counts of active-list and stored entries."""
        with self._lock:
            keys = set(self._active) | set(self._stored)
            result = {}
            for key in sorted(keys):
                self._purge_expired(key)
                result[key] = {
                    'active': len(self._active.get(key, ())),
                    'stored': len(self._stored.get(key, {})),
                }
            return result
