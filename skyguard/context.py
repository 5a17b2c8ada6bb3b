"""
Monitor context - every store handle the core needs, built once.

Constructed at process start and passed explicitly to detectors, the
aggregator and the API layer. Initialization is all-or-nothing: if the
reference database or the zone data cannot be loaded, build_context
raises and the monitor does not start in a degraded state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from skyguard.config import AppConfig, config as default_config
from skyguard.models import create_db_engine, init_db, make_session_factory
from skyguard.positions import PositionStore
from skyguard.safety.alerts import AlertLedger
from skyguard.safety.zones import ZoneIndex
from skyguard.services.registry import GateScheduleRegistry

logger = logging.getLogger(__name__)


class MonitorInitError(RuntimeError):
    """A required dependency was unavailable at startup."""


@dataclass
class MonitorContext:
    config: AppConfig
    engine: Engine
    session_factory: sessionmaker
    positions: PositionStore
    ledger: AlertLedger
    zone_index: ZoneIndex
    registry: GateScheduleRegistry

    def close(self) -> None:
        self.engine.dispose()


def build_context(
    cfg: Optional[AppConfig] = None,
    engine: Optional[Engine] = None,
) -> MonitorContext:
    """
    Connect to the reference database and build every store.

    Raises:
        MonitorInitError if the database is unreachable or zone data
        cannot be loaded.
    """
    cfg = cfg or default_config

    try:
        engine = engine or create_db_engine(cfg.database.url, echo=cfg.debug)
        init_db(engine)
        with engine.connect() as conn:
            conn.execute(text('SELECT 1'))

        session_factory = make_session_factory(engine)
        zone_index = ZoneIndex.from_session(session_factory)
    except (SQLAlchemyError, ValueError) as e:
        logger.error(f'Monitor initialization failed: {e}')
        raise MonitorInitError(str(e)) from e

    if not zone_index.zones:
        logger.warning('No airport zones provisioned - every low aircraft will be treated as outside a zone')

    return MonitorContext(
        config=cfg,
        engine=engine,
        session_factory=session_factory,
        positions=PositionStore(ttl_seconds=cfg.positions.ttl_seconds),
        ledger=AlertLedger(
            ttl_seconds=cfg.alerts.ttl_seconds,
            active_limit=cfg.alerts.active_limit,
        ),
        zone_index=zone_index,
        registry=GateScheduleRegistry(session_factory),
    )
