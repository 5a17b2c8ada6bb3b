"""
Gate/schedule registry - read access to airport reference data.

Two independent lookups over the reference database:
- gate assignment graph, walked by flight callsign
  (flight -> ASSIGNED_TO -> gate -> BELONGS_TO -> terminal)
- schedule documents, keyed by flight number with a fallback match on
  aircraft registration

Rows are converted to plain values inside the session so callers never
touch detached ORM objects. Database errors propagate; the aggregator
decides how to degrade.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from skyguard.models import FlightSchedule, Gate, GateAssignment, session_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateInfo:
    """Gate and terminal assigned to a flight."""
    gate: str
    terminal: str


@dataclass(frozen=True)
class GateStatus:
    """Occupancy of one gate."""
    gate: str
    terminal: str
    status: str
    occupied_by: Optional[str]
    capacity: Optional[int]

    def to_dict(self) -> dict:
        return asdict(self)


# Columns accepted by upsert_schedules
_SCHEDULE_FIELDS = {c.name for c in FlightSchedule.__table__.columns} - {'last_updated'}


class GateScheduleRegistry:
    """Read-mostly reference lookups backed by SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_gate_assignment(self, callsign: str) -> Optional[GateInfo]:
        """Gate and terminal for a flight, or None if unassigned."""
        callsign = (callsign or '').strip()
        if not callsign:
            return None

        with self.session_factory() as session:
            row = session.execute(
                select(Gate.gate_number, Gate.terminal_name)
                .join(GateAssignment, GateAssignment.gate_number == Gate.gate_number)
                .where(GateAssignment.callsign == callsign)
                .order_by(Gate.gate_number)
                .limit(1)
            ).first()

        if row is None:
            return None
        return GateInfo(gate=row.gate_number, terminal=row.terminal_name)

    def get_schedule(self, identifier: str) -> Optional[dict]:
        """
        Schedule document for a flight.

        Matches flight number first, then aircraft registration.
        """
        identifier = (identifier or '').strip()
        if not identifier:
            return None

        with self.session_factory() as session:
            schedule = session.get(FlightSchedule, identifier)
            if schedule is None:
                schedule = session.scalars(
                    select(FlightSchedule)
                    .where(FlightSchedule.aircraft_registration == identifier)
                    .order_by(FlightSchedule.flight_number)
                    .limit(1)
                ).first()

            return schedule.to_dict() if schedule else None

    def get_gate_status(self) -> List[GateStatus]:
        """Every gate with its terminal and current occupant, if any."""
        with self.session_factory() as session:
            rows = session.execute(
                select(
                    Gate.gate_number,
                    Gate.terminal_name,
                    Gate.status,
                    Gate.capacity,
                    GateAssignment.callsign,
                )
                .outerjoin(GateAssignment, GateAssignment.gate_number == Gate.gate_number)
                .order_by(Gate.terminal_name, Gate.gate_number)
            ).all()

        gates = []
        seen = set()
        for row in rows:
            # A gate with several assignments is listed once
            if row.gate_number in seen:
                continue
            seen.add(row.gate_number)
            gates.append(GateStatus(
                gate=row.gate_number,
                terminal=row.terminal_name,
                status=row.status or 'available',
                occupied_by=row.callsign,
                capacity=row.capacity,
            ))
        return gates

    def upsert_schedules(self, schedules: List[dict]) -> int:
        """
        Insert or update schedule rows keyed by flight number.

        Unknown keys are ignored. A flight number repeated within one batch
        is written once, from its last row. Returns count written.
        """
        batch = {}
        for data in schedules:
            flight_number = (data.get('flight_number') or '').strip()
            if not flight_number:
                continue
            values = {k: v for k, v in data.items() if k in _SCHEDULE_FIELDS}
            values['flight_number'] = flight_number
            batch[flight_number] = values

        written = 0
        with session_scope(self.session_factory) as session:
            for flight_number, values in batch.items():
                existing = session.get(FlightSchedule, flight_number)
                if existing is None:
                    session.add(FlightSchedule(**values))
                else:
                    for key, value in values.items():
                        setattr(existing, key, value)
                    existing.last_updated = datetime.now(timezone.utc)
                written += 1

        logger.debug(f'Upserted {written} schedules')
        return written
