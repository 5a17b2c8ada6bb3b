"""
Flight aggregator - one logical flight view from three sources.

Joins, per query:
- live position (position store)
- gate and terminal (gate assignment graph)
- schedule and status (schedule documents)

Nothing is cached: every call recomputes from the sources. Registry
lookups run on a worker pool against a deadline, so one slow or failing
lookup leaves that flight without gate/schedule data instead of failing
the whole request.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from skyguard.config import config
from skyguard.positions import AircraftState, PositionStore
from skyguard.services.registry import GateInfo, GateScheduleRegistry, GateStatus

logger = logging.getLogger(__name__)


@dataclass
class FlightView:
    """Read model of one flight; derived, never stored."""
    callsign: str
    position: Optional[dict]
    on_ground: bool
    gate: Optional[str]
    terminal: Optional[str]
    status: str
    schedule: Optional[dict]
    last_update: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            'callsign': self.callsign,
            'position': self.position,
            'on_ground': self.on_ground,
            'gate': self.gate,
            'terminal': self.terminal,
            'status': self.status,
            'schedule': self.schedule,
            'last_update': self.last_update.isoformat() if self.last_update else None,
        }


def determine_status(state: AircraftState, schedule: Optional[dict]) -> str:
    """
    Flight status from live and schedule data.

    On-ground flag wins, then the schedule's status, then "in_flight".
    """
    if state.on_ground:
        return 'on_ground'

    if schedule:
        return schedule.get('status') or 'in_flight'

    return 'in_flight'


class FlightAggregator:
    """On-demand composition of live positions and registry data."""

    def __init__(
        self,
        positions: PositionStore,
        registry: GateScheduleRegistry,
        timeout_seconds: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        self.positions = positions
        self.registry = registry
        self.timeout_seconds = timeout_seconds or config.registry.timeout_seconds

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.registry.max_workers,
            thread_name_prefix='registry',
        )

    def _collect(self, future: Future, deadline: float, what: str):
        """Result of a registry lookup, or None on failure/timeout."""
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FutureTimeout:
            future.cancel()
            logger.warning(f'Registry lookup timed out: {what}')
        except Exception as e:
            logger.error(f'Registry lookup failed: {what}: {e}')
        return None

    def _build_view(
        self,
        state: AircraftState,
        gate_info: Optional[GateInfo],
        schedule: Optional[dict],
    ) -> FlightView:
        return FlightView(
            callsign=state.callsign,
            position=state.position_dict(),
            on_ground=state.on_ground,
            gate=gate_info.gate if gate_info else None,
            terminal=gate_info.terminal if gate_info else None,
            status=determine_status(state, schedule),
            schedule=schedule,
            last_update=state.last_update,
        )

    def _join_all(self, states: List[AircraftState]) -> List[FlightView]:
        """Fan out every gate and schedule lookup, then collect."""
        pending = [
            (
                state,
                self._executor.submit(self.registry.get_gate_assignment, state.callsign),
                self._executor.submit(self.registry.get_schedule, state.callsign),
            )
            for state in states
        ]

        deadline = time.monotonic() + self.timeout_seconds
        views = []
        for state, gate_future, schedule_future in pending:
            gate_info = self._collect(gate_future, deadline, f'gate {state.callsign}')
            schedule = self._collect(schedule_future, deadline, f'schedule {state.callsign}')
            views.append(self._build_view(state, gate_info, schedule))
        return views

    def get_flight(self, identifier: str) -> Optional[FlightView]:
        """
        Flight view for one identifier.

        Live position first; otherwise a schedule-only view; None if the
        identifier is unknown to both.
        """
        state = self.positions.find(identifier)
        if state is not None:
            return self._join_all([state])[0]

        deadline = time.monotonic() + self.timeout_seconds
        schedule = self._collect(
            self._executor.submit(self.registry.get_schedule, identifier),
            deadline,
            f'schedule {identifier}',
        )
        if schedule is None:
            return None

        return FlightView(
            callsign=identifier,
            position=None,
            on_ground=False,
            gate=None,
            terminal=None,
            status=schedule.get('status') or 'scheduled',
            schedule=schedule,
            last_update=None,
        )

    def list_live_flights(self) -> List[FlightView]:
        """Every live position joined with its registry data."""
        states = sorted(self.positions.snapshot(), key=lambda s: s.callsign)
        if not states:
            return []
        return self._join_all(states)

    def list_by_terminal(self, terminal_name: str) -> List[FlightView]:
        return [f for f in self.list_live_flights() if f.terminal == terminal_name]

    def get_gate_status(self) -> Optional[List[GateStatus]]:
        """Gate occupancy, or None if the registry is unavailable."""
        deadline = time.monotonic() + self.timeout_seconds
        return self._collect(
            self._executor.submit(self.registry.get_gate_status),
            deadline,
            'gate status',
        )

    def get_summary(self) -> dict:
        """Fleet and gate counts, computed fresh per call."""
        flights = self.list_live_flights()
        gates = self.get_gate_status()

        summary = {
            'total_flights': len(flights),
            'in_flight': sum(1 for f in flights if not f.on_ground),
            'on_ground': sum(1 for f in flights if f.on_ground),
            'total_gates': None,
            'occupied_gates': None,
            'available_gates': None,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }

        if gates is not None:
            occupied = sum(1 for g in gates if g.occupied_by)
            summary.update({
                'total_gates': len(gates),
                'occupied_gates': occupied,
                'available_gates': len(gates) - occupied,
            })

        return summary

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
