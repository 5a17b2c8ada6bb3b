"""Tests for gate and schedule reference lookups."""

from datetime import datetime

from sqlalchemy import func, select

from skyguard.models import GateAssignment, Zone, session_scope
from skyguard.seed import seed_reference_data
from skyguard.services.registry import GateInfo


class TestGateAssignment:

    def test_walks_flight_to_terminal(self, registry):
        assert registry.get_gate_assignment('LH400') == GateInfo(gate='A1', terminal='Terminal 1')
        assert registry.get_gate_assignment('EK44') == GateInfo(gate='C1', terminal='Terminal 3')

    def test_unassigned(self, registry):
        assert registry.get_gate_assignment('DLH401') is None
        assert registry.get_gate_assignment('') is None


class TestSchedule:

    def test_by_flight_number(self, registry):
        schedule = registry.get_schedule('LH400')

        assert schedule['flight_number'] == 'LH400'
        assert schedule['airline'] == 'Lufthansa'
        assert schedule['status'] == 'scheduled'
        assert schedule['departure']['iata'] == 'FRA'
        assert schedule['departure']['gate'] == 'A1'
        assert schedule['arrival']['iata'] == 'JFK'

    def test_by_registration(self, registry):
        registry.upsert_schedules([{
            'flight_number': 'LH999',
            'aircraft_registration': 'D-AIXA',
            'status': 'active',
        }])

        schedule = registry.get_schedule('D-AIXA')
        assert schedule['flight_number'] == 'LH999'
        assert schedule['aircraft']['registration'] == 'D-AIXA'

    def test_unknown(self, registry):
        assert registry.get_schedule('ZZ1') is None
        assert registry.get_schedule(None) is None


class TestGateStatus:

    def test_all_gates_listed_once(self, registry):
        gates = registry.get_gate_status()

        assert len(gates) == 20
        assert len({g.gate for g in gates}) == 20
        assert sum(1 for g in gates if g.occupied_by) == 8

        a1 = next(g for g in gates if g.gate == 'A1')
        assert a1.terminal == 'Terminal 1'
        assert a1.occupied_by == 'LH400'
        assert a1.capacity == 200
        assert a1.to_dict()['status'] == 'available'

    def test_gate_with_two_assignments_listed_once(self, registry, session_factory):
        with session_scope(session_factory) as session:
            session.add(GateAssignment(callsign='LH999', gate_number='A1'))

        gates = registry.get_gate_status()
        assert len([g for g in gates if g.gate == 'A1']) == 1


class TestUpsertSchedules:

    def test_updates_existing(self, registry):
        written = registry.upsert_schedules([
            {'flight_number': 'LH400', 'status': 'delayed', 'unknown_field': 'ignored'},
        ])

        assert written == 1
        assert registry.get_schedule('LH400')['status'] == 'delayed'
        # Untouched columns keep their values
        assert registry.get_schedule('LH400')['airline'] == 'Lufthansa'

    def test_inserts_new_and_skips_blank(self, registry):
        written = registry.upsert_schedules([
            {'flight_number': 'TK1', 'status': 'scheduled', 'departure_scheduled': datetime(2024, 6, 1, 12, 0)},
            {'flight_number': '', 'status': 'scheduled'},
            {'status': 'scheduled'},
        ])

        assert written == 1
        assert registry.get_schedule('TK1')['departure']['scheduled'] == '2024-06-01T12:00:00'

    def test_repeated_flight_number_last_row_wins(self, registry):
        """Provider pages can list a flight twice; the batch still commits."""
        written = registry.upsert_schedules([
            {'flight_number': 'XY123', 'status': 'scheduled'},
            {'flight_number': 'XY123', 'status': 'active'},
            {'flight_number': 'XY999', 'status': 'active'},
        ])

        assert written == 2
        assert registry.get_schedule('XY123')['status'] == 'active'
        assert registry.get_schedule('XY999')['status'] == 'active'

    def test_repeated_existing_flight_number(self, registry):
        registry.upsert_schedules([
            {'flight_number': 'LH400', 'status': 'boarding'},
            {'flight_number': 'LH400', 'status': 'departed'},
        ])

        assert registry.get_schedule('LH400')['status'] == 'departed'


def test_seed_is_idempotent(session_factory):
    seed_reference_data(session_factory)

    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(Zone)) == 2
        assert session.scalar(select(func.count()).select_from(GateAssignment)) == 8
