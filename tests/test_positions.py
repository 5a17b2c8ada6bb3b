"""Tests for the live position store."""

import threading

import pytest

from skyguard.positions import AircraftState, PositionStore


class TestUpsertAndGet:

    def test_get_returns_latest_write(self, positions, make_state):
        positions.upsert(make_state('DLH401', alt=5000))
        positions.upsert(make_state('DLH401', alt=4500))

        state = positions.get('DLH401')
        assert state.altitude == 4500
        assert len(positions) == 1

    def test_unknown_callsign(self, positions):
        assert positions.get('NOPE') is None

    def test_missing_callsign_rejected(self, positions, make_state):
        with pytest.raises(ValueError):
            positions.upsert(make_state(''))

    def test_upsert_many_skips_blank_callsigns(self, positions, make_state):
        written = positions.upsert_many([make_state('A1'), make_state(''), make_state('B2')])

        assert written == 2
        assert positions.stats['writes'] == 2
        assert sorted(s.callsign for s in positions.snapshot()) == ['A1', 'B2']


class TestExpiry:

    def test_entry_expires_after_ttl(self, positions, make_state, clock):
        positions.upsert(make_state('BAW117'))

        clock.advance(299)
        assert positions.get('BAW117') is not None

        clock.advance(1)
        assert positions.get('BAW117') is None

    def test_write_refreshes_expiry(self, positions, make_state, clock):
        positions.upsert(make_state('BAW117'))
        clock.advance(200)
        positions.upsert(make_state('BAW117'))
        clock.advance(200)

        assert positions.get('BAW117') is not None

    def test_snapshot_drops_expired(self, positions, make_state, clock):
        positions.upsert(make_state('OLD1'))
        clock.advance(250)
        positions.upsert(make_state('NEW1'))
        clock.advance(100)

        assert [s.callsign for s in positions.snapshot()] == ['NEW1']
        assert positions.stats['expired'] == 1

    def test_default_ttl_from_config(self):
        store = PositionStore()
        assert store.ttl_seconds > 0


class TestQueries:

    def test_find_exact_then_prefix(self, positions, make_state):
        positions.upsert(make_state('LH400'))
        positions.upsert(make_state('LH4001'))
        positions.upsert(make_state('DLH401'))

        assert positions.find('LH400').callsign == 'LH400'
        assert positions.find('DLH').callsign == 'DLH401'
        assert positions.find('XYZ') is None
        assert positions.find('') is None

    def test_airborne_excludes_grounded(self, positions, make_state):
        positions.upsert(make_state('AIR1'))
        positions.upsert(make_state('GND1', on_ground=True))

        assert [s.callsign for s in positions.airborne()] == ['AIR1']

    def test_snapshot_is_a_copy(self, positions, make_state):
        positions.upsert(make_state('AIR1'))
        snap = positions.snapshot()
        snap.clear()

        assert len(positions) == 1

    def test_to_dict(self, make_state):
        data = make_state('DLH401', lat=50.25, lon=8.75, alt=450).to_dict()

        assert data['callsign'] == 'DLH401'
        assert data['position']['altitude'] == 450
        assert data['on_ground'] is False
        assert isinstance(data['last_update'], str)

    def test_state_is_immutable(self, make_state):
        state = make_state('DLH401')
        with pytest.raises(AttributeError):
            state.altitude = 0

    def test_clear(self, positions, make_state):
        positions.upsert(make_state('AIR1'))
        positions.clear()
        assert positions.snapshot() == []


def test_aircraft_state_defaults():
    state = AircraftState(callsign='X1', latitude=1.0, longitude=2.0, altitude=3.0)
    assert state.velocity == 0
    assert state.heading == 0
    assert state.on_ground is False
    assert state.last_update.tzinfo is not None


class TestConcurrency:

    def test_writers_racing_readers(self, positions, make_state):
        """Readers always see a consistent, growing fleet while writers run."""
        errors = []

        def writer(prefix):
            try:
                for n in range(200):
                    positions.upsert(make_state(f'{prefix}{n}', alt=1000 + n))
            except Exception as e:
                errors.append(e)

        def reader():
            try:
                seen = 0
                for _ in range(200):
                    fleet = positions.airborne()
                    assert len({s.callsign for s in fleet}) == len(fleet)
                    assert len(fleet) >= seen
                    seen = len(fleet)
                    positions.find('W1')
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(prefix,)) for prefix in ('W', 'X')]
        threads += [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(positions) == 400
        assert positions.stats['writes'] == 400
