"""Tests for alert types and the alert ledger."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from skyguard.safety.alerts import (
    AlertCategory,
    AlertLedger,
    AltitudeAlert,
    CollisionAlert,
    Severity,
    alert_id,
)

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def collision_alert(n: int, severity: Severity = Severity.MEDIUM, at: datetime = None) -> CollisionAlert:
    at = at or BASE_TIME + timedelta(seconds=n)
    return CollisionAlert(
        id=f'A{n}-B{n}-{n}',
        aircraft1=f'A{n}',
        aircraft2=f'B{n}',
        distance_km=4.0,
        altitude_diff_ft=800,
        severity=severity,
        positions={},
        timestamp=at,
    )


def altitude_alert(callsign: str, severity: Severity, at: datetime = BASE_TIME) -> AltitudeAlert:
    return AltitudeAlert(
        id=alert_id(callsign, at=at),
        callsign=callsign,
        altitude=800.0,
        latitude=50.05,
        longitude=8.58,
        velocity=150.0,
        heading=250.0,
        severity=severity,
        message='test',
        in_airport_zone=severity is Severity.SAFE,
        airport_name=None,
        zone_name=None,
        distance_to_airport_km=1.9,
        timestamp=at,
    )


class TestAlertId:

    def test_format(self):
        assert alert_id('DLH401', 'UAL902', at=BASE_TIME) == 'DLH401-UAL902-1717243200000'
        assert alert_id('DLH401', at=BASE_TIME) == 'DLH401-1717243200000'


class TestSeverity:

    def test_safe_is_not_a_risk(self):
        assert not Severity.SAFE.is_risk
        assert all(s.is_risk for s in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM))

    def test_serializes_as_string(self):
        data = collision_alert(1, Severity.CRITICAL).to_dict()
        assert data['severity'] == 'CRITICAL'
        assert data['timestamp'] == (BASE_TIME + timedelta(seconds=1)).isoformat()


class TestActiveList:

    def test_capped_most_recent_first(self, ledger):
        """150 stores leave the 100 most recent, newest first."""
        for n in range(150):
            ledger.store(collision_alert(n), AlertCategory.COLLISION)

        active = ledger.list_active(AlertCategory.COLLISION)
        assert len(active) == 100
        assert active[0].id == 'A149-B149-149'
        assert active[-1].id == 'A50-B50-50'

    def test_order_is_store_order_not_timestamp(self, ledger):
        ledger.store(collision_alert(2), AlertCategory.COLLISION)
        ledger.store(collision_alert(1), AlertCategory.COLLISION)

        assert [a.aircraft1 for a in ledger.list_active(AlertCategory.COLLISION)] == ['A1', 'A2']

    def test_dropped_from_list_but_still_stored(self, clock):
        ledger = AlertLedger(ttl_seconds=300, active_limit=2, clock=clock)
        for n in range(3):
            ledger.store(collision_alert(n), AlertCategory.COLLISION)

        assert len(ledger.list_active(AlertCategory.COLLISION)) == 2
        assert len(ledger.get_history(AlertCategory.COLLISION)) == 3

    def test_repeat_alerts_are_kept(self, ledger):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)
        ledger.store(collision_alert(1), AlertCategory.COLLISION)

        assert len(ledger.list_active(AlertCategory.COLLISION)) == 2

    def test_categories_are_independent(self, ledger):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)
        ledger.store(altitude_alert('DLH401', Severity.CRITICAL), AlertCategory.ALTITUDE)

        assert len(ledger.list_active(AlertCategory.COLLISION)) == 1
        assert len(ledger.list_active(AlertCategory.ALTITUDE)) == 1
        assert ledger.list_active('unknown') == []

    def test_exclude_safe(self, ledger):
        ledger.store(altitude_alert('DLH401', Severity.CRITICAL), AlertCategory.ALTITUDE)
        ledger.store(altitude_alert('AFR1234', Severity.SAFE), AlertCategory.ALTITUDE, persist=False)

        assert len(ledger.list_active(AlertCategory.ALTITUDE)) == 2
        risky = ledger.list_active(AlertCategory.ALTITUDE, include_safe=False)
        assert [a.callsign for a in risky] == ['DLH401']


class TestHistory:

    def test_expires_after_ttl(self, ledger, clock):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)

        clock.advance(299)
        assert len(ledger.get_history(AlertCategory.COLLISION)) == 1

        clock.advance(1)
        assert ledger.get_history(AlertCategory.COLLISION) == []

    def test_expired_alert_can_remain_listed(self, ledger, clock):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)
        clock.advance(600)

        assert ledger.get_history(AlertCategory.COLLISION) == []
        assert len(ledger.list_active(AlertCategory.COLLISION)) == 1

    def test_sorted_newest_first_then_limited(self, ledger):
        for n in (5, 1, 9, 3, 7):
            ledger.store(collision_alert(n), AlertCategory.COLLISION)

        history = ledger.get_history(AlertCategory.COLLISION, limit=3)
        assert [a.aircraft1 for a in history] == ['A9', 'A7', 'A5']

    def test_safe_never_in_history(self, ledger):
        ledger.store(altitude_alert('AFR1234', Severity.SAFE), AlertCategory.ALTITUDE, persist=False)
        ledger.store(altitude_alert('KLM643', Severity.SAFE), AlertCategory.ALTITUDE)
        ledger.store(altitude_alert('DLH401', Severity.CRITICAL), AlertCategory.ALTITUDE)

        history = ledger.get_history(AlertCategory.ALTITUDE)
        assert [a.callsign for a in history] == ['DLH401']

    def test_get_by_id(self, ledger, clock):
        alert = altitude_alert('DLH401', Severity.CRITICAL)
        ledger.store(alert, AlertCategory.ALTITUDE)

        assert ledger.get(AlertCategory.ALTITUDE, alert.id) == alert
        assert ledger.get(AlertCategory.COLLISION, alert.id) is None

        clock.advance(300)
        assert ledger.get(AlertCategory.ALTITUDE, alert.id) is None

    def test_repeats_with_same_id_all_kept(self, ledger):
        """Two cycles in the same millisecond produce the same id."""
        first = collision_alert(1, Severity.HIGH)
        second = collision_alert(1, Severity.CRITICAL)
        assert first.id == second.id

        ledger.store(first, AlertCategory.COLLISION)
        ledger.store(second, AlertCategory.COLLISION)

        assert len(ledger.get_history(AlertCategory.COLLISION)) == 2
        assert ledger.get(AlertCategory.COLLISION, first.id) == second
        assert ledger.stats['collision']['stored'] == 2

    def test_non_persisted_not_retrievable(self, ledger):
        alert = altitude_alert('AFR1234', Severity.SAFE)
        ledger.store(alert, AlertCategory.ALTITUDE, persist=False)

        assert ledger.get(AlertCategory.ALTITUDE, alert.id) is None


class TestLedgerStats:

    def test_counts(self, ledger, clock):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)
        ledger.store(altitude_alert('AFR1234', Severity.SAFE), AlertCategory.ALTITUDE, persist=False)

        assert ledger.stats == {
            'altitude': {'active': 1, 'stored': 0},
            'collision': {'active': 1, 'stored': 1},
        }

        clock.advance(300)
        assert ledger.stats['collision'] == {'active': 1, 'stored': 0}

    def test_clear(self, ledger):
        ledger.store(collision_alert(1), AlertCategory.COLLISION)
        ledger.clear()

        assert ledger.list_active(AlertCategory.COLLISION) == []
        assert ledger.stats == {}


@pytest.mark.parametrize('cls', [CollisionAlert, AltitudeAlert])
def test_alerts_are_immutable(cls):
    alert = collision_alert(1) if cls is CollisionAlert else altitude_alert('X', Severity.HIGH)
    with pytest.raises(AttributeError):
        alert.severity = Severity.SAFE


class TestConcurrency:

    def test_store_racing_history(self, ledger):
        """Concurrent stores are never lost and readers never see a torn ledger."""
        errors = []

        def writer(start):
            try:
                for n in range(start, start + 300):
                    ledger.store(collision_alert(n), AlertCategory.COLLISION)
            except Exception as e:
                errors.append(e)

        def reader():
            try:
                for _ in range(100):
                    history = ledger.get_history(AlertCategory.COLLISION, limit=None)
                    assert len({a.id for a in history}) == len(history)
                    assert len(ledger.list_active(AlertCategory.COLLISION)) <= 100
                    ledger.stats
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(start,)) for start in (0, 300, 600)]
        threads += [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(ledger.get_history(AlertCategory.COLLISION, limit=None)) == 900
        assert len(ledger.list_active(AlertCategory.COLLISION)) == 100
