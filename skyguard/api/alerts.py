"""
Safety alert API endpoints.

Provides endpoints for:
- GET  /api/alerts/collision - Active collision alerts (most recent first)
- GET  /api/alerts/collision/history - Non-expired collision alerts by time
- POST /api/alerts/collision/check - Run a collision check now
- GET  /api/alerts/altitude - Fresh altitude check with monitored aircraft
- GET  /api/alerts/altitude/history - Non-expired low-altitude alerts by time
- GET  /api/alerts/altitude/<callsign> - Altitude verdict for one aircraft
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

logger = logging.getLogger(__name__)

alerts_bp = Blueprint('alerts', __name__, url_prefix='/api/alerts')

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 500


def _monitor():
    return current_app.config['SAFETY_MONITOR']


def _history_limit() -> int:
    try:
        limit = int(request.args.get('limit', DEFAULT_HISTORY_LIMIT))
    except ValueError:
        limit = DEFAULT_HISTORY_LIMIT
    return max(0, min(limit, MAX_HISTORY_LIMIT))


@alerts_bp.route('/collision', methods=['GET'])
def active_collision_alerts():
    alerts = _monitor().get_active_collision_alerts()
    return jsonify({
        'success': True,
        'count': len(alerts),
        'data': [a.to_dict() for a in alerts],
    })


@alerts_bp.route('/collision/history', methods=['GET'])
def collision_history():
    """
    Collision alert history.

    Query parameters:
    - limit: int, max results to return (default 50, max 500)
    """
    alerts = _monitor().get_collision_history(_history_limit())
    return jsonify({
        'success': True,
        'count': len(alerts),
        'data': [a.to_dict() for a in alerts],
    })


@alerts_bp.route('/collision/check', methods=['POST'])
def check_collisions():
    """Run a collision check immediately; same effect as an early timer fire."""
    alerts = _monitor().check_collisions()
    return jsonify({
        'success': True,
        'count': len(alerts),
        'data': [a.to_dict() for a in alerts],
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@alerts_bp.route('/altitude', methods=['GET'])
def active_altitude_alerts():
    """
    Current low-altitude picture.

    Includes SAFE (in-zone) entries and every monitored aircraft.
    """
    result = _monitor().get_active_altitude_alerts()
    data = result.to_dict()
    return jsonify({
        'success': True,
        'count': len(result.alerts),
        'risk_count': len(result.risk_alerts),
        'data': data,
    })


@alerts_bp.route('/altitude/history', methods=['GET'])
def altitude_history():
    alerts = _monitor().get_altitude_history(_history_limit())
    return jsonify({
        'success': True,
        'count': len(alerts),
        'data': [a.to_dict() for a in alerts],
    })


@alerts_bp.route('/altitude/<callsign>', methods=['GET'])
def aircraft_altitude_status(callsign: str):
    status = _monitor().get_aircraft_altitude_status(callsign)
    if status is None:
        return jsonify({'success': False, 'error': 'Aircraft not found'}), 404

    return jsonify({
        'success': True,
        'data': status.to_dict(),
    })
