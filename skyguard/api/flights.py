"""
Flight monitoring API endpoints.

Provides endpoints for:
- GET /api/flights/live - All live flights with positions, gates and schedules
- GET /api/flights/summary - Fleet and gate counts
- GET /api/flights/gates/status - Gate occupancy
- GET /api/flights/terminal/<name> - Live flights at one terminal
- GET /api/flights/<flight_number> - Single flight details
- POST /api/flights/refresh - Run an ingestion cycle immediately
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


def _monitor():
    return current_app.config['SAFETY_MONITOR']


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


@flights_bp.route('/live', methods=['GET'])
def live_flights():
    """
    List all live flights.

    Each entry merges the live position with gate assignment and schedule.
    Response includes query timing for latency awareness.
    """
    start_time = time.perf_counter()

    flights = _monitor().get_live_flights()

    return jsonify({
        'success': True,
        'count': len(flights),
        'data': [f.to_dict() for f in flights],
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': _elapsed_ms(start_time),
    })


@flights_bp.route('/summary', methods=['GET'])
def summary():
    """Flight and gate counts, computed fresh."""
    return jsonify({
        'success': True,
        'data': _monitor().get_summary(),
    })


@flights_bp.route('/gates/status', methods=['GET'])
def gate_status():
    """Gate occupancy status."""
    gates = _monitor().get_gate_status()
    if gates is None:
        return jsonify({'success': False, 'error': 'Gate registry unavailable'}), 503

    return jsonify({
        'success': True,
        'count': len(gates),
        'data': [g.to_dict() for g in gates],
    })


@flights_bp.route('/terminal/<terminal_name>', methods=['GET'])
def flights_by_terminal(terminal_name: str):
    """Live flights assigned to gates in one terminal."""
    flights = _monitor().get_flights_by_terminal(terminal_name)

    return jsonify({
        'success': True,
        'terminal': terminal_name,
        'count': len(flights),
        'data': [f.to_dict() for f in flights],
    })


@flights_bp.route('/refresh', methods=['POST'])
def refresh():
    """
    Run one ingestion cycle now.

    Returns 503 when the ingestion pipeline is not running.
    """
    pipeline = current_app.config.get('INGESTION_PIPELINE')
    if pipeline is None or not pipeline.is_running:
        return jsonify({'success': False, 'error': 'Ingestion is not running'}), 503

    start_time = time.perf_counter()
    count = pipeline.fetch_and_process()
    logger.info(f'Manual refresh wrote {count} positions')

    return jsonify({
        'success': True,
        'message': 'Flight data refreshed',
        'count': count,
        'query_time_ms': _elapsed_ms(start_time),
    })


@flights_bp.route('/<flight_number>', methods=['GET'])
def flight_details(flight_number: str):
    """
    Get details for a single flight.

    Live position when tracked, otherwise schedule-only data.
    """
    start_time = time.perf_counter()

    flight = _monitor().get_flight(flight_number)
    if flight is None:
        return jsonify({'success': False, 'error': 'Flight not found'}), 404

    return jsonify({
        'success': True,
        'data': flight.to_dict(),
        'query_time_ms': _elapsed_ms(start_time),
    })
