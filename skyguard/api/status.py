"""
System status API endpoint.

Provides endpoints for:
- GET /api/status - Detector, store and ingestion status
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

logger = logging.getLogger(__name__)

status_bp = Blueprint('status', __name__, url_prefix='/api')


@status_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Detector timer status and cycle counts
    - Position store and alert ledger statistics
    - Reference database connectivity
    - Ingestion pipeline status
    """
    start_time = time.perf_counter()
    monitor = current_app.config['SAFETY_MONITOR']

    db_ok = True
    try:
        with monitor.ctx.engine.connect() as conn:
            conn.execute(text('SELECT 1'))
    except Exception as e:
        db_ok = False
        logger.error(f'Database health check failed: {e}')

    pipeline = current_app.config.get('INGESTION_PIPELINE')
    pipeline_stats = pipeline.stats if pipeline else {'running': False}

    stats = monitor.stats
    detectors_running = (
        stats['collision_detector']['running'] and
        stats['altitude_detector']['running']
    )

    cfg = monitor.ctx.config
    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if (db_ok and detectors_running) else 'degraded',
        'database': {
            'connected': db_ok,
            'type': 'sqlite' if cfg.database.is_sqlite else 'other',
        },
        'monitor': stats,
        'ingestion': pipeline_stats,
        'config': {
            'safe_distance_km': cfg.collision.safe_distance_km,
            'safe_altitude_diff_ft': cfg.collision.safe_altitude_diff_ft,
            'collision_check_interval': cfg.collision.check_interval,
            'min_safe_altitude_ft': cfg.altitude.min_safe_altitude_ft,
            'altitude_check_interval': cfg.altitude.check_interval,
            'alert_ttl_seconds': cfg.alerts.ttl_seconds,
            'alert_active_limit': cfg.alerts.active_limit,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })
