"""
SkyGuard Flask Application.

Main entry point for the web application. Initializes:
- Monitor context (reference database, zones, stores)
- Collision and altitude detector timers
- Ingestion pipeline or demo traffic (optional)
- API routes

Usage:
    python -m skyguard.app

Or with gunicorn:
    gunicorn 'skyguard.app:create_app()'
"""

import logging
import os
import sys
from typing import Optional

from flask import Flask
from flask_cors import CORS

from skyguard.config import config
from skyguard.context import MonitorContext, MonitorInitError, build_context
from skyguard.monitor import SafetyMonitor
from skyguard.api import flights_bp, alerts_bp, status_bp
from skyguard.ingestion import IngestionPipeline
from skyguard.seed import DemoTraffic

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    ctx: Optional[MonitorContext] = None,
    start_monitoring: bool = True,
    start_ingestion: bool = False,
    start_demo: Optional[bool] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        ctx: Prebuilt monitor context. Built from config when omitted.
        start_monitoring: Whether to start the detector timers.
                          Set to False for testing.
        start_ingestion: Whether to start the background ingestion pipeline.
        start_demo: Whether to keep the demo aircraft live in the position
                    store. Defaults to SKYGUARD_DEMO.

    Returns:
        Configured Flask application instance.

    Raises:
        MonitorInitError if the reference database or zones are unavailable.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if ctx is None:
        logger.info('Initializing monitor context...')
        ctx = build_context()

    monitor = SafetyMonitor(ctx)
    app.config['SAFETY_MONITOR'] = monitor
    app.config['INGESTION_PIPELINE'] = None
    app.config['DEMO_TRAFFIC'] = None

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(status_bp)

    if start_demo is None:
        start_demo = ctx.config.demo.enabled

    if start_demo:
        demo = DemoTraffic(ctx.positions, interval=ctx.config.demo.refresh_interval)
        # Load synchronously so the first request already sees traffic
        demo.run_cycle()
        demo.start()
        app.config['DEMO_TRAFFIC'] = demo
        logger.info('Demo traffic enabled')

    if start_monitoring:
        monitor.start()
        logger.info(
            f'Monitoring started: collision every {ctx.config.collision.check_interval}s, '
            f'altitude every {ctx.config.altitude.check_interval}s'
        )

    if start_ingestion:
        pipeline = IngestionPipeline(ctx.positions, ctx.registry)
        pipeline.start()
        app.config['INGESTION_PIPELINE'] = pipeline
        logger.info(
            f'Ingestion started around {ctx.config.ingestion.airport_icao} '
            f'with radius {ctx.config.ingestion.radius_km}km'
        )

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'success': False, 'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'success': False, 'error': 'Method not allowed'}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'success': False, 'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    try:
        # Demo traffic replaces live providers
        app = create_app(start_ingestion=not config.demo.enabled)
    except MonitorInitError as e:
        logger.critical(f'Cannot start SkyGuard: {e}')
        sys.exit(1)

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting SkyGuard on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Disable reloader to prevent duplicate timer threads
    )


if __name__ == '__main__':
    run_development_server()
