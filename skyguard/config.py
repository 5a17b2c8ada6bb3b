"""
Configuration management for SkyGuard.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class CollisionConfig:
    """Pairwise separation thresholds."""
    safe_distance_km: float = float(os.getenv('COLLISION_SAFE_DISTANCE_KM', '5'))
    safe_altitude_diff_ft: float = float(os.getenv('COLLISION_SAFE_ALTITUDE_FT', '1000'))
    check_interval: float = float(os.getenv('COLLISION_CHECK_INTERVAL', '5'))


@dataclass(frozen=True)
class AltitudeConfig:
    """Low-altitude monitoring settings."""
    min_safe_altitude_ft: float = float(os.getenv('MIN_SAFE_ALTITUDE_FT', '1000'))
    check_interval: float = float(os.getenv('ALTITUDE_CHECK_INTERVAL', '5'))
    zone_lookup_timeout: float = float(os.getenv('ZONE_LOOKUP_TIMEOUT_SECONDS', '1'))


@dataclass(frozen=True)
class AlertConfig:
    """Alert ledger retention."""
    ttl_seconds: int = int(os.getenv('ALERT_TTL_SECONDS', '300'))
    active_limit: int = int(os.getenv('ALERT_ACTIVE_LIMIT', '100'))


@dataclass(frozen=True)
class PositionConfig:
    """Live position store settings."""
    ttl_seconds: int = int(os.getenv('POSITION_TTL_SECONDS', '300'))


@dataclass(frozen=True)
class DatabaseConfig:
    """Reference database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///skyguard.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class RegistryConfig:
    """Gate/schedule registry lookups."""
    timeout_seconds: float = float(os.getenv('REGISTRY_TIMEOUT_SECONDS', '2'))
    max_workers: int = int(os.getenv('REGISTRY_MAX_WORKERS', '8'))


@dataclass(frozen=True)
class IngestionConfig:
    """Data ingestion settings."""
    poll_interval: int = int(os.getenv('FLIGHT_DATA_REFRESH_INTERVAL', '10'))

    # Area of interest around the monitored airport
    airport_icao: str = os.getenv('AIRPORT_ICAO', 'EDDF')
    airport_iata: str = os.getenv('AIRPORT_IATA', 'FRA')
    airport_latitude: float = float(os.getenv('AIRPORT_LATITUDE', '50.0379'))
    airport_longitude: float = float(os.getenv('AIRPORT_LONGITUDE', '8.5622'))
    radius_km: float = float(os.getenv('AIRPORT_ZONE_RADIUS_KM', '10'))


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = 'https://opensky-network.org/api'

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class AviationStackConfig:
    """AviationStack API configuration for flight schedule data."""
    api_key: Optional[str] = os.getenv('AVIATIONSTACK_API_KEY') or None
    base_url: str = 'http://api.aviationstack.com/v1'

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class DemoConfig:
    """Built-in demo traffic, for running without live providers."""
    enabled: bool = os.getenv('SKYGUARD_DEMO', '0') == '1'
    # Must stay below POSITION_TTL_SECONDS so demo aircraft never expire
    refresh_interval: float = float(os.getenv('DEMO_REFRESH_INTERVAL', '60'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    collision: CollisionConfig
    altitude: AltitudeConfig
    alerts: AlertConfig
    positions: PositionConfig
    database: DatabaseConfig
    registry: RegistryConfig
    ingestion: IngestionConfig
    opensky: OpenSkyConfig
    aviationstack: AviationStackConfig
    demo: DemoConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        collision=CollisionConfig(),
        altitude=AltitudeConfig(),
        alerts=AlertConfig(),
        positions=PositionConfig(),
        database=DatabaseConfig(),
        registry=RegistryConfig(),
        ingestion=IngestionConfig(),
        opensky=OpenSkyConfig(),
        aviationstack=AviationStackConfig(),
        demo=DemoConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
