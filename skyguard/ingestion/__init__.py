"""
Data ingestion module for SkyGuard.

Polls OpenSky (live positions) and AviationStack (schedules) and
translates their formats into the position store and schedule registry.
"""

from skyguard.ingestion.opensky_client import OpenSkyClient, StateVector
from skyguard.ingestion.aviationstack_client import AviationStackClient
from skyguard.ingestion.pipeline import IngestionPipeline

__all__ = ['OpenSkyClient', 'StateVector', 'AviationStackClient', 'IngestionPipeline']
