"""
Great-circle geometry for safety checks.

Scalar Haversine for single lookups plus NumPy-vectorised variants used by
the detectors: one point against many zone centers, and all unordered
pairs of a fleet snapshot in a single pass.
"""

import math
from typing import Sequence, Tuple

import numpy as np

EARTH_RADIUS_KM = 6371.0


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in kilometers.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def _haversine_np(lat1, lon1, lat2, lon2) -> np.ndarray:
    """Element-wise Haversine over broadcastable arrays of degrees."""
    lat1 = np.radians(lat1)
    lat2 = np.radians(lat2)
    delta_lat = lat2 - lat1
    delta_lon = np.radians(lon2) - np.radians(lon1)

    a = (
        np.sin(delta_lat / 2) ** 2 +
        np.cos(lat1) * np.cos(lat2) * np.sin(delta_lon / 2) ** 2
    )
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distances_to_points(
    lat: float,
    lon: float,
    lats: np.ndarray,
    lons: np.ndarray,
) -> np.ndarray:
    """Distance in km from one point to each of ``lats``/``lons``."""
    return _haversine_np(lat, lon, lats, lons)


def pairwise_distances(
    lats: Sequence[float],
    lons: Sequence[float],
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Distances for every unordered pair of points.

    Returns (i, j, distance_km) arrays over the strict upper triangle, so
    each pair appears exactly once with i < j.
    """
    lats = np.asarray(lats, dtype=float)
    lons = np.asarray(lons, dtype=float)

    i, j = np.triu_indices(len(lats), k=1)
    if len(i) == 0:
        return i, j, np.empty(0)

    return i, j, _haversine_np(lats[i], lons[i], lats[j], lons[j])
