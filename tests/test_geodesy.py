"""Tests for great-circle distance helpers."""

import math

import numpy as np
import pytest

from skyguard.safety.geodesy import (
    EARTH_RADIUS_KM,
    distances_to_points,
    haversine_distance,
    pairwise_distances,
)


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_distance(50.0379, 8.5622, 50.0379, 8.5622) == 0

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is R * pi / 180."""
        expected = EARTH_RADIUS_KM * math.pi / 180
        assert haversine_distance(50.0, 8.5, 51.0, 8.5) == pytest.approx(expected, rel=1e-9)

    def test_symmetric(self):
        d1 = haversine_distance(50.25, 8.75, 50.30, 8.30)
        d2 = haversine_distance(50.30, 8.30, 50.25, 8.75)
        assert d1 == pytest.approx(d2)

    def test_frankfurt_to_london(self):
        """FRA to LHR is roughly 650 km."""
        d = haversine_distance(50.0379, 8.5622, 51.4700, -0.4543)
        assert 640 < d < 665


class TestVectorised:

    def test_distances_to_points_matches_scalar(self):
        lats = np.array([50.0, 50.1, 51.0])
        lons = np.array([8.5, 8.6, 9.0])
        result = distances_to_points(50.0379, 8.5622, lats, lons)

        for k in range(3):
            assert result[k] == pytest.approx(haversine_distance(50.0379, 8.5622, lats[k], lons[k]))

    def test_pairwise_covers_each_unordered_pair_once(self):
        lats = [50.0, 50.1, 50.2, 50.3]
        lons = [8.5, 8.6, 8.7, 8.8]
        i, j, d = pairwise_distances(lats, lons)

        assert len(d) == 6
        assert all(a < b for a, b in zip(i, j))
        assert len({(int(a), int(b)) for a, b in zip(i, j)}) == 6

    def test_pairwise_matches_scalar(self):
        lats = [50.0, 50.05, 50.3]
        lons = [8.5, 8.52, 8.9]
        i, j, d = pairwise_distances(lats, lons)

        for a, b, dist in zip(i, j, d):
            assert dist == pytest.approx(haversine_distance(lats[a], lons[a], lats[b], lons[b]))

    @pytest.mark.parametrize('count', [0, 1])
    def test_pairwise_needs_two_points(self, count):
        i, j, d = pairwise_distances([50.0] * count, [8.5] * count)
        assert len(i) == len(j) == len(d) == 0
