"""Unit tests for the Haversine distance helper."""

import pytest

from src.domain.distance import SEARCH_PRECISION, TRACKING_PRECISION, haversine_km


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(19.0544, 72.8340, 19.0544, 72.8340) == 0.0

    def test_symmetric(self):
        a = haversine_km(19.0544, 72.8340, 19.1176, 72.9060)
        b = haversine_km(19.1176, 72.9060, 19.0544, 72.8340)
        assert a == pytest.approx(b)

    def test_quarter_meridian(self):
        assert haversine_km(0, 0, 0, 90) == pytest.approx(10007.5, abs=0.1)

    def test_antipodal_points_do_not_raise(self):
        assert haversine_km(0, 0, 0, 180) == pytest.approx(20015.1, abs=0.1)

    def test_never_negative(self):
        assert haversine_km(-33.86, 151.21, 51.5, -0.12) > 0

    def test_search_precision(self):
        # 0.03 degrees of longitude on the equator is ~3.3358 km
        assert haversine_km(0, 0, 0, 0.03, precision=SEARCH_PRECISION) == 3.34

    def test_tracking_precision(self):
        assert haversine_km(0, 0, 0, 0.03, precision=TRACKING_PRECISION) == 3.3

    def test_unrounded_by_default(self):
        raw = haversine_km(0, 0, 0, 0.03)
        assert raw != round(raw, 2)
