"""Tests for great-circle distance."""

from __future__ import annotations

import pytest

from utils.geo import haversine_km

MUMBAI = (19.0760, 72.8777)
PUNE = (18.5204, 73.8567)
CHENNAI = (13.0827, 80.2707)


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(*MUMBAI, *MUMBAI) == pytest.approx(0.0, abs=1e-9)

    def test_mumbai_pune(self):
        assert 110 < haversine_km(*MUMBAI, *PUNE) < 130

    def test_mumbai_chennai(self):
        assert 1000 < haversine_km(*MUMBAI, *CHENNAI) < 1050

    def test_symmetric(self):
        assert haversine_km(*MUMBAI, *CHENNAI) == pytest.approx(haversine_km(*CHENNAI, *MUMBAI))

    def test_quarter_meridian(self):
        # equator to pole = πR/2
        assert haversine_km(0, 0, 90, 0) == pytest.approx(10007.54, rel=1e-4)
