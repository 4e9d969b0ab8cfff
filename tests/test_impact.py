"""Tests for the linear impact estimate."""

from __future__ import annotations

import pytest

from models.impact import aggregate_impact, calculate_impact, co2_for_quantity


class TestImpact:
    def test_linear_factors(self):
        est = calculate_impact(1000)
        assert est.co2_saved == 500.0
        assert est.waste_diverted == 1000.0
        assert est.energy_saved == 300.0

    def test_rounded_to_one_decimal(self):
        est = calculate_impact(333)
        assert est.co2_saved == 166.5
        assert est.energy_saved == pytest.approx(99.9)

    def test_negative_clamped(self):
        assert calculate_impact(-50).co2_saved == 0.0

    def test_aggregate(self):
        total = aggregate_impact([1000, 200])
        assert total.co2_saved == 600.0
        assert total.waste_diverted == 1200.0
        assert total.energy_saved == 360.0

    def test_aggregate_empty(self):
        assert aggregate_impact([]).waste_diverted == 0


class TestCo2ForQuantity:
    @pytest.mark.parametrize("qty,expected", [(5000, 2500.0), (1201, 600.0), (None, None), (0, None)])
    def test_values(self, qty, expected):
        assert co2_for_quantity(qty) == expected
