"""Tests for price and threshold formulas."""

from __future__ import annotations

import pytest

from threshold_tracker.models import AmmReserves
from threshold_tracker.pricing import compute_threshold, price_from_reserves, thresholds_disagree


class TestPriceFromReserves:
    def test_quote_over_base(self):
        assert price_from_reserves(AmmReserves(1_000_000, 1_200_000)) == pytest.approx(1.2)
        assert price_from_reserves(AmmReserves(1_000_000, 900_000)) == pytest.approx(0.9)

    def test_empty_side_returns_none(self):
        assert price_from_reserves(AmmReserves(0, 1_200_000)) is None
        assert price_from_reserves(AmmReserves(1_000_000, 0)) is None


class TestComputeThreshold:
    def test_pass_above_fail(self):
        assert compute_threshold(1.2, 0.9) == pytest.approx(33.3333333)

    def test_pass_below_fail(self):
        assert compute_threshold(0.9, 1.0) == pytest.approx(-10.0)

    def test_equal_prices(self):
        assert compute_threshold(1.0, 1.0) == 0.0

    def test_non_positive_fail_price(self):
        assert compute_threshold(1.2, 0.0) == 0.0
        assert compute_threshold(1.2, -1.0) == 0.0


class TestThresholdsDisagree:
    def test_within_tolerance(self):
        assert not thresholds_disagree(33.30, 33.3333, 0.1)

    def test_beyond_tolerance(self):
        assert thresholds_disagree(10.0, 33.3333, 0.1)
