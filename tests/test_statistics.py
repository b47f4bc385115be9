"""Tests for failure-rate and contribution statistics."""

from decimal import Decimal

import pytest

from tolstack.models import Dimension, Feature
from tolstack.statistics import (
    failure_rate,
    failure_rate_interval,
    percent_contribution,
)


class TestFailureRate:
    def test_fraction(self):
        assert failure_rate(5, 100) == Decimal("0.05")

    def test_zero(self):
        assert failure_rate(0, 10_000) == 0

    def test_bad_iterations(self):
        with pytest.raises(ValueError, match="iterations"):
            failure_rate(0, 0)

    def test_too_many_failures(self):
        with pytest.raises(ValueError, match="failures"):
            failure_rate(11, 10)


class TestFailureRateInterval:
    def test_zero_failures(self):
        low, high = failure_rate_interval(0, 100)
        assert low == 0.0
        # Upper bound is 1 - (alpha/2)^(1/n)
        assert high == pytest.approx(1 - 0.025 ** (1 / 100), rel=1e-6)

    def test_all_failures(self):
        low, high = failure_rate_interval(100, 100)
        assert high == 1.0
        assert low == pytest.approx(0.025 ** (1 / 100), rel=1e-6)

    def test_contains_estimate(self):
        low, high = failure_rate_interval(50, 1000)
        assert low < 0.05 < high

    def test_narrows_with_iterations(self):
        low1, high1 = failure_rate_interval(5, 100)
        low2, high2 = failure_rate_interval(500, 10_000)
        assert high2 - low2 < high1 - low1

    def test_wider_at_higher_confidence(self):
        low95, high95 = failure_rate_interval(10, 1000, confidence=0.95)
        low99, high99 = failure_rate_interval(10, 1000, confidence=0.99)
        assert low99 < low95
        assert high99 > high95

    def test_bad_confidence(self):
        with pytest.raises(ValueError, match="confidence"):
            failure_rate_interval(1, 10, confidence=1.5)


class TestPercentContribution:
    def _feature(self, name, tol, alpha=1):
        return Feature(name, Dimension.symmetric(1, tol), alpha)

    def test_two_equal(self):
        result = percent_contribution([self._feature("A", "0.1"), self._feature("B", "0.1")])
        assert len(result) == 2
        assert result[0][1] == Decimal(50)

    def test_dominant_contributor(self):
        result = percent_contribution([self._feature("A", "0.5"), self._feature("B", "0.01")])
        a_pct = next(p for n, p in result if n == "A")
        assert a_pct > 99

    def test_sensitivity_weighted(self):
        result = percent_contribution([
            self._feature("A", "0.1", alpha=-2),
            self._feature("B", "0.1"),
        ])
        assert result == [("A", Decimal(80)), ("B", Decimal(20))]

    def test_zero_variance(self):
        result = percent_contribution([self._feature("A", 0), self._feature("B", 0)])
        assert result == [("A", 0), ("B", 0)]
