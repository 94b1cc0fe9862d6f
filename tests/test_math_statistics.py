"""Tests for gitallica.math.statistics module."""

import pytest

from gitallica.math.statistics import Statistics


class TestCentralTendency:
    """Tests for mean and median."""

    def test_mean_empty(self):
        """Mean of empty list is 0."""
        assert Statistics.mean([]) == 0.0

    def test_mean_known(self):
        assert Statistics.mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)

    def test_median_empty(self):
        assert Statistics.median([]) == 0.0

    def test_median_odd(self):
        assert Statistics.median([10, 12, 50, 11, 13]) == 12.0

    def test_median_even_interpolates(self):
        assert Statistics.median([1, 2, 3, 4]) == 2.5


class TestPercentile:
    """Tests for linear-interpolation percentiles."""

    def test_empty(self):
        assert Statistics.percentile([], 95) == 0.0

    def test_single_value(self):
        assert Statistics.percentile([7.0], 95) == 7.0

    def test_bounds(self):
        values = [5.0, 1.0, 3.0]
        assert Statistics.percentile(values, 0) == 1.0
        assert Statistics.percentile(values, 100) == 5.0

    def test_p95_interpolates(self):
        """Rank 0.95 * (n - 1) = 3.8 between 4.0 and 5.0."""
        assert Statistics.percentile([1.0, 2.0, 3.0, 4.0, 5.0], 95) == pytest.approx(4.8)

    def test_clamps_out_of_range(self):
        assert Statistics.percentile([1.0, 2.0], 150) == 2.0


class TestLinearSlope:
    """Tests for least-squares trend slope."""

    def test_too_few_points(self):
        assert Statistics.linear_slope([]) == 0.0
        assert Statistics.linear_slope([3.0]) == 0.0

    def test_flat_series(self):
        assert Statistics.linear_slope([4, 4, 4, 4]) == pytest.approx(0.0)

    def test_increasing_series(self):
        assert Statistics.linear_slope([1, 2, 3, 4]) == pytest.approx(1.0)

    def test_decreasing_series(self):
        assert Statistics.linear_slope([8, 6, 4, 2]) == pytest.approx(-2.0)
