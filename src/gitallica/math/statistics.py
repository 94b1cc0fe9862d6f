"""Descriptive statistics: mean, median, percentiles and trend slope."""

from collections.abc import Sequence

import numpy as np


class Statistics:
    """Statistical helpers. Every method returns 0.0 for empty input."""

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """Compute arithmetic mean."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(values))

    @staticmethod
    def median(values: Sequence[float]) -> float:
        if len(values) == 0:
            return 0.0
        return float(np.median(values))

    @staticmethod
    def percentile(values: Sequence[float], p: float) -> float:
        """
        Percentile with linear interpolation between closest ranks.

        The rank is p/100 * (n - 1) over the sorted values, so p=0 is the
        minimum and p=100 the maximum.

        Args:
            values: Observations in any order
            p: Percentile in [0, 100]
        """
        if len(values) == 0:
            return 0.0
        p = min(max(p, 0.0), 100.0)
        return float(np.percentile(np.asarray(values, dtype=float), p, method="linear"))

    @staticmethod
    def linear_slope(values: Sequence[float]) -> float:
        """
        Ordinary least-squares slope of values against their index.

        Returns:
            Change per step; 0.0 when fewer than two points
        """
        if len(values) < 2:
            return 0.0
        x = np.arange(len(values), dtype=float)
        slope, _intercept = np.polyfit(x, np.asarray(values, dtype=float), 1)
        return float(slope)
