"""Information theory: Shannon entropy of count distributions."""

import math
from collections.abc import Mapping
from typing import Union


class Entropy:
    """Information entropy calculations."""

    @staticmethod
    def shannon(distribution: Mapping[str, Union[int, float]]) -> float:
        """
        Compute Shannon entropy H(X) = -Σ p(x) log₂ p(x).

        Args:
            distribution: Dictionary with event -> count mapping

        Returns:
            Entropy in bits (0.0 for an empty distribution)
        """
        total = sum(distribution.values())
        if total == 0:
            return 0.0

        entropy = 0.0
        for count in distribution.values():
            p = count / total
            if p > 0:
                entropy -= p * math.log2(p)

        return entropy
