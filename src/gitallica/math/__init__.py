"""Mathematical utilities for history statistics."""

from .entropy import Entropy
from .statistics import Statistics

__all__ = [
    "Entropy",
    "Statistics",
]
