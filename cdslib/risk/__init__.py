"""Spread sensitivities by bump and reprice."""

from .report import bucketed_cs01_frame, bucketed_cs01_matrix_frame
from .spread_sensitivity import FiniteDifferenceSpreadSensitivityCalculator

__all__ = [
    "FiniteDifferenceSpreadSensitivityCalculator",
    "bucketed_cs01_frame",
    "bucketed_cs01_matrix_frame",
]
