"""
Permutation-test backends.

Available backends:
    CPUMopetBackend: standard and modified permutation tests
"""

from pycwm.permutation.backends.cpu import (
    CPUMopetBackend,
    ColumnStatistics,
    RowPermutationDraw,
    permutation_p_value,
)

__all__ = [
    "CPUMopetBackend",
    "ColumnStatistics",
    "RowPermutationDraw",
    "permutation_p_value",
]
