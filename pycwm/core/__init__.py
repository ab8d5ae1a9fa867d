"""
Core infrastructure for pycwm.

This module provides shared abstractions, utilities, and compute
infrastructure used by the weighted-mean, method and permutation-test
submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, worker pools, linear algebra primitives
"""

from pycwm.core.result import Result
from pycwm.core.exceptions import (
    PyCWMError,
    ValidationError,
    InvalidInputKind,
    NotWeightedMeanError,
    DimensionMismatch,
    UnsupportedMethodConfiguration,
    NumericalError,
    SingularMatrixError,
    FitFailure,
    PermutationDrawFailure,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyCWMError",
    "ValidationError",
    "InvalidInputKind",
    "NotWeightedMeanError",
    "DimensionMismatch",
    "UnsupportedMethodConfiguration",
    "NumericalError",
    "SingularMatrixError",
    "FitFailure",
    "PermutationDrawFailure",
]
