"""
Common data structures for modified permutation tests.

ColumnOutcome holds everything known about one tested column; MopetParams
is the payload wrapped by Result[P] and exposed through MopetSolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import FitFailure, PermutationDrawFailure


@dataclass(frozen=True)
class ColumnOutcome:
    """
    Test outcome for one column.

    The column is a weighted-mean attribute under ``M ~ env`` and an
    environmental variable under ``env ~ M``.

    Attributes:
        name: Column label
        coefficients: Model coefficients of the real fit (empty on failure)
        statistic: Test statistic of the real fit (NaN on failure)
        statistic_name: Label of the statistic
        tail: 'one' or 'two'
        orig_p: Parametric p-value
        perm_p: Standard (row) permutation p-value, None if not run
        modif_p: Modified (attribute) permutation p-value, None if not run
        perm_stats: Null statistics of the standard test, NaN for failed draws
        modif_stats: Null statistics of the modified test, NaN for failed draws
        n_perm_valid: Draws used for perm_p
        n_modif_valid: Draws used for modif_p
        draw_failures: Draws that could not be fitted, excluded from the
            p-values
        error: Why the real fit failed, or None
        real_summary: Method-specific details of the real fit
    """
    name: str
    coefficients: dict[str, float]
    statistic: float
    statistic_name: str
    tail: str
    orig_p: float
    perm_p: float | None = None
    modif_p: float | None = None
    perm_stats: NDArray[np.floating[Any]] | None = None
    modif_stats: NDArray[np.floating[Any]] | None = None
    n_perm_valid: int = 0
    n_modif_valid: int = 0
    draw_failures: tuple[PermutationDrawFailure, ...] = field(default_factory=tuple)
    error: FitFailure | None = None
    real_summary: dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class MopetParams:
    """
    Parameter payload for a modified permutation test.

    - outcomes: one ColumnOutcome per tested column
    - permutations: draws requested per test
    - method, cor_coef, dependence, test: resolved argument values
    """
    outcomes: tuple[ColumnOutcome, ...]
    permutations: int
    method: str
    cor_coef: str
    dependence: str
    test: str
