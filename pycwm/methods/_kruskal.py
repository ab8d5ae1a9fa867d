"""Kruskal-Wallis rank sum test (R: ``kruskal.test(M ~ env)``)."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pycwm.core.exceptions import NumericalError
from pycwm.methods._aov import group_indices
from pycwm.methods._common import (
    TAIL_ONE,
    FitOptions,
    FitResult,
    complete_cases,
)


def fit_kruskal(
    response: NDArray[np.floating[Any]],
    predictor: NDArray,
    options: FitOptions,
) -> FitResult:
    """
    Kruskal-Wallis H with the correction for ties.

    The only "coefficient" is the degrees of freedom, g - 1.
    """
    y, labels, _ = complete_cases(response, predictor.ravel())
    levels, codes = group_indices(labels)
    n, g = len(y), len(levels)
    if g < 2:
        raise NumericalError(
            f"Kruskal-Wallis test: need at least 2 groups, got {g}"
        )

    ranks = sp_stats.rankdata(y)
    counts = np.bincount(codes, minlength=g)
    rank_sums = np.bincount(codes, weights=ranks, minlength=g)

    h = 12.0 / (n * (n + 1)) * float(np.sum(rank_sums ** 2 / counts)) - 3.0 * (n + 1)

    _, ties = np.unique(y, return_counts=True)
    correction = 1.0 - float(np.sum(ties ** 3 - ties)) / (n ** 3 - n)
    if correction <= 0:
        raise NumericalError("Kruskal-Wallis test: all observations are tied")
    h /= correction

    df = g - 1
    p_value = float(sp_stats.chi2.sf(h, df))

    return FitResult(
        coefficients={'df': float(df)},
        statistic=float(h),
        statistic_name='Kruskal-Wallis chi-squared',
        p_value=p_value,
        tail=TAIL_ONE,
        summary={
            'n': n,
            'levels': levels,
            'group_sizes': counts.tolist(),
            'mean_ranks': (rank_sums / counts).tolist(),
            'df': df,
            'tie_correction': correction,
            'p_value': p_value,
        },
    )
