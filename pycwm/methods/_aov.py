"""
One-way analysis of variance of a response across the levels of one
categorical predictor (R: ``summary(aov(M ~ env))``).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pycwm.core.compute.tolerances import ZERO_VARIANCE_RTOL
from pycwm.core.exceptions import NumericalError
from pycwm.methods._common import (
    TAIL_ONE,
    FitOptions,
    FitResult,
    complete_cases,
)


def group_indices(labels: NDArray) -> tuple[list[str], NDArray[np.intp]]:
    """Sorted level names and the level index of every sample."""
    levels, codes = np.unique(labels.astype(str), return_inverse=True)
    return [str(v) for v in levels], codes.ravel()


def fit_aov(
    response: NDArray[np.floating[Any]],
    predictor: NDArray,
    options: FitOptions,
) -> FitResult:
    """
    One-way ANOVA F test.

    Coefficients use treatment coding: the intercept is the mean of the
    first level, every other level gets its difference from it.
    """
    y, labels, _ = complete_cases(response, predictor.ravel())
    levels, codes = group_indices(labels)
    n, g = len(y), len(levels)
    if g < 2:
        raise NumericalError(
            f"analysis of variance: need at least 2 groups, got {g}"
        )
    df_between, df_within = g - 1, n - g
    if df_within < 1:
        raise NumericalError(
            f"analysis of variance: no residual degrees of freedom "
            f"({n} observations in {g} groups)"
        )

    counts = np.bincount(codes, minlength=g)
    means = np.bincount(codes, weights=y, minlength=g) / counts
    grand = float(np.mean(y))

    ss_between = float(np.sum(counts * (means - grand) ** 2))
    ss_within = float(np.sum((y - means[codes]) ** 2))
    ss_total = ss_between + ss_within
    if ss_total <= ZERO_VARIANCE_RTOL * max(float(np.sum(y ** 2)), 1.0):
        raise NumericalError("analysis of variance: response is constant")

    ms_between = ss_between / df_between
    ms_within = ss_within / df_within
    if ms_within > 0:
        f_value = ms_between / ms_within
        p_value = float(sp_stats.f.sf(f_value, df_between, df_within))
    else:
        f_value = float('inf')
        p_value = 0.0

    coefficients = {'(Intercept)': float(means[0])}
    for level, mean in zip(levels[1:], means[1:]):
        coefficients[f'env{level}'] = float(mean - means[0])

    return FitResult(
        coefficients=coefficients,
        statistic=float(f_value),
        statistic_name='F value',
        p_value=p_value,
        tail=TAIL_ONE,
        summary={
            'n': n,
            'levels': levels,
            'group_sizes': counts.tolist(),
            'group_means': means.tolist(),
            'df': (df_between, df_within),
            'sum_sq': (ss_between, ss_within),
            'mean_sq': (ms_between, ms_within),
            'F': float(f_value),
            'p_value': p_value,
        },
    )
