"""
Weighted slope regression.

Same model as linear regression, but the test statistic is the slope b
itself and samples are weighted by their total abundance (R:
``lm(M ~ env, weights = rowSums(sitspe))``). Unlike F or r², the slope
keeps its sign, so the test is two-sided.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pycwm.core.exceptions import NumericalError
from pycwm.methods._common import (
    TAIL_TWO,
    FitOptions,
    FitResult,
    complete_cases,
    predictor_labels,
)
from pycwm.methods._lm import linear_fit


def fit_slope(
    response: NDArray[np.floating[Any]],
    predictor: NDArray[np.floating[Any]],
    options: FitOptions,
) -> FitResult:
    """Abundance-weighted regression slope of response on one predictor."""
    if options.weights is None:
        raise NumericalError("slope regression: case weights are required")

    X = predictor.reshape(-1, 1) if predictor.ndim == 1 else predictor
    y, X, w = complete_cases(response, X, options.weights)
    keep = w > 0
    if not keep.all():
        y, X, w = y[keep], X[keep], w[keep]

    fit, anova = linear_fit(y, X, w)

    b = float(fit.coefficients[1])
    se_b = float(anova['sigma'] * np.sqrt(fit.unscaled_cov[1, 1]))
    if se_b > 0:
        t_value = b / se_b
        p_value = float(2.0 * sp_stats.t.sf(abs(t_value), anova['df_residual']))
    else:
        t_value = float('inf') if b != 0 else float('nan')
        p_value = 0.0

    names = ['(Intercept)'] + predictor_labels(options, X.shape[1])
    return FitResult(
        coefficients={name: float(c) for name, c in zip(names, fit.coefficients)},
        statistic=b,
        statistic_name='b',
        p_value=p_value,
        tail=TAIL_TWO,
        summary={
            **anova,
            'std_error': se_b,
            't_value': float(t_value),
            'sum_weights': float(np.sum(w)),
        },
    )
