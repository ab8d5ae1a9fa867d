"""
Linear regression, matching R's lm() + anova().

The test statistic is the F value of the predictor block in the
sequential ANOVA table, i.e. the overall F of the model when all
predictors enter as one term (R: ``anova(lm(M ~ env))$"F value"[1]``).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pycwm.core.compute.linalg.qr import qr_lstsq, LstsqResult
from pycwm.core.compute.tolerances import ZERO_VARIANCE_RTOL
from pycwm.core.exceptions import NumericalError
from pycwm.methods._common import (
    TAIL_ONE,
    FitOptions,
    FitResult,
    check_n_obs,
    complete_cases,
    predictor_labels,
)


def linear_fit(
    y: NDArray[np.floating[Any]],
    X: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]] | None = None,
) -> tuple[LstsqResult, dict[str, Any]]:
    """
    Fit y ~ 1 + X by (weighted) least squares.

    Returns the least squares result and a dict with the ANOVA
    decomposition: n, df_model, df_residual, ess, rss, F, p_value,
    r_squared, sigma.

    Raises:
        NumericalError: No residual degrees of freedom or constant response
        SingularMatrixError: Collinear or constant predictors
    """
    n, p = X.shape
    check_n_obs(n, p + 2, "linear regression")

    design = np.column_stack([np.ones(n), X])
    fit = qr_lstsq(design, y, weights)

    w = np.ones(n) if weights is None else weights
    y_bar = float(np.sum(w * y) / np.sum(w))
    tss = float(np.sum(w * (y - y_bar) ** 2))
    if tss <= ZERO_VARIANCE_RTOL * max(float(np.sum(w * y ** 2)), 1.0):
        raise NumericalError("linear regression: response is constant")

    df_residual = n - p - 1
    rss = fit.rss
    ess = max(tss - rss, 0.0)
    if rss > 0:
        f_value = (ess / p) / (rss / df_residual)
        p_value = float(sp_stats.f.sf(f_value, p, df_residual))
    else:
        # perfect fit
        f_value = float('inf')
        p_value = 0.0

    return fit, {
        'n': n,
        'df_model': p,
        'df_residual': df_residual,
        'ess': ess,
        'rss': rss,
        'F': float(f_value),
        'p_value': p_value,
        'r_squared': ess / tss,
        'sigma': float(np.sqrt(rss / df_residual)),
    }


def fit_lm(
    response: NDArray[np.floating[Any]],
    predictor: NDArray[np.floating[Any]],
    options: FitOptions,
) -> FitResult:
    """Linear regression of response on one or more predictors."""
    X = predictor.reshape(-1, 1) if predictor.ndim == 1 else predictor
    y, X, _ = complete_cases(response, X)
    fit, anova = linear_fit(y, X)

    names = ['(Intercept)'] + predictor_labels(options, X.shape[1])
    coefficients = {name: float(b) for name, b in zip(names, fit.coefficients)}
    se = np.sqrt(anova['sigma'] ** 2 * np.diag(fit.unscaled_cov))

    return FitResult(
        coefficients=coefficients,
        statistic=anova['F'],
        statistic_name='F value',
        p_value=anova['p_value'],
        tail=TAIL_ONE,
        summary={
            **anova,
            'std_errors': dict(zip(names, se.tolist())),
        },
    )
