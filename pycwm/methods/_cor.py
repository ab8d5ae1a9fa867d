"""
Correlation tests (R: ``cor.test(M, env, method=...)``).

The permutation statistic is the test statistic R reports:
    pearson   t = r * sqrt((n - 2) / (1 - r^2))
    spearman  S = (n^3 - n) * (1 - rho) / 6
    kendall   z = S_K / sqrt(var(S_K)), S_K = concordant - discordant pairs,
              with the variance adjusted for ties

Note that Spearman's S decreases as rho increases. Its p-value uses the
t approximation, as scipy.stats.spearmanr does.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pycwm.core.compute.tolerances import ZERO_VARIANCE_RTOL
from pycwm.core.exceptions import NumericalError
from pycwm.methods._common import (
    TAIL_TWO,
    FitOptions,
    FitResult,
    check_n_obs,
    complete_cases,
)


def _check_not_constant(v: NDArray[np.floating[Any]], what: str) -> None:
    spread = float(np.ptp(v))
    if spread <= ZERO_VARIANCE_RTOL * max(float(np.max(np.abs(v))), 1.0):
        raise NumericalError(f"correlation: {what} is constant (standard deviation is zero)")


def _pearson_t(r: float, n: int) -> tuple[float, float]:
    df = n - 2
    denom = 1.0 - r * r
    if denom <= 0:
        return float(np.copysign(np.inf, r)), 0.0
    t = r * np.sqrt(df / denom)
    return float(t), float(2.0 * sp_stats.t.sf(abs(t), df))


def _tie_sums(v: NDArray[np.floating[Any]]) -> tuple[float, float, float]:
    """Sums of t(t-1), t(t-1)(t-2) and t(t-1)(2t+5) over tie groups."""
    _, t = np.unique(v, return_counts=True)
    t = t[t > 1].astype(np.float64)
    return (
        float(np.sum(t * (t - 1))),
        float(np.sum(t * (t - 1) * (t - 2))),
        float(np.sum(t * (t - 1) * (2 * t + 5))),
    )


def kendall_z(x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]], tau_b: float) -> float:
    """Normal score of Kendall's S, with the tie-adjusted variance."""
    n = len(x)
    n0 = n * (n - 1) / 2.0
    a1, a2, a3 = _tie_sums(x)
    b1, b2, b3 = _tie_sums(y)

    s = tau_b * np.sqrt((n0 - a1 / 2.0) * (n0 - b1 / 2.0))
    var_s = (
        (n * (n - 1) * (2 * n + 5) - a3 - b3) / 18.0
        + a1 * b1 / (2.0 * n * (n - 1))
        + a2 * b2 / (9.0 * n * (n - 1) * (n - 2))
    )
    return float(s / np.sqrt(var_s))


def fit_cor(
    response: NDArray[np.floating[Any]],
    predictor: NDArray[np.floating[Any]],
    options: FitOptions,
) -> FitResult:
    """Correlation test between the response and a single predictor."""
    x = predictor.ravel() if predictor.ndim > 1 else predictor
    y, x, _ = complete_cases(response, x)
    n = len(y)
    check_n_obs(n, 3, "correlation")
    _check_not_constant(y, "response")
    _check_not_constant(x, "predictor")

    coef = options.cor_coef
    if coef == 'pearson':
        r = float(np.clip(np.corrcoef(y, x)[0, 1], -1.0, 1.0))
        t, p_value = _pearson_t(r, n)
        coefficients = {'cor': r}
        statistic, statistic_name = t, 't'
        summary = {'n': n, 'df': n - 2, 'estimate': r, 'p_value': p_value}
    elif coef == 'spearman':
        rho = float(np.clip(
            np.corrcoef(sp_stats.rankdata(y), sp_stats.rankdata(x))[0, 1], -1.0, 1.0
        ))
        _, p_value = _pearson_t(rho, n)
        statistic = (n ** 3 - n) * (1.0 - rho) / 6.0
        coefficients = {'rho': rho}
        statistic_name = 'S'
        summary = {'n': n, 'estimate': rho, 'p_value': p_value}
    elif coef == 'kendall':
        res = sp_stats.kendalltau(y, x)
        tau = float(res.statistic)
        if np.isnan(tau):
            raise NumericalError("correlation: Kendall's tau is undefined")
        p_value = float(res.pvalue)
        statistic = kendall_z(y, x, tau)
        coefficients = {'tau': tau}
        statistic_name = 'z'
        summary = {'n': n, 'estimate': tau, 'p_value': p_value}
    else:
        raise ValueError(f"unknown correlation coefficient {coef!r}")

    return FitResult(
        coefficients=coefficients,
        statistic=float(statistic),
        statistic_name=statistic_name,
        p_value=p_value,
        tail=TAIL_TWO,
        summary={'method': coef, **summary},
    )
