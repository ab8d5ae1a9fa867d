"""
Common types for the statistical methods.

Every method returns the same FitResult structure, so the permutation
engine can treat linear regression, ANOVA, correlation, Kruskal-Wallis
and slope regression uniformly. Method-specific output goes in
``summary``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import NumericalError

TAIL_ONE = 'one'
TAIL_TWO = 'two'

COR_COEFS = ('pearson', 'spearman', 'kendall')


@dataclass(frozen=True)
class FitOptions:
    """
    Options shared by all fits of one test.

    Attributes
    ----------
    cor_coef : str
        'pearson', 'spearman' or 'kendall' (correlation only).
    weights : ndarray or None
        Case weights, one per sample (slope regression: total abundance).
    predictor_names : tuple of str or None
        Labels used for coefficient names.
    """
    cor_coef: str = 'pearson'
    weights: NDArray[np.floating[Any]] | None = None
    predictor_names: tuple[str, ...] | None = None


@dataclass(frozen=True)
class FitResult:
    """
    Uniform result of one model fit.

    Attributes
    ----------
    coefficients : dict
        Named model coefficients (or the correlation coefficient, or the
        Kruskal-Wallis degrees of freedom).
    statistic : float
        Test statistic used for the permutation tests.
    statistic_name : str
        Name of the statistic ("F value", "t", "S", "z", "b", ...).
    p_value : float
        Parametric p-value.
    tail : str
        'one' (large values significant) or 'two' (compare |statistic|).
    summary : dict
        Method-specific details (df, sums of squares, r², n used, ...).
    """
    coefficients: dict[str, float]
    statistic: float
    statistic_name: str
    p_value: float
    tail: str
    summary: dict[str, Any] = field(default_factory=dict)


def complete_cases(
    response: NDArray,
    predictor: NDArray,
    weights: NDArray | None = None,
) -> tuple[NDArray, NDArray, NDArray | None]:
    """
    Drop samples with a missing response, predictor or weight.

    Numeric predictors are (n, p) float arrays; categorical predictors
    are (n,) label arrays, where only the response can be missing.
    """
    keep = ~np.isnan(response)
    if predictor.dtype.kind == 'f':
        if predictor.ndim == 1:
            keep &= ~np.isnan(predictor)
        else:
            keep &= ~np.any(np.isnan(predictor), axis=1)
    if weights is not None:
        keep &= ~np.isnan(weights)
    if keep.all():
        return response, predictor, weights
    return (
        response[keep],
        predictor[keep],
        None if weights is None else weights[keep],
    )


def check_n_obs(n: int, minimum: int, what: str) -> None:
    """Raise NumericalError if fewer than ``minimum`` complete samples remain."""
    if n < minimum:
        raise NumericalError(
            f"{what}: not enough complete observations ({n}, need >= {minimum})"
        )


def predictor_labels(options: FitOptions, p: int) -> list[str]:
    if options.predictor_names is not None and len(options.predictor_names) == p:
        return list(options.predictor_names)
    if p == 1:
        return ['x']
    return [f'x{i + 1}' for i in range(p)]
