"""
Registry of the statistical methods available to mopet().

Each MethodSpec describes how a method is fitted and how its test
statistic is compared against a null distribution. The registry is
built once at import and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import FitFailure, NumericalError
from pycwm.core.validation import match_arg
from pycwm.methods._common import (
    TAIL_ONE,
    TAIL_TWO,
    FitOptions,
    FitResult,
)
from pycwm.methods._lm import fit_lm
from pycwm.methods._aov import fit_aov
from pycwm.methods._cor import fit_cor
from pycwm.methods._kruskal import fit_kruskal
from pycwm.methods._slope import fit_slope

FitFunction = Callable[[NDArray, NDArray, FitOptions], FitResult]

_NUMERIC_ERRORS = (
    NumericalError,
    np.linalg.LinAlgError,
    FloatingPointError,
    ZeroDivisionError,
    ValueError,
)


@dataclass(frozen=True)
class MethodSpec:
    """
    Description of one statistical method.

    Attributes:
        name: Method name as accepted by ``mopet(method=...)``
        fit: ``fit(response, predictor, options) -> FitResult``
        tail: 'one' (larger statistic is more extreme) or 'two'
            (larger absolute statistic is more extreme)
        statistic_name: Label of the test statistic
        description: Human readable model description
        supports_env_response: Can be fitted with env as response
            (``dependence='env ~ M'``)
        categorical_predictor: Predictor is a grouping factor
        single_predictor: Predictor must be a single column
        needs_weights: Needs per-sample weights (total abundance)
    """
    name: str
    fit: FitFunction
    tail: str
    statistic_name: str
    description: str
    supports_env_response: bool = False
    categorical_predictor: bool = False
    single_predictor: bool = False
    needs_weights: bool = False


METHODS: dict[str, MethodSpec] = {
    'lm': MethodSpec(
        name='lm',
        fit=fit_lm,
        tail=TAIL_ONE,
        statistic_name='F value',
        description='linear regression',
        supports_env_response=True,
    ),
    'aov': MethodSpec(
        name='aov',
        fit=fit_aov,
        tail=TAIL_ONE,
        statistic_name='F value',
        description='one-way analysis of variance',
        categorical_predictor=True,
        single_predictor=True,
    ),
    'cor': MethodSpec(
        name='cor',
        fit=fit_cor,
        tail=TAIL_TWO,
        statistic_name='t',
        description='correlation',
        single_predictor=True,
    ),
    'kruskal': MethodSpec(
        name='kruskal',
        fit=fit_kruskal,
        tail=TAIL_ONE,
        statistic_name='Kruskal-Wallis chi-squared',
        description='Kruskal-Wallis rank sum test',
        categorical_predictor=True,
        single_predictor=True,
    ),
    'slope': MethodSpec(
        name='slope',
        fit=fit_slope,
        tail=TAIL_TWO,
        statistic_name='b',
        description='abundance-weighted regression slope',
        single_predictor=True,
        needs_weights=True,
    ),
}

METHOD_NAMES: tuple[str, ...] = tuple(METHODS)


def get_method(name: str) -> MethodSpec:
    """Look up a method by (possibly abbreviated) name."""
    return METHODS[match_arg(name, METHOD_NAMES, 'method')]


def statistic_name(spec: MethodSpec, cor_coef: str = 'pearson') -> str:
    """Label of the statistic for this method and coefficient."""
    if spec.name == 'cor':
        return {'pearson': 't', 'spearman': 'S', 'kendall': 'z'}[cor_coef]
    return spec.statistic_name


def extremeness(spec: MethodSpec, cor_coef: str = 'pearson') -> str:
    """
    How a null statistic is compared with the observed one.

    '>=' : null >= observed counts as at least as extreme
    '<=' : null <= observed (Spearman's S falls as rho rises)
    """
    if spec.name == 'cor' and cor_coef == 'spearman':
        return '<='
    return '>='


def fit_column(
    spec: MethodSpec,
    response: NDArray[np.floating[Any]],
    predictor: NDArray,
    options: FitOptions,
    column: int | None = None,
) -> FitResult:
    """
    Fit one method to one column.

    Numerical problems (singular design, constant response, too few
    complete observations) are raised as FitFailure tagged with the
    column index.

    Raises:
        FitFailure: If the model cannot be fitted
    """
    try:
        with np.errstate(divide='ignore', invalid='ignore'):
            return spec.fit(response, predictor, options)
    except FitFailure:
        raise
    except _NUMERIC_ERRORS as e:
        where = f"column {column}" if column is not None else "column"
        raise FitFailure(f"{spec.name}: {where}: {e}", column=column) from e
