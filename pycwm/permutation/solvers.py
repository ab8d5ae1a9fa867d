"""
Solver dispatch for modified permutation tests.

Public API:
    mopet(M, env, method, cor_coef, dependence, permutations, test, ...)
        -> MopetSolution
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np

from pycwm.core.compute.parallel import ExecutionMode
from pycwm.permutation.design import MopetDesign, DEFAULT_PERMUTATIONS
from pycwm.permutation.solution import MopetSolution
from pycwm.permutation.backends.cpu import CPUMopetBackend

logger = logging.getLogger(__name__)


def mopet(
    M: Any,
    env: Any,
    method: str = 'lm',
    cor_coef: str = 'pearson',
    dependence: str = 'M ~ env',
    permutations: int = DEFAULT_PERMUTATIONS,
    test: str = 'modified',
    *,
    parallel: int | ExecutionMode | None = None,
    seed: int | np.random.SeedSequence | None = None,
) -> MopetSolution:
    """
    Test the relationship between weighted means and other variables.

    Fits ``method`` to every weighted-mean column (or, with
    ``dependence='env ~ M'``, to every environmental variable) and
    reports three p-values per column: parametric, standard permutation
    (rows of M shuffled against env) and modified permutation (species
    attributes shuffled among species before recomputing the means).
    The modified test corrects the inflated type I error of weighted
    means that share the same species composition.

    Args:
        M: Result of ``wm()``. A plain numeric matrix is accepted for
            ``test='standard'`` only.
        env: Environmental variable(s): vector, matrix, Series or
            DataFrame. Group labels for 'aov' and 'kruskal'.
        method: 'lm', 'aov', 'cor', 'kruskal' or 'slope'.
        cor_coef: 'pearson', 'spearman' or 'kendall' (method='cor').
        dependence: 'M ~ env' or 'env ~ M' (method='lm' only).
        permutations: Number of draws for each permutation test.
        test: 'modified', 'standard' or 'both'.
        parallel: None (sequential) or number of worker processes.
        seed: Seed for reproducible draws.

    All string arguments accept unique prefixes ('krusk', 'stand', 'M').

    Returns:
        MopetSolution

    Raises:
        ValidationError: Invalid argument values (raised before any
            model is fitted), including its subclasses
            NotWeightedMeanError, UnsupportedMethodConfiguration,
            DimensionMismatch and InvalidInputKind.

    Columns whose model cannot be fitted are reported through
    ``ColumnOutcome.error`` with NaN p-values; permutation draws that
    cannot be fitted are excluded from that column's p-value.
    """
    design = MopetDesign.for_mopet(
        M,
        env,
        method=method,
        cor_coef=cor_coef,
        dependence=dependence,
        permutations=permutations,
        test=test,
        seed=seed,
    )
    mode = ExecutionMode.from_parallel(parallel)

    result = CPUMopetBackend(mode).solve(design)
    solution = MopetSolution(_result=result, _design=design)

    if result.warnings:
        warnings.warn(
            "mopet: " + "; ".join(result.warnings),
            RuntimeWarning,
            stacklevel=2,
        )
    logger.debug("mopet finished in %.3fs", (result.timing or {}).get('total_seconds', 0.0))
    return solution
