"""
Solver dispatch for weighted means.

Public API:
    wm(abundance, attributes) -> WeightedMeanSolution
    is_wm(obj) -> bool
    randomize(M, permutations, reducer, ...) -> reducer output(s)
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycwm.core.exceptions import InvalidInputKind
from pycwm.core.compute.parallel import ExecutionMode, WorkerPool
from pycwm.core.validation import check_positive_int
from pycwm.cwm.design import WeightedMeanDesign
from pycwm.cwm.solution import WeightedMeanSolution
from pycwm.cwm.backends.cpu import CPUWeightedMeanBackend, RandomizedDraw

logger = logging.getLogger(__name__)


def wm(abundance: ArrayLike, attributes: ArrayLike) -> WeightedMeanSolution:
    """
    Community-weighted means of species attributes.

    For each sample and attribute, the abundance-weighted average of the
    attribute over the species present. Species with a missing (NaN)
    attribute value are left out of both the weight sum and the
    numerator for that attribute only.

    Args:
        abundance: Sample x species matrix (e.g. percentage cover).
            ndarray, nested list or DataFrame; non-negative and finite.
        attributes: Species attribute vector (s,) or matrix (s, k).
            ndarray, list, Series or DataFrame; NaN marks missing values.

    Returns:
        WeightedMeanSolution with the (n, k) means and their provenance.

    Raises:
        InvalidInputKind: If inputs are not numeric
        ValidationError: On negative/non-finite abundances or infinite
            attribute values
        DimensionMismatch: If species counts (or labels) disagree

    Example:
        >>> cover = np.full((10, 3), 50.0)
        >>> M = wm(cover, [1.0, np.nan, 3.0])
        >>> M.values[:, 0]
        array([2., 2., 2., 2., 2., 2., 2., 2., 2., 2.])
    """
    design = WeightedMeanDesign.for_wm(abundance, attributes)
    result = CPUWeightedMeanBackend().solve(design)
    return WeightedMeanSolution(_result=result, _design=design)


def is_wm(obj: Any) -> bool:
    """True if ``obj`` is a weighted-mean result carrying its provenance."""
    return isinstance(obj, WeightedMeanSolution)


def _identity(matrix: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    return matrix


def randomize(
    M: WeightedMeanSolution,
    permutations: int = 1,
    reducer: Callable[[NDArray[np.floating[Any]]], Any] | None = None,
    *,
    parallel: int | ExecutionMode | None = None,
    seed: int | np.random.SeedSequence | None = None,
) -> Any:
    """
    Weighted means recomputed from randomized species attributes.

    In every draw, each attribute column is shuffled independently among
    the species that have a known value (missing values stay missing),
    the weighted means are recomputed from the original abundances, and
    ``reducer`` is applied to the resulting (n_samples, n_attributes)
    matrix.

    Args:
        M: Result of ``wm()``.
        permutations: Number of draws (>= 1).
        reducer: Function applied to each randomized matrix. Default
            returns the matrix itself.
        parallel: None (sequential) or number of worker processes.
        seed: Seed for reproducibility. Every draw gets its own stream
            spawned from this seed, so results do not depend on how draws
            are distributed over workers.

    Returns:
        List of reducer outputs in draw order, or the single output when
        ``permutations == 1``.

    Raises:
        InvalidInputKind: If M was not produced by ``wm()``
        ValidationError: If permutations < 1
    """
    if not is_wm(M):
        raise InvalidInputKind(
            f"M: expected a weighted-mean result from wm(), got {type(M).__name__}",
            expected='WeightedMeanSolution',
            actual=type(M).__name__,
        )
    permutations = check_positive_int(permutations, 'permutations')
    mode = ExecutionMode.from_parallel(parallel)

    draw = RandomizedDraw(M.design, reducer if reducer is not None else _identity)
    seeds = spawn_seeds(seed, permutations)

    logger.debug(
        "randomize: %d draw(s) over %d attribute(s), %s",
        permutations, M.n_attributes, mode.describe(),
    )
    with WorkerPool(mode) as pool:
        results = pool.map(draw, seeds)

    if permutations == 1:
        return results[0]
    return results


def spawn_seeds(
    seed: int | np.random.SeedSequence | None,
    n: int,
) -> list[np.random.SeedSequence]:
    """Independent child seeds, one per draw."""
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return root.spawn(n)
