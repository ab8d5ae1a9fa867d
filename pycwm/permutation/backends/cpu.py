"""
CPU backend for modified permutation tests.

Fits the chosen method to every column, then builds up to two null
distributions per column:

    standard  - rows of the weighted-mean matrix are shuffled against
                the fixed environmental variables
    modified  - species attributes are shuffled among species and the
                weighted means recomputed (RandomizedDraw)

P-values are (1 + #null as-or-more extreme) / (1 + #valid draws).
Draws in which a column cannot be fitted are left out of that column's
count and denominator.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import FitFailure, PermutationDrawFailure
from pycwm.core.result import Result
from pycwm.core.compute.parallel import ExecutionMode, WorkerPool
from pycwm.core.compute.timing import Timer
from pycwm.cwm.backends.cpu import RandomizedDraw
from pycwm.methods import (
    FitOptions,
    FitResult,
    MethodSpec,
    TAIL_TWO,
    extremeness,
    fit_column,
    statistic_name,
)
from pycwm.permutation._common import ColumnOutcome, MopetParams
from pycwm.permutation.design import MopetDesign

logger = logging.getLogger(__name__)

DrawOutput = tuple[NDArray[np.floating[Any]], tuple[tuple[int, str], ...]]


def split_column(
    matrix: NDArray[np.floating[Any]],
    env: NDArray,
    dependence: str,
    column: int,
) -> tuple[NDArray[np.floating[Any]], NDArray]:
    """Response and predictor for one tested column."""
    if dependence == 'M ~ env':
        return matrix[:, column], env
    return env[:, column], matrix


class ColumnStatistics:
    """
    Reducer turning one weighted-mean matrix into test statistics.

    Returns the statistic of every tested column (NaN where the fit
    failed or the column is inactive) and the (column, message) pairs
    of the fits that failed.
    """

    def __init__(
        self,
        spec: MethodSpec,
        options: FitOptions,
        env: NDArray,
        dependence: str,
        columns: list[int],
        n_columns: int,
    ):
        self.spec = spec
        self.options = options
        self.env = env
        self.dependence = dependence
        self.columns = columns
        self.n_columns = n_columns

    def __call__(self, matrix: NDArray[np.floating[Any]]) -> DrawOutput:
        stats = np.full(self.n_columns, np.nan)
        failures = []
        for c in self.columns:
            response, predictor = split_column(matrix, self.env, self.dependence, c)
            try:
                stats[c] = fit_column(self.spec, response, predictor, self.options, column=c).statistic
            except FitFailure as e:
                failures.append((c, str(e)))
        return stats, tuple(failures)


class RowPermutationDraw:
    """One standard permutation draw: shuffle the rows of M, keep env fixed."""

    def __init__(self, M: NDArray[np.floating[Any]], reducer: ColumnStatistics):
        self.M = M
        self.reducer = reducer

    def __call__(self, seed: np.random.SeedSequence) -> DrawOutput:
        rng = np.random.default_rng(seed)
        return self.reducer(self.M[rng.permutation(self.M.shape[0])])


def permutation_p_value(
    observed: float,
    null: NDArray[np.floating[Any]],
    tail: str,
    comparison: str = '>=',
) -> tuple[float, int]:
    """
    Permutation p-value counting the observed statistic as one draw.

    NaN entries of ``null`` (failed draws) are ignored. Returns
    (p_value, number of valid draws); the p-value is NaN when no draw
    is valid or the observed statistic is NaN.
    """
    valid = null[~np.isnan(null)]
    n_valid = int(valid.size)
    if n_valid == 0 or np.isnan(observed):
        return float('nan'), n_valid
    if tail == TAIL_TWO:
        valid, observed = np.abs(valid), abs(observed)
    if comparison == '<=':
        count = int(np.sum(valid <= observed))
    else:
        count = int(np.sum(valid >= observed))
    return (count + 1) / (n_valid + 1), n_valid


def _collect(
    outputs: list[DrawOutput],
    n_columns: int,
    test: str,
) -> tuple[NDArray[np.floating[Any]], list[PermutationDrawFailure]]:
    null = np.empty((len(outputs), n_columns), dtype=np.float64)
    failures = []
    for b, (stats, failed) in enumerate(outputs):
        null[b] = stats
        for c, message in failed:
            failures.append(PermutationDrawFailure(message, draw=b, column=c, test=test))
    return null, failures


class CPUMopetBackend:
    """
    CPU backend for mopet().

    Draws run through a WorkerPool opened once per solve() call and
    shared by the standard and the modified test.
    """

    def __init__(self, mode: ExecutionMode | None = None):
        self._mode = mode if mode is not None else ExecutionMode.sequential()

    @property
    def name(self) -> str:
        return 'cpu_mopet'

    def solve(self, design: MopetDesign) -> Result[MopetParams]:
        """Run the requested permutation tests and return Result[MopetParams]."""
        timer = Timer()
        timer.start()

        spec = design.spec
        options = design.fit_options()
        names = design.column_names
        n_columns = design.n_columns
        tail = spec.tail
        comparison = extremeness(spec, design.cor_coef)
        warnings_list: list[str] = []

        # Real fits
        real: dict[int, FitResult] = {}
        errors: dict[int, FitFailure] = {}
        with timer.section('real_fits'):
            for c in range(n_columns):
                response, predictor = split_column(design.M, design.env, design.dependence, c)
                try:
                    real[c] = fit_column(spec, response, predictor, options, column=c)
                except FitFailure as e:
                    errors[c] = e
                    warnings_list.append(f"column {names[c]!r}: model could not be fitted: {e}")

        active = sorted(real)
        reducer = ColumnStatistics(spec, options, design.env, design.dependence, active, n_columns)

        root = design.seed if isinstance(design.seed, np.random.SeedSequence) \
            else np.random.SeedSequence(design.seed)
        standard_root, modified_root = root.spawn(2)

        perm_null = modif_null = None
        draw_failures: list[PermutationDrawFailure] = []

        logger.debug(
            "mopet: method=%s test=%s, %d column(s), %d permutation(s), %s",
            design.method, design.test, n_columns, design.permutations,
            self._mode.describe(),
        )
        with WorkerPool(self._mode) as pool:
            if design.runs_standard and active:
                with timer.section('standard_permutations'):
                    draw = RowPermutationDraw(design.M, reducer)
                    outputs = pool.map(draw, standard_root.spawn(design.permutations))
                perm_null, failed = _collect(outputs, n_columns, 'standard')
                draw_failures.extend(failed)

            if design.runs_modified and active:
                with timer.section('modified_permutations'):
                    draw = RandomizedDraw(design.wm_design, reducer)
                    outputs = pool.map(draw, modified_root.spawn(design.permutations))
                modif_null, failed = _collect(outputs, n_columns, 'modified')
                draw_failures.extend(failed)

        outcomes = []
        with timer.section('p_values'):
            for c in range(n_columns):
                col_failures = tuple(f for f in draw_failures if f.column == c)
                for test in ('standard', 'modified'):
                    n_failed = sum(1 for f in col_failures if f.test == test)
                    if n_failed:
                        warnings_list.append(
                            f"column {names[c]!r}: {n_failed} of {design.permutations} "
                            f"{test} permutation draw(s) could not be fitted and were excluded"
                        )
                outcomes.append(self._outcome(
                    design, c, real.get(c), errors.get(c), tail, comparison,
                    perm_null, modif_null, col_failures,
                ))

        timer.stop()

        params = MopetParams(
            outcomes=tuple(outcomes),
            permutations=design.permutations,
            method=design.method,
            cor_coef=design.cor_coef,
            dependence=design.dependence,
            test=design.test,
        )

        return Result(
            params=params,
            info={
                'method': design.method,
                'cor_coef': design.cor_coef,
                'dependence': design.dependence,
                'test': design.test,
                'permutations': design.permutations,
                'n_samples': design.n_samples,
                'n_columns': n_columns,
                'n_failed_columns': len(errors),
                'n_draw_failures': len(draw_failures),
                'execution': self._mode.describe(),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    def _outcome(
        self,
        design: MopetDesign,
        c: int,
        fit: FitResult | None,
        error: FitFailure | None,
        tail: str,
        comparison: str,
        perm_null: NDArray | None,
        modif_null: NDArray | None,
        failures: tuple[PermutationDrawFailure, ...],
    ) -> ColumnOutcome:
        nan = float('nan')
        observed = fit.statistic if fit is not None else nan

        def p_for(null: NDArray | None, runs: bool) -> tuple[float | None, NDArray | None, int]:
            if not runs:
                return None, None, 0
            if null is None:
                return nan, np.full(design.permutations, nan), 0
            column_null = null[:, c].copy()
            p, n_valid = permutation_p_value(observed, column_null, tail, comparison)
            return p, column_null, n_valid

        perm_p, perm_stats, n_perm = p_for(perm_null, design.runs_standard)
        modif_p, modif_stats, n_modif = p_for(modif_null, design.runs_modified)

        return ColumnOutcome(
            name=design.column_names[c],
            coefficients=dict(fit.coefficients) if fit is not None else {},
            statistic=observed,
            statistic_name=(
                fit.statistic_name if fit is not None
                else statistic_name(design.spec, design.cor_coef)
            ),
            tail=tail,
            orig_p=fit.p_value if fit is not None else nan,
            perm_p=perm_p,
            modif_p=modif_p,
            perm_stats=perm_stats,
            modif_stats=modif_stats,
            n_perm_valid=n_perm,
            n_modif_valid=n_modif,
            draw_failures=failures,
            error=error,
            real_summary=dict(fit.summary) if fit is not None else {},
        )
