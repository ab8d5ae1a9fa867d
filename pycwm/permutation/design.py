"""
Design for modified permutation tests.

MopetDesign holds the resolved arguments of one mopet() call together
with the validated weighted means, environmental variables and (when M
came from wm()) the weighted-mean design needed to permute attributes.
Every argument is checked here, before any model is fitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import (
    DimensionMismatch,
    NotWeightedMeanError,
    UnsupportedMethodConfiguration,
    ValidationError,
)
from pycwm.core.validation import (
    as_column_matrix,
    axis_labels,
    check_array,
    check_consistent_length,
    check_no_inf,
    check_positive_int,
    match_arg,
)
from pycwm.cwm.design import WeightedMeanDesign
from pycwm.cwm.solvers import is_wm
from pycwm.methods import COR_COEFS, METHOD_NAMES, FitOptions, MethodSpec, get_method

TESTS = ('standard', 'modified', 'both')
DEPENDENCES = ('M ~ env', 'env ~ M')
DEFAULT_PERMUTATIONS = 499

_NUMERIC_KINDS = 'biuf'


def _default_names(prefix: str, k: int) -> list[str]:
    if k == 1:
        return [prefix]
    return [f'{prefix}{j + 1}' for j in range(k)]


def _series_name(obj: Any) -> list[str] | None:
    if hasattr(obj, 'columns'):
        return axis_labels(obj, 'columns')
    name = getattr(obj, 'name', None)
    if name is not None and hasattr(obj, 'index'):
        return [str(name)]
    return None


def _readonly(arr: NDArray) -> NDArray:
    arr = np.array(arr, copy=True)
    arr.flags.writeable = False
    return arr


def _is_missing_label(v: Any) -> bool:
    return v is None or (isinstance(v, float) and np.isnan(v))


def _weighted_means_input(M: Any) -> tuple[NDArray, list[str], WeightedMeanDesign | None]:
    if is_wm(M):
        return M.values, list(M.attribute_names), M.design

    names = _series_name(M)
    values = as_column_matrix(check_array(M, 'M'), 'M')
    check_no_inf(values, 'M')
    return values, names or _default_names('M', values.shape[1]), None


def _environment_input(env: Any, spec: MethodSpec) -> tuple[NDArray, list[str], bool]:
    names = _series_name(env)
    raw = np.asarray(env)
    if raw.ndim not in (1, 2):
        raise DimensionMismatch(
            f"env: expected a vector or a matrix, got {raw.ndim}D with shape {raw.shape}"
        )
    q = 1 if raw.ndim == 1 else raw.shape[1]

    if spec.categorical_predictor:
        if q > 1:
            raise UnsupportedMethodConfiguration(
                f"method {spec.name!r}: env must be a single grouping variable, "
                f"got {q} columns",
                method=spec.name,
            )
        if raw.dtype.kind == 'f':
            raise UnsupportedMethodConfiguration(
                f"method {spec.name!r} treats env as a grouping factor, but env "
                f"holds floating-point values. Pass group labels (strings, "
                f"integers or a pandas Categorical) instead",
                method=spec.name,
            )
        labels = raw.ravel()
        if labels.dtype == object and any(_is_missing_label(v) for v in labels):
            raise ValidationError("env: missing group labels are not supported")
        return labels.astype(str), names or ['env'], True

    if raw.dtype.kind not in _NUMERIC_KINDS:
        raise UnsupportedMethodConfiguration(
            f"method {spec.name!r} needs numeric env, got dtype {raw.dtype}. "
            f"Use method='aov' or 'kruskal' for grouping factors",
            method=spec.name,
        )
    if spec.single_predictor and q > 1:
        raise UnsupportedMethodConfiguration(
            f"method {spec.name!r}: env must contain only one variable, got {q}",
            method=spec.name,
        )
    values = as_column_matrix(check_array(raw, 'env'), 'env')
    check_no_inf(values, 'env')
    return values, names or _default_names('env', q), False


def _check_seed(seed: Any) -> None:
    if seed is None or isinstance(seed, np.random.SeedSequence):
        return
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ValidationError(
            f"seed: expected None, a non-negative integer or a SeedSequence, got {seed!r}"
        )


@dataclass(frozen=True)
class MopetDesign:
    """
    Frozen design for a modified permutation test.

    Attributes:
        M: Weighted means, shape (n, k), read-only.
        M_names: One label per weighted-mean column.
        env: Environmental variables, shape (n, q) floats, or (n,) group
            labels for categorical methods. Read-only.
        env_names: One label per environmental variable.
        env_categorical: True if env holds group labels.
        method: Resolved method name.
        cor_coef: Resolved correlation coefficient.
        dependence: 'M ~ env' or 'env ~ M'.
        test: 'standard', 'modified' or 'both'.
        permutations: Draws per permutation test.
        seed: Seed for both tests.
        wm_design: Provenance of M, or None for plain arrays.
        weights: Total abundance per sample (slope regression), or None.
    """
    M: NDArray[np.floating[Any]]
    M_names: tuple[str, ...]
    env: NDArray
    env_names: tuple[str, ...]
    env_categorical: bool
    method: str
    cor_coef: str
    dependence: str
    test: str
    permutations: int
    seed: int | np.random.SeedSequence | None
    wm_design: WeightedMeanDesign | None
    weights: NDArray[np.floating[Any]] | None

    @classmethod
    def for_mopet(
        cls,
        M,
        env,
        *,
        method: str = 'lm',
        cor_coef: str = 'pearson',
        dependence: str = 'M ~ env',
        permutations: int = DEFAULT_PERMUTATIONS,
        test: str = 'modified',
        seed: int | np.random.SeedSequence | None = None,
    ) -> MopetDesign:
        """
        Create a test design with validation.

        String arguments may be abbreviated to any unique prefix
        (``method='krusk'``, ``test='stand'``, ``dependence='env'``).

        Raises:
            ValidationError: On unknown or ambiguous argument values,
                permutations < 1, or an invalid seed.
            InvalidInputKind: If M is not numeric.
            NotWeightedMeanError: If the modified test (or slope
                regression) is requested for M not produced by wm().
            UnsupportedMethodConfiguration: If the method cannot be used
                with this env or dependence.
            DimensionMismatch: If M and env disagree on the number of samples.
        """
        method = match_arg(method, METHOD_NAMES, 'method')
        cor_coef = match_arg(cor_coef, COR_COEFS, 'cor_coef')
        dependence = match_arg(dependence, DEPENDENCES, 'dependence')
        test = match_arg(test, TESTS, 'test')
        permutations = check_positive_int(permutations, 'permutations')
        _check_seed(seed)
        spec = get_method(method)

        if dependence == 'env ~ M' and not spec.supports_env_response:
            raise UnsupportedMethodConfiguration(
                f"dependence 'env ~ M' is only available for method='lm', "
                f"got method={method!r}",
                method=method,
            )

        if test in ('modified', 'both') and not is_wm(M):
            raise NotWeightedMeanError(
                f"test={test!r} permutes species attributes, so M must be a "
                f"weighted-mean result from wm(), got {type(M).__name__}"
            )
        if spec.needs_weights and not is_wm(M):
            raise NotWeightedMeanError(
                f"method {method!r} weights samples by their total abundance, "
                f"so M must be a weighted-mean result from wm(), got {type(M).__name__}"
            )

        M_values, M_names, wm_design = _weighted_means_input(M)
        env_values, env_names, categorical = _environment_input(env, spec)

        check_consistent_length(M_values, env_values, names=('M', 'env'))

        weights = None
        if spec.needs_weights and wm_design is not None:
            weights = _readonly(wm_design.sample_totals)

        return cls(
            M=_readonly(np.asarray(M_values, dtype=np.float64)),
            M_names=tuple(M_names),
            env=_readonly(env_values),
            env_names=tuple(env_names),
            env_categorical=categorical,
            method=method,
            cor_coef=cor_coef,
            dependence=dependence,
            test=test,
            permutations=permutations,
            seed=seed,
            wm_design=wm_design,
            weights=weights,
        )

    @property
    def spec(self) -> MethodSpec:
        return get_method(self.method)

    @property
    def n_samples(self) -> int:
        return self.M.shape[0]

    @property
    def runs_standard(self) -> bool:
        return self.test in ('standard', 'both')

    @property
    def runs_modified(self) -> bool:
        return self.test in ('modified', 'both')

    @property
    def column_names(self) -> tuple[str, ...]:
        """Labels of the tested columns (one outcome each)."""
        return self.M_names if self.dependence == 'M ~ env' else self.env_names

    @property
    def n_columns(self) -> int:
        return len(self.column_names)

    def fit_options(self) -> FitOptions:
        predictors = self.env_names if self.dependence == 'M ~ env' else self.M_names
        return FitOptions(
            cor_coef=self.cor_coef,
            weights=self.weights,
            predictor_names=predictors,
        )
