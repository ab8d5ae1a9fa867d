"""
Input validation utilities for pycwm.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any, Sequence

from pycwm.core.exceptions import (
    ValidationError,
    DimensionMismatch,
    InvalidInputKind,
)


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like (lists, ndarrays, pandas objects) and converts
    to a numpy array. Rejects inputs that result in object or other
    non-numeric dtypes.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float64 dtype

    Raises:
        InvalidInputKind: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise InvalidInputKind(
            f"{name}: cannot convert to array: {e}",
            expected="numeric array",
            actual=type(array).__name__,
        ) from e

    if result.dtype == object:
        raise InvalidInputKind(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data",
            expected="numeric array",
            actual=type(array).__name__,
        )

    if result.dtype == bool:
        result = result.astype(np.float64)

    # Reject non-numeric dtypes (strings, bytes, datetime, etc.)
    if not np.issubdtype(result.dtype, np.number):
        raise InvalidInputKind(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data",
            expected="numeric array",
            actual=str(result.dtype),
        )

    return result.astype(np.float64, copy=False)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_no_inf(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no infinite values. NaN (missing) is allowed.

    Raises:
        ValidationError: If array contains +Inf or -Inf
    """
    n_inf = int(np.sum(np.isinf(array)))
    if n_inf:
        raise ValidationError(
            f"{name}: contains {n_inf} infinite values; use NaN for missing data"
        )


def check_non_negative(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array has no negative entries.

    Raises:
        ValidationError: If any entry is negative
    """
    n_neg = int(np.sum(array < 0))
    if n_neg:
        raise ValidationError(
            f"{name}: contains {n_neg} negative values, expected abundances >= 0"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionMismatch: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionMismatch(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def as_column_matrix(array: NDArray, name: str) -> NDArray:
    """
    Promote a 1D array to a single-column 2D array.

    Raises:
        DimensionMismatch: If array has more than 2 dimensions
    """
    if array.ndim == 1:
        return array.reshape(-1, 1)
    check_2d(array, name)
    return array


def check_consistent_length(
    *arrays: NDArray,
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionMismatch: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionMismatch(f"Inconsistent lengths: {details}")


def check_positive_int(value: Any, name: str) -> int:
    """
    Verify value is an integer >= 1.

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"{name}: expected a positive integer, got {type(value).__name__}"
        )
    if value < 1:
        raise ValidationError(f"{name} must be >= 1, got {value}")
    return int(value)


def match_arg(value: str, choices: Sequence[str], name: str) -> str:
    """
    Resolve a possibly abbreviated argument against allowed choices.

    An exact match wins; otherwise ``value`` must be the prefix of exactly
    one choice, so ``'krusk'`` resolves to ``'kruskal'`` and ``'M'`` to
    ``'M ~ env'``.

    Raises:
        ValidationError: If value matches no choice or several choices
    """
    if not isinstance(value, str):
        raise ValidationError(
            f"{name}: expected a string, got {type(value).__name__}"
        )
    if value in choices:
        return value
    matches = [c for c in choices if c.startswith(value)] if value else []
    if len(matches) == 1:
        return matches[0]
    allowed = ", ".join(repr(c) for c in choices)
    if matches:
        raise ValidationError(
            f"{name}: {value!r} is ambiguous, matches {matches}. Allowed: {allowed}"
        )
    raise ValidationError(f"{name}: {value!r} is not one of {allowed}")


def axis_labels(obj: Any, axis: str) -> list[str] | None:
    """
    Row ('index') or column ('columns') labels of a pandas object.

    Returns None for inputs without labels (ndarrays, lists).
    """
    labels = getattr(obj, axis, None)
    if labels is None or not hasattr(labels, 'tolist'):
        return None
    return [str(v) for v in labels.tolist()]
