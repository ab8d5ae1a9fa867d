"""
Design for community-weighted means.

WeightedMeanDesign holds the validated abundance matrix, the attribute
matrix and the per-attribute masks of species with known values. It is
the provenance every weighted-mean result carries, and the only input
attribute permutation needs. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import DimensionMismatch
from pycwm.core.validation import (
    as_column_matrix,
    axis_labels,
    check_2d,
    check_array,
    check_finite,
    check_no_inf,
    check_non_negative,
)


def _readonly(arr: NDArray) -> NDArray:
    arr = np.array(arr, dtype=np.float64, copy=True)
    arr.flags.writeable = False
    return arr


def _species_index(obj: Any, axis: str):
    """
    pandas labels used to align species, or None when ``obj`` is unlabelled.

    A default RangeIndex counts as unlabelled, so such inputs are matched
    by position.
    """
    if axis_labels(obj, axis) is None:
        return None
    import pandas as pd

    index = getattr(obj, axis)
    if isinstance(index, pd.RangeIndex):
        return None
    return index


@dataclass(frozen=True)
class WeightedMeanDesign:
    """
    Frozen design for weighted means.

    Attributes:
        abundance: Sample x species abundances, shape (n, s), read-only.
        attributes: Species x attribute values, shape (s, k), NaN = missing,
            read-only.
        valid_masks: Species with a known value, shape (s, k), read-only.
        sample_names: One label per sample.
        species_names: One label per species.
        attribute_names: One label per attribute.
    """
    abundance: NDArray[np.floating[Any]]
    attributes: NDArray[np.floating[Any]]
    valid_masks: NDArray[np.bool_]
    sample_names: tuple[str, ...]
    species_names: tuple[str, ...]
    attribute_names: tuple[str, ...]

    @classmethod
    def for_wm(cls, abundance, attributes) -> WeightedMeanDesign:
        """
        Create a weighted-mean design with validation.

        Args:
            abundance: Sample x species matrix (array-like or DataFrame),
                non-negative and finite.
            attributes: Species attribute vector (s,) or matrix (s, k)
                (array-like, Series or DataFrame). NaN marks a missing value.
                When both inputs carry species labels, attributes are
                aligned to the abundance columns by label.

        Returns:
            Validated WeightedMeanDesign.

        Raises:
            InvalidInputKind: If either input is not numeric.
            ValidationError: On negative or non-finite abundances, or
                infinite attribute values.
            DimensionMismatch: If species counts or labels disagree.
        """
        sample_names = axis_labels(abundance, 'index')
        species_names = axis_labels(abundance, 'columns')

        if hasattr(attributes, 'columns'):
            attribute_names = axis_labels(attributes, 'columns')
        elif getattr(attributes, 'name', None) is not None:
            attribute_names = [str(attributes.name)]
        else:
            attribute_names = None

        species_index = _species_index(abundance, 'columns')
        attr_index = _species_index(attributes, 'index')
        if species_index is not None and attr_index is not None:
            if set(species_index) != set(attr_index):
                missing = sorted(map(str, set(species_index) - set(attr_index)))
                extra = sorted(map(str, set(attr_index) - set(species_index)))
                raise DimensionMismatch(
                    f"attributes: species labels do not match abundance columns "
                    f"(missing: {missing[:5]}, unexpected: {extra[:5]})"
                )
            if not attr_index.is_unique or not species_index.is_unique:
                raise DimensionMismatch(
                    "attributes: species labels must be unique to align with abundance columns"
                )
            if not species_index.equals(attr_index):
                attributes = attributes.reindex(species_index)

        abundance_arr = check_array(abundance, 'abundance')
        check_2d(abundance_arr, 'abundance')
        check_finite(abundance_arr, 'abundance')
        check_non_negative(abundance_arr, 'abundance')

        attr_arr = as_column_matrix(check_array(attributes, 'attributes'), 'attributes')
        check_no_inf(attr_arr, 'attributes')

        n, s = abundance_arr.shape
        if attr_arr.shape[0] != s:
            raise DimensionMismatch(
                f"attributes: expected {s} rows (one per species in abundance), "
                f"got {attr_arr.shape[0]}"
            )
        k = attr_arr.shape[1]

        masks = ~np.isnan(attr_arr)
        masks.flags.writeable = False

        return cls(
            abundance=_readonly(abundance_arr),
            attributes=_readonly(attr_arr),
            valid_masks=masks,
            sample_names=tuple(sample_names or (f"sample{i + 1}" for i in range(n))),
            species_names=tuple(species_names or (f"species{i + 1}" for i in range(s))),
            attribute_names=tuple(attribute_names or (f"attr{j + 1}" for j in range(k))),
        )

    @property
    def n_samples(self) -> int:
        return self.abundance.shape[0]

    @property
    def n_species(self) -> int:
        return self.abundance.shape[1]

    @property
    def n_attributes(self) -> int:
        return self.attributes.shape[1]

    @property
    def sample_totals(self) -> NDArray[np.floating[Any]]:
        """Total abundance per sample over all species."""
        return self.abundance.sum(axis=1)
