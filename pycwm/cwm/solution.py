"""
Solution wrapper for weighted-mean results.

WeightedMeanSolution wraps Result[WeightedMeanParams] together with the
design it was computed from. The design is the provenance that the
modified permutation test needs; a plain array of means has none.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pycwm.core.result import Result
from pycwm.cwm._common import WeightedMeanParams

if TYPE_CHECKING:
    import pandas as pd
    from pycwm.cwm.design import WeightedMeanDesign


@dataclass
class WeightedMeanSolution:
    """
    User-facing community-weighted means ("wm object").

    Behaves like a read-only (n_samples, n_attributes) array via
    ``np.asarray(M)`` and keeps the abundance and attribute matrices it
    was computed from.
    """
    _result: Result[WeightedMeanParams]
    _design: 'WeightedMeanDesign'

    # --- Weighted means ---

    @property
    def values(self) -> NDArray[np.floating[Any]]:
        """Weighted means, shape (n_samples, n_attributes), read-only."""
        return self._result.params.values

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @property
    def n_samples(self) -> int:
        return self._design.n_samples

    @property
    def n_attributes(self) -> int:
        return self._design.n_attributes

    @property
    def n_valid_species(self) -> NDArray[np.integer[Any]]:
        """Species with a known value, per attribute."""
        return self._result.params.n_valid_species

    @property
    def weight_totals(self) -> NDArray[np.floating[Any]]:
        """Summed abundance of species with a known value, (n, k)."""
        return self._result.params.weight_totals

    @property
    def sample_names(self) -> tuple[str, ...]:
        return self._design.sample_names

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return self._design.attribute_names

    # --- Provenance ---

    @property
    def design(self) -> 'WeightedMeanDesign':
        return self._design

    @property
    def abundance(self) -> NDArray[np.floating[Any]]:
        """Sample x species matrix the means were computed from."""
        return self._design.abundance

    @property
    def attributes(self) -> NDArray[np.floating[Any]]:
        """Species x attribute matrix the means were computed from."""
        return self._design.attributes

    @property
    def species_names(self) -> tuple[str, ...]:
        return self._design.species_names

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Array protocol ---

    def __array__(self, dtype=None, copy=None) -> NDArray:
        if dtype is None:
            return self.values
        return self.values.astype(dtype)

    def __len__(self) -> int:
        return self.n_samples

    def column(self, key: int | str) -> NDArray[np.floating[Any]]:
        """Weighted means of one attribute, by index or name."""
        if isinstance(key, str):
            key = self.attribute_names.index(key)
        return self.values[:, key]

    def to_dataframe(self) -> 'pd.DataFrame':
        """Weighted means as a DataFrame (samples x attributes)."""
        import pandas as pd
        return pd.DataFrame(
            np.array(self.values),
            index=list(self.sample_names),
            columns=list(self.attribute_names),
        )

    # --- Display ---

    def summary(self) -> str:
        """Per-attribute overview: valid species, range and missing samples."""
        lines = [
            "\nCOMMUNITY-WEIGHTED MEANS",
            "",
            f"Samples: {self.n_samples}   Species: {self._design.n_species}   "
            f"Attributes: {self.n_attributes}",
            "",
            f"{'':>12s} {'species':>8s} {'min':>10s} {'mean':>10s} "
            f"{'max':>10s} {'NA':>5s}",
        ]
        for j, name in enumerate(self.attribute_names):
            col = self.values[:, j]
            known = col[~np.isnan(col)]
            if known.size:
                lo, mid, hi = known.min(), known.mean(), known.max()
            else:
                lo = mid = hi = float('nan')
            lines.append(
                f"{name[:12]:>12s} {int(self.n_valid_species[j]):8d} "
                f"{lo:10.4g} {mid:10.4g} {hi:10.4g} {col.size - known.size:5d}"
            )
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"WeightedMeanSolution(n_samples={self.n_samples}, "
            f"n_attributes={self.n_attributes}, "
            f"attributes={list(self.attribute_names)!r})"
        )
