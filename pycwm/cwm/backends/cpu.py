"""
CPU backend for community-weighted means.

CPUWeightedMeanBackend: weighted means of every attribute column.
RandomizedDraw: one attribute-permutation draw (used by randomize()).

Missing attribute values are handled with the per-column masks held by
the design: species without a value contribute neither to the weight
sum nor to the numerator, both for the real means and for every draw.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pycwm.core.result import Result
from pycwm.core.compute.timing import Timer
from pycwm.cwm._common import WeightedMeanParams
from pycwm.cwm.design import WeightedMeanDesign


def weighted_mean_column(
    abundance: NDArray[np.floating[Any]],
    values: NDArray[np.floating[Any]],
    mask: NDArray[np.bool_],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """
    Weighted mean of one attribute for every sample.

    Args:
        abundance: (n, s) abundances
        values: (s_valid,) attribute values of the species selected by mask,
            in species order
        mask: (s,) species with a known value

    Returns:
        (means, totals): means (n,), NaN where the total is zero; totals (n,)
    """
    weights = abundance[:, mask]
    totals = weights.sum(axis=1)
    numerator = weights @ values
    means = np.full(abundance.shape[0], np.nan)
    nonzero = totals > 0
    means[nonzero] = numerator[nonzero] / totals[nonzero]
    return means, totals


class CPUWeightedMeanBackend:
    """CPU backend computing weighted means for all attribute columns."""

    @property
    def name(self) -> str:
        return 'cpu_wm'

    def solve(self, design: WeightedMeanDesign) -> Result[WeightedMeanParams]:
        """Compute weighted means and return Result[WeightedMeanParams]."""
        timer = Timer()
        timer.start()

        n, k = design.n_samples, design.n_attributes
        values = np.empty((n, k), dtype=np.float64)
        totals = np.empty((n, k), dtype=np.float64)
        warnings_list: list[str] = []

        with timer.section('weighted_means'):
            for j in range(k):
                mask = design.valid_masks[:, j]
                values[:, j], totals[:, j] = weighted_mean_column(
                    design.abundance, design.attributes[mask, j], mask,
                )

        n_valid = design.valid_masks.sum(axis=0)
        for j in range(k):
            name = design.attribute_names[j]
            if n_valid[j] == 0:
                warnings_list.append(
                    f"attribute {name!r}: no species has a known value; "
                    f"all weighted means are NaN"
                )
                continue
            n_empty = int(np.sum(totals[:, j] == 0))
            if n_empty:
                warnings_list.append(
                    f"attribute {name!r}: {n_empty} sample(s) contain no species "
                    f"with a known value; weighted mean is NaN"
                )

        timer.stop()

        values.flags.writeable = False
        params = WeightedMeanParams(
            values=values,
            n_valid_species=n_valid,
            weight_totals=totals,
        )

        return Result(
            params=params,
            info={
                'n_samples': n,
                'n_species': design.n_species,
                'n_attributes': k,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class RandomizedDraw:
    """
    One attribute-permutation draw, as a picklable callable.

    For each attribute column independently, the known values are
    shuffled among the species that have a known value, then the
    column's weighted means are recomputed from the original abundances.
    The assembled (n, k) matrix is handed to ``reducer``.

    Instances only read the design arrays; every draw builds its own
    matrix, so draws can run in separate workers.
    """

    def __init__(
        self,
        design: WeightedMeanDesign,
        reducer: Callable[[NDArray[np.floating[Any]]], Any],
    ):
        self.abundance = design.abundance
        self.attributes = design.attributes
        self.valid_masks = design.valid_masks
        self.reducer = reducer

    def matrix(self, rng: np.random.Generator) -> NDArray[np.floating[Any]]:
        n = self.abundance.shape[0]
        k = self.attributes.shape[1]
        out = np.empty((n, k), dtype=np.float64)
        for j in range(k):
            mask = self.valid_masks[:, j]
            shuffled = rng.permutation(self.attributes[mask, j])
            out[:, j], _ = weighted_mean_column(self.abundance, shuffled, mask)
        return out

    def __call__(self, seed: np.random.SeedSequence) -> Any:
        rng = np.random.default_rng(seed)
        return self.reducer(self.matrix(rng))
