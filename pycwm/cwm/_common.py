"""
Common data structures for weighted means.

WeightedMeanParams is the parameter payload wrapped by Result[P] and
exposed through WeightedMeanSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class WeightedMeanParams:
    """
    Parameter payload for community-weighted means.

    - values: weighted means, shape (n_samples, n_attributes); NaN where a
      sample has no species with a known attribute value
    - n_valid_species: species with a known value per attribute, shape (k,)
    - weight_totals: summed abundance of those species per sample and
      attribute, shape (n_samples, n_attributes)
    """
    values: NDArray[np.floating[Any]]
    n_valid_species: NDArray[np.integer[Any]]
    weight_totals: NDArray[np.floating[Any]]
