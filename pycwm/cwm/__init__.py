"""
Community-weighted means of species attributes.

Public API:
    wm(abundance, attributes)            - weighted means with provenance
    is_wm(obj)                           - provenance check
    randomize(M, permutations, reducer)  - means from permuted attributes

Usage:
    from pycwm.cwm import wm, randomize

    M = wm(cover, indicator_values)
    draws = randomize(M, permutations=99, seed=1)
"""

from pycwm.cwm.solvers import wm, is_wm, randomize
from pycwm.cwm.design import WeightedMeanDesign
from pycwm.cwm._common import WeightedMeanParams
from pycwm.cwm.solution import WeightedMeanSolution

__all__ = [
    "wm",
    "is_wm",
    "randomize",
    "WeightedMeanDesign",
    "WeightedMeanParams",
    "WeightedMeanSolution",
]
