"""
Modified permutation tests for community-weighted means.

Public API:
    mopet(M, env, method='lm', ...) - parametric, standard and modified
                                      permutation p-values per column

Usage:
    from pycwm import wm
    from pycwm.permutation import mopet

    M = wm(cover, indicator_values)
    res = mopet(M, soil_ph, permutations=199, test='both', seed=1)
    print(res.table())
"""

from pycwm.permutation.solvers import mopet
from pycwm.permutation.design import (
    MopetDesign,
    DEFAULT_PERMUTATIONS,
    TESTS,
    DEPENDENCES,
)
from pycwm.permutation._common import ColumnOutcome, MopetParams
from pycwm.permutation.solution import MopetSolution

__all__ = [
    "mopet",
    "MopetDesign",
    "MopetParams",
    "MopetSolution",
    "ColumnOutcome",
    "DEFAULT_PERMUTATIONS",
    "TESTS",
    "DEPENDENCES",
]
