"""
pycwm: community-weighted means and modified permutation tests.

Weighted means of species attributes (indicator values, traits) are
tested against environmental variables with a modified permutation test
that shuffles the attributes among species, avoiding the inflated type I
error of the standard tests.

Submodules:
    cwm: Weighted means and attribute randomization
    methods: Statistical methods (lm, aov, cor, kruskal, slope)
    permutation: Standard and modified permutation tests (mopet)
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from pycwm.cwm import wm, is_wm, randomize
from pycwm.permutation import mopet
from pycwm import cwm
from pycwm import methods
from pycwm import permutation

__all__ = [
    "__version__",
    "wm",
    "is_wm",
    "randomize",
    "mopet",
    "cwm",
    "methods",
    "permutation",
]
