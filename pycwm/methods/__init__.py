"""
Statistical methods relating weighted means and environmental variables.

Public API:
    get_method(name)  - MethodSpec for 'lm', 'aov', 'cor', 'kruskal', 'slope'
    fit_column(spec, response, predictor, options, column) - one fit

Every method returns a FitResult carrying its coefficients, the test
statistic used by the permutation tests, the parametric p-value and the
tail of the test.
"""

from pycwm.methods._common import FitOptions, FitResult, TAIL_ONE, TAIL_TWO, COR_COEFS
from pycwm.methods.registry import (
    METHODS,
    METHOD_NAMES,
    MethodSpec,
    get_method,
    fit_column,
    extremeness,
    statistic_name,
)

__all__ = [
    "FitOptions",
    "FitResult",
    "TAIL_ONE",
    "TAIL_TWO",
    "COR_COEFS",
    "METHODS",
    "METHOD_NAMES",
    "MethodSpec",
    "get_method",
    "fit_column",
    "extremeness",
    "statistic_name",
]
