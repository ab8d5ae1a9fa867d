"""
Tolerances for numerical decisions and validation.

Defines precision expectations used by the model fitters (when is a
variance "zero", when is a design rank-deficient) and by the test suite
when comparing against reference implementations.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# CPU reference: must match scipy / R to machine precision
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision, closed-form statistics',
)

# Statistics computed through different but equivalent formulas
# (e.g. F from QR residuals vs. F from sums of squares)
CPU_FP64_DERIVED = ToleranceTier(
    rtol=1e-7,
    atol=1e-9,
    name='cpu_fp64_derived',
    description='CPU double precision, algebraically equivalent paths',
)

# Relative variance below which a response or predictor counts as constant
ZERO_VARIANCE_RTOL = 1e-14
