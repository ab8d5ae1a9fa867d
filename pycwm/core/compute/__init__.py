"""
Shared compute infrastructure for pycwm.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC and scheduling
infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical tolerance constants
    parallel: Execution modes and call-scoped worker pools
    linalg: Linear algebra kernels (QR least squares)
"""

from pycwm.core.compute.timing import Timer
from pycwm.core.compute.parallel import ExecutionMode, WorkerPool

__all__ = [
    # Timing
    "Timer",
    # Scheduling
    "ExecutionMode",
    "WorkerPool",
]
