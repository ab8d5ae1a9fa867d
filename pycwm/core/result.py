"""
Generic result container for all pycwm computations.

The Result class provides a standardized envelope that weighted-mean and
permutation-test results use. This enables shared tooling for timing,
diagnostics and reproducibility while allowing each domain to define its
own parameter structure.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, test, seeds, counts)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (weighted means, column outcomes)
        info: Structured metadata (method, permutations, seed)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=WeightedMeanParams(values=cwm, n_valid_species=counts),
        ...     info={'n_samples': 97, 'n_attributes': 6},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_wm'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
