"""
Exception hierarchy for pycwm.

All exceptions inherit from PyCWMError to allow catching any
library-specific error. Validation errors are raised before any
computation starts; numerical errors are raised (or recorded) while
fitting models to individual columns or permutation draws.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyCWMError(Exception):
    """Base exception for all pycwm errors."""
    pass


class ValidationError(PyCWMError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class InvalidInputKind(ValidationError):
    """
    An object of the wrong kind was passed.

    Raised when a weighted-mean result or an abundance matrix is required
    but something else (non-numeric data, a plain array where provenance
    is needed) was given.

    Attributes:
        expected: Description of the expected kind
        actual: Type name of the object received
    """

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class NotWeightedMeanError(ValidationError):
    """
    A modified permutation test was requested without provenance.

    The modified test permutes species attributes and recomputes the
    weighted means, so it needs the abundance and attribute matrices that
    only a result of ``wm()`` carries.
    """
    pass


class DimensionMismatch(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or when
    weighted means, environmental variables, abundances and attributes
    disagree on the number of samples or species.
    """
    pass


class UnsupportedMethodConfiguration(ValidationError):
    """
    The statistical method cannot be used with the given inputs.

    Examples: correlation with several environmental variables, ANOVA
    with a continuous predictor, or a reversed dependence for a method
    that only models the weighted mean as response.

    Attributes:
        method: Name of the statistical method
    """

    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self.method = method


class NumericalError(PyCWMError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a least squares problem has a rank-deficient design matrix.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Expected rank (number of columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class FitFailure(NumericalError):
    """
    A statistical model could not be fitted to one column.

    Attributes:
        column: Index of the column (weighted-mean attribute, or
            environmental variable under ``env ~ M``) that failed
    """

    def __init__(self, message: str, column: int | None = None):
        super().__init__(message)
        self.column = column


class PermutationDrawFailure(NumericalError):
    """
    One permutation draw could not be completed for one column.

    Never raised out of ``mopet()``: failed draws are recorded on the
    column outcome and excluded from that column's null distribution.

    Attributes:
        draw: Zero-based index of the permutation draw
        column: Index of the column that failed in this draw
        test: 'standard' or 'modified'
    """

    def __init__(
        self,
        message: str,
        draw: int,
        column: int,
        test: str | None = None,
    ):
        super().__init__(message)
        self.draw = draw
        self.column = column
        self.test = test
