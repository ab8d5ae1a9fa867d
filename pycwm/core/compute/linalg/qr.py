"""
QR least squares.

Provides the least squares kernel used by the regression-based methods
(linear regression, ANOVA, weighted slope regression). Weighted problems
are reduced to ordinary ones by scaling rows with sqrt(w), as R's lm()
does.
"""

from dataclasses import dataclass
from typing import Literal, Any
import numpy as np
from numpy.typing import NDArray

from pycwm.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank determined from R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int


@dataclass(frozen=True)
class LstsqResult:
    """
    Least squares fit.

    Attributes:
        coefficients: Estimated coefficients (p,)
        fitted_values: X @ coefficients on the original (unweighted) scale (n,)
        residuals: y - fitted_values (n,)
        rss: (Weighted) residual sum of squares
        unscaled_cov: (X'WX)^-1, for standard errors (p x p)
    """
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    rss: float
    unscaled_cov: NDArray[np.floating[Any]]


def qr_cpu(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR, 'complete' for full QR

    Returns:
        QRResult with Q, R, and numerical rank
    """
    Q, R = np.linalg.qr(X, mode=mode)

    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R.max() > 0:
        # Tolerance based on matrix size and machine epsilon
        tol = max(X.shape) * np.finfo(X.dtype).eps * diag_R.max()
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRResult(Q=Q, R=R, rank=rank)


def qr_lstsq(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]] | None = None,
) -> LstsqResult:
    """
    Solve (weighted) least squares via QR decomposition.

    Solves: min_β Σ w_i (y_i - x_i'β)² with
        X_w = diag(√w) X,  y_w = diag(√w) y
        X_w = QR,  β = R⁻¹ Q'y_w

    Args:
        X: Design matrix (n x p), must have n >= p
        y: Response vector (n,)
        weights: Optional non-negative case weights (n,)

    Returns:
        LstsqResult

    Raises:
        SingularMatrixError: If X (after weighting) is rank-deficient
    """
    from scipy.linalg import solve_triangular

    n, p = X.shape
    if n < p:
        raise SingularMatrixError(
            f"Design matrix has fewer rows ({n}) than columns ({p})",
            matrix_name='X',
            rank=n,
            expected_rank=p,
        )

    if weights is not None:
        sw = np.sqrt(weights)
        Xw = X * sw[:, None]
        yw = y * sw
    else:
        Xw, yw = X, y

    qr_result = qr_cpu(Xw, mode='reduced')
    if qr_result.rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"This indicates perfect multicollinearity or a constant predictor.",
            matrix_name='X',
            rank=qr_result.rank,
            expected_rank=p
        )

    R = qr_result.R[:p, :p]
    beta = solve_triangular(R, qr_result.Q.T @ yw, lower=False)
    R_inv = solve_triangular(R, np.eye(p), lower=False)

    fitted = X @ beta
    residuals = y - fitted
    resid_w = yw - Xw @ beta

    return LstsqResult(
        coefficients=beta,
        fitted_values=fitted,
        residuals=residuals,
        rss=float(resid_w @ resid_w),
        unscaled_cov=R_inv @ R_inv.T,
    )
