"""
Linear algebra kernels for pycwm.

CPU implementations via NumPy/SciPy (LAPACK under the hood). Each
operation returns a structured result dataclass and raises immediately
with a clear message on failure.

Submodules:
    qr: QR decomposition and (weighted) least squares
"""

from pycwm.core.compute.linalg.qr import (
    QRResult,
    LstsqResult,
    qr_cpu,
    qr_lstsq,
)

__all__ = [
    "QRResult",
    "LstsqResult",
    "qr_cpu",
    "qr_lstsq",
]
