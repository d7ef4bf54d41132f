"""GEMM through the BLAS library bundled with SciPy."""

from __future__ import annotations
import logging
from typing import Optional

import numpy as np
from scipy.linalg import blas as scipy_blas

from .base import MatMulBackend

logger = logging.getLogger(__name__)


class BlasBackend(MatMulBackend):
    """
    Native ``dgemm`` via ``scipy.linalg.blas`` (OpenBLAS, MKL or whatever
    SciPy was built against).

    Results match :class:`ReferenceBackend` up to the summation order the
    BLAS kernel chooses.
    """

    name = "blas"

    def _gemm(
        self,
        a: np.ndarray,
        b: np.ndarray,
        c: Optional[np.ndarray],
        alpha: float,
        beta: float,
    ) -> np.ndarray:
        logger.debug("dgemm %s x %s (alpha=%s, beta=%s)", a.shape, b.shape, alpha, beta)
        if c is None:
            out = scipy_blas.dgemm(alpha, a, b)
        else:
            # dgemm may write into c; the caller's copy must stay untouched.
            out = scipy_blas.dgemm(alpha, a, b, beta=beta, c=np.array(c, order='F'), overwrite_c=0)
        return np.asarray(out, dtype=np.float64)
