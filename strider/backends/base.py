"""Matrix-multiply backend interface."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from ..core.storage import format_shape
from ..errors import ShapeMismatch
from ..tensor import BaseTensor, Tensor


class MatMulBackend(ABC):
    """
    Strategy for the GEMM operation ``alpha * (a x b) + beta * c``.

    Backends hold no tensor data; matrices are passed on every call and the
    call blocks until the result is available on the host. Subclasses only
    implement :meth:`_gemm` on row-major float64 arrays; shape validation
    and conversion happen here so every backend agrees on the contract.
    Swapping backends changes results by floating-point rounding at most.
    """

    name: str = "abstract"

    def gemm(
        self,
        a: BaseTensor,
        b: BaseTensor,
        c: Optional[BaseTensor] = None,
        alpha: float = 1.0,
        beta: float = 0.0,
    ) -> Tensor:
        """
        Compute ``alpha * (a x b) + beta * c``.

        Args:
            a: ``[m, k]`` matrix
            b: ``[k, n]`` matrix
            c: Optional ``[m, n]`` matrix; treated as zeros when omitted
            alpha: Scale of the product
            beta: Scale of ``c``

        Returns:
            ``[m, n]`` tensor

        Raises:
            ShapeMismatch: If the operands are not compatible matrices
        """
        if a.ndim != 2 or b.ndim != 2:
            raise ShapeMismatch(
                f"GEMM requires 2-dimensional operands, got {format_shape(a.shape)} "
                f"and {format_shape(b.shape)}"
            )
        m, k = a.shape
        if b.shape[0] != k:
            raise ShapeMismatch(
                "Matrix multiplication requires the column count of the first tensor to "
                f"equal the row count of the second tensor: {format_shape(a.shape)} x "
                f"{format_shape(b.shape)}"
            )
        n = b.shape[1]
        c_values = None
        if c is not None:
            if tuple(c.shape) != (m, n):
                raise ShapeMismatch(
                    f"GEMM accumulator must have shape {format_shape((m, n))}, "
                    f"got {format_shape(c.shape)}"
                )
            c_values = c.numpy()

        result = self._gemm(a.numpy(), b.numpy(), c_values, float(alpha), float(beta))
        result = np.ascontiguousarray(result, dtype=np.float64)
        return Tensor._from_buffer(result.reshape(-1), (m, n))

    @abstractmethod
    def _gemm(
        self,
        a: np.ndarray,
        b: np.ndarray,
        c: Optional[np.ndarray],
        alpha: float,
        beta: float,
    ) -> np.ndarray:
        """Backend kernel on validated ``[m, k]``, ``[k, n]`` and ``[m, n]`` arrays."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
