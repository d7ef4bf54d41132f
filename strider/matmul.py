"""
Matrix multiplication with an injectable backend.

Shape rules for ``matmul(a, b)`` (both operands rank 1 or 2):

- ``[1] x [1]``: product of the two scalars, ``[a * b]``
- ``[k] x [k, n]``: row vector times matrix, rank 1 of length ``n``
- ``[m, k] x [k, n]``: forwarded to ``backend.gemm(a, b)``

Every other combination (including ``[m, k] x [k]``) raises
:class:`~strider.errors.ShapeMismatch`. The rank-1 cases are computed
directly and never reach a backend.
"""

from __future__ import annotations
import logging
from typing import Optional

import numpy as np

from .backends import REFERENCE, MatMulBackend
from .core.storage import format_shape
from .errors import ShapeMismatch
from .tensor import BaseTensor, Tensor

logger = logging.getLogger(__name__)


def _mismatch(a: BaseTensor, b: BaseTensor) -> ShapeMismatch:
    return ShapeMismatch(
        "Matrix multiplication requires the column count of the first tensor to equal "
        f"the row count of the second tensor: {format_shape(a.shape)} x {format_shape(b.shape)}"
    )


def matmul(a: BaseTensor, b: BaseTensor, backend: Optional[MatMulBackend] = None) -> Tensor:
    """
    Matrix product ``a x b``.

    Args:
        a: Rank 1 or rank 2 tensor
        b: Rank 1 or rank 2 tensor
        backend: Backend for the rank-2 x rank-2 case; defaults to the
            pure-Python reference backend

    Returns:
        The product as an immutable tensor

    Example:
        >>> matmul(Tensor([1.0, -2.0, 3.0]), Tensor([[4.0, 1.0], [0.0, 0.0], [-1.0, 2.0]]))
        Tensor([1.0, 7.0])
    """
    if not isinstance(a, BaseTensor) or not isinstance(b, BaseTensor):
        raise TypeError("matmul() expects two tensors")
    if a.ndim > 2 or b.ndim > 2:
        raise ShapeMismatch("Matrix multiplication can only be performed on 1- or 2-dimensional tensors")

    if a.ndim == 1:
        if b.ndim == 1:
            if a.shape[0] != 1 or b.shape[0] != 1:
                raise _mismatch(a, b)
            return Tensor([a.get(0) * b.get(0)])
        if a.shape[0] != b.shape[0]:
            raise _mismatch(a, b)
        row = a.numpy().tolist()
        cols = b.numpy().T.tolist()
        out = []
        for col in cols:
            acc = 0.0
            for x, y in zip(row, col):
                acc += x * y
            out.append(acc)
        return Tensor(np.array(out, dtype=np.float64))

    if b.ndim != 2 or a.shape[1] != b.shape[0]:
        raise _mismatch(a, b)

    if backend is None:
        backend = REFERENCE
    logger.debug(
        "Dispatching %s x %s to %s backend",
        format_shape(a.shape), format_shape(b.shape), backend.name,
    )
    return backend.gemm(a, b)
