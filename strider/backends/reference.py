"""Portable pure-Python GEMM."""

from __future__ import annotations
from typing import Optional

import numpy as np

from .base import MatMulBackend


class ReferenceBackend(MatMulBackend):
    """
    Triple-loop GEMM with no native dependencies.

    Always available, and the default for :func:`strider.matmul.matmul`.
    Each output element accumulates ``a[i][p] * b[p][j]`` left to right.
    """

    name = "reference"

    def _gemm(
        self,
        a: np.ndarray,
        b: np.ndarray,
        c: Optional[np.ndarray],
        alpha: float,
        beta: float,
    ) -> np.ndarray:
        m, k = a.shape
        n = b.shape[1]
        a_rows = a.tolist()
        b_rows = b.tolist()
        c_rows = c.tolist() if c is not None else None

        out = []
        for i in range(m):
            row = a_rows[i]
            out_row = []
            for j in range(n):
                acc = 0.0
                for p in range(k):
                    acc += row[p] * b_rows[p][j]
                value = alpha * acc
                if c_rows is not None and beta != 0.0:
                    value += beta * c_rows[i][j]
                out_row.append(value)
            out.append(out_row)
        return np.array(out, dtype=np.float64).reshape(m, n)
