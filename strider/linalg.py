"""
Exact linear-algebra primitives on row-major value arrays.

These routines take the ``numpy()`` view of a tensor and return plain
numbers or freshly allocated arrays; ``Tensor.transpose``, ``Tensor.det``,
``Tensor.inverse`` and ``Tensor.submatrix`` wrap them.

The N x N determinant is the difference of the wrapped-diagonal product
sums (the rule of Sarrus carried to every size). It is exact for N <= 3 and
is *not* a general determinant for N >= 4; callers relying on larger
determinants get the same numbers the rule produces.
"""

from __future__ import annotations

import numpy as np

from .core.storage import format_shape
from .errors import ShapeMismatch


def _validate_square(values: np.ndarray, action: str) -> None:
    shape = values.shape
    if (
        values.ndim > 2
        or (values.ndim == 1 and shape[0] != 1)
        or (values.ndim == 2 and shape[0] != shape[1])
    ):
        raise ShapeMismatch(
            f"Only 2-dimensional square matrices have {action}, got shape {format_shape(shape)}"
        )


def transpose(values: np.ndarray) -> np.ndarray:
    """
    Transpose a rank 1 or rank 2 array.

    A length-1 row is its own transpose, a row of length n becomes an
    ``[n, 1]`` column, an ``[n, 1]`` column becomes a row of length n, and
    every other matrix swaps its axes.
    """
    if values.ndim > 2:
        raise ShapeMismatch("Only tensors with 1 or 2 dimensions can be transposed")
    if values.ndim == 1:
        if values.shape[0] == 1:
            return values.copy()
        return values.reshape(values.shape[0], 1).copy()
    if values.shape[1] == 1:
        return values.reshape(values.shape[0]).copy()
    # Always copy: values.T of a [1, n] input is already C-contiguous.
    return values.T.copy()


def det(values: np.ndarray) -> float:
    """
    Determinant of a square matrix.

    Args:
        values: ``[n, n]`` array

    Returns:
        ``ad - bc`` for 2x2 input, otherwise the wrapped-diagonal rule

    Raises:
        ShapeMismatch: For non-square input and for the rank-1 1x1 case
    """
    _validate_square(values, "determinants")
    if values.ndim == 1:
        raise ShapeMismatch("1x1 matrices do not have determinants")

    n = values.shape[0]
    m = values.tolist()
    if n == 2:
        return m[0][0] * m[1][1] - m[0][1] * m[1][0]

    to_add = 0.0
    for top in range(n):
        product = 1.0
        for offset in range(n):
            product *= m[offset][(top + offset) % n]
        to_add += product

    to_subtract = 0.0
    for top in range(n):
        product = 1.0
        for offset in range(n - 1, -1, -1):
            product *= m[offset][(n + top - offset) % n]
        to_subtract += product

    return to_add - to_subtract


def submatrix(values: np.ndarray, row: int, col: int) -> np.ndarray:
    """Minor of a square matrix with ``row`` and ``col`` removed."""
    _validate_square(values, "matrix minors")
    if values.ndim == 1 or values.shape[0] < 2:
        raise ShapeMismatch("1x1 matrices do not have matrix minors")
    n = values.shape[0]
    for name, index in (("row", row), ("column", col)):
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Matrix minor {name} must be an integer, got {index!r}")
        if index < 0 or index >= n:
            raise ShapeMismatch(f"Invalid {name} {index} for matrix minor of a {n}x{n} matrix")
    keep_rows = [r for r in range(n) if r != row]
    keep_cols = [c for c in range(n) if c != col]
    return np.ascontiguousarray(values[np.ix_(keep_rows, keep_cols)])


def inverse(values: np.ndarray) -> np.ndarray:
    """
    Inverse of a square matrix by the adjugate method.

    1x1 input inverts its scalar, 2x2 input uses the closed form, and larger
    matrices divide the transposed cofactor matrix (built from
    ``det(submatrix(r, c))``) by ``det``.

    The cofactor sign follows the parity of the flat index ``r * n + c``.
    That is the usual checkerboard ``(r + c) % 2`` for odd ``n`` but not for
    even ``n >= 4``; together with the wrapped-diagonal ``det`` this makes
    results for ``n >= 4`` differ from a textbook inverse.

    Raises:
        ShapeMismatch: For non-square input or a zero determinant
    """
    _validate_square(values, "inverses")

    if values.size == 1:
        scalar = float(values.reshape(-1)[0])
        if scalar == 0.0:
            raise ShapeMismatch("Inverse matrix does not exist for a singular matrix")
        return np.full(values.shape, 1.0 / scalar)

    determinant = det(values)
    if determinant == 0.0:
        raise ShapeMismatch("Inverse matrix does not exist for a singular matrix")

    n = values.shape[0]
    if n == 2:
        (a, b), (c, d) = values.tolist()
        return np.array([[d, -b], [-c, a]], dtype=np.float64) / determinant

    cofactors = np.empty((n, n), dtype=np.float64)
    for r in range(n):
        for c in range(n):
            sign = 1.0 if (r * n + c) % 2 == 0 else -1.0
            cofactors[r, c] = sign * det(submatrix(values, r, c))
    return np.ascontiguousarray(transpose(cofactors)) / determinant
