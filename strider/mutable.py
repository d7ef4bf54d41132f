"""Mutable tensors for algorithms that accumulate state in place."""

from __future__ import annotations
import numbers
from typing import Any, Callable, Sequence, Union

import numpy as np

from .core.storage import format_shape
from .errors import ShapeMismatch
from .tensor import BaseTensor, Tensor


class MutableTensor(BaseTensor):
    """
    A tensor that permits indexed and in-place writes.

    Layout and every read operation are identical to :class:`Tensor`; read
    operations return immutable ``Tensor`` results. Conversions in either
    direction (``Tensor.to_mutable()``, ``MutableTensor.to_tensor()``)
    deep copy, so the two never share a buffer.

    Writes are not synchronized. Concurrent writers, or a writer running
    alongside readers, need external locking.

    Example:
        >>> q = MutableTensor.zeros(2, 3)
        >>> q[1, 2] = 0.5
        >>> q[0] = Tensor([1.0, 2.0, 3.0])
        >>> q += 1
    """

    _FROZEN = False
    __hash__ = None

    def set(self, indices: Union[int, Sequence[int]], value: Union[float, BaseTensor]) -> None:
        """
        Write a scalar or replace a whole sub-tensor.

        Args:
            indices: One index per dimension for a scalar write, or a strict
                prefix of the dimensions for a sub-tensor write
            value: Scalar, or a tensor whose shape equals the addressed
                sub-tensor's shape. Tensor content is copied in.

        Raises:
            ShapeMismatch: If the index count or the value shape does not fit
        """
        if isinstance(indices, (int, np.integer)):
            indices = (indices,)
        indices = tuple(indices)

        if isinstance(value, BaseTensor):
            if len(indices) >= self.ndim:
                raise ShapeMismatch(
                    f"Number of indices {list(indices)} must be less than the number of "
                    f"tensor dimensions {self.ndim} to assign a sub-tensor"
                )
            expected = self.shape.drop(len(indices))
            if value.shape != expected:
                raise ShapeMismatch(
                    f"Tensor shape {format_shape(value.shape)} does not match expected "
                    f"shape {format_shape(expected)}"
                )
            target = self._core.sub_core(indices)
            target.flat()[:] = value._core.flat()
            return

        if not isinstance(value, numbers.Real):
            raise TypeError(f"Cannot assign {type(value).__name__} to a tensor element")
        self._core.set(indices, float(value))

    def __setitem__(self, key, value) -> None:
        self.set(key if isinstance(key, tuple) else (key,), value)

    def _inplace(self, other: Any, op: Callable) -> 'MutableTensor':
        if isinstance(other, BaseTensor):
            self._check_same_shape(other)
            rhs = other._core.flat()
        elif isinstance(other, numbers.Real):
            rhs = float(other)
        else:
            return NotImplemented
        flat = self._core.flat()
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            op(flat, rhs, out=flat)
        return self

    def __iadd__(self, other):
        return self._inplace(other, np.add)

    def __isub__(self, other):
        return self._inplace(other, np.subtract)

    def __imul__(self, other):
        return self._inplace(other, np.multiply)

    def __itruediv__(self, other):
        return self._inplace(other, np.divide)

    def fill(self, value: float) -> None:
        """Overwrite every scalar with ``value``."""
        self._core.flat()[:] = float(value)

    def copy(self) -> 'MutableTensor':
        """Independent copy; later writes to either side are not shared."""
        return MutableTensor._from_core(self._core.clone())
