"""
strider Core: Storage and TensorCore
====================================

The foundation layer - a contiguous float64 buffer and the shape/stride
bookkeeping that addresses it in row-major order.
"""

from __future__ import annotations
import math
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ShapeMismatch


class Shape(tuple):
    """
    Ordered, immutable sequence of positive dimension sizes.

    A ``Shape`` compares equal to a plain tuple holding the same sizes, so
    ``t.shape == (2, 3)`` works as expected.
    """

    def __new__(cls, dims: Iterable[int]) -> 'Shape':
        dims = tuple(dims)
        if len(dims) == 0:
            raise ShapeMismatch("Tensors must have at least 1 dimension")
        for dim in dims:
            if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
                raise TypeError(f"Shape dimensions must be integers, got {dim!r}")
            if dim <= 0:
                raise ShapeMismatch(f"Shape dimensions must be positive, got {format_shape(dims)}")
        return super().__new__(cls, (int(d) for d in dims))

    @classmethod
    def of(cls, *dims: Union[int, Sequence[int]]) -> 'Shape':
        """Build a shape from ``of(2, 3)`` or ``of((2, 3))``."""
        if len(dims) == 1 and not isinstance(dims[0], (int, np.integer)):
            return cls(dims[0])
        return cls(dims)

    @property
    def ndim(self) -> int:
        return len(self)

    @property
    def numel(self) -> int:
        return math.prod(self)

    def drop(self, count: int) -> Tuple[int, ...]:
        """Remaining sizes after removing the first ``count`` dimensions."""
        return tuple(self[count:])

    def __repr__(self) -> str:
        return format_shape(self)


def format_shape(shape: Sequence[int]) -> str:
    return "[" + ", ".join(str(d) for d in shape) + "]"


class Storage:
    """Raw contiguous buffer backing tensor data."""

    def __init__(self, size: int, data: Optional[np.ndarray] = None):
        self.size = size
        if data is not None:
            data = np.asarray(data, dtype=np.float64).reshape(-1)
            if data.size != size:
                raise ShapeMismatch(f"Storage of size {size} cannot hold {data.size} values")
            self._data = np.array(data, dtype=np.float64, copy=True)
        else:
            self._data = np.zeros(size, dtype=np.float64)

    @classmethod
    def wrap(cls, data: np.ndarray) -> 'Storage':
        """Adopt a freshly built float64 buffer without copying it."""
        storage = cls.__new__(cls)
        storage._data = np.ascontiguousarray(data, dtype=np.float64).reshape(-1)
        storage.size = storage._data.size
        return storage

    def __getitem__(self, idx: int) -> float:
        return float(self._data[idx])

    def __setitem__(self, idx: int, value: float):
        self._data[idx] = value

    def clone(self) -> 'Storage':
        return Storage.wrap(self._data.copy())

    def freeze(self) -> 'Storage':
        """Mark the buffer read-only. Frozen storage can be shared freely."""
        self._data.flags.writeable = False
        return self

    @property
    def read_only(self) -> bool:
        return not self._data.flags.writeable

    def numpy(self) -> np.ndarray:
        return self._data


class TensorCore:
    """Shape, strides and offset over a :class:`Storage`."""

    def __init__(
        self,
        storage: Storage,
        shape: Union[Shape, Sequence[int]],
        offset: int = 0,
    ):
        self.storage = storage
        self.shape = shape if isinstance(shape, Shape) else Shape(shape)
        self.strides = self._compute_strides(self.shape)
        self.offset = offset
        if offset + self.numel > storage.size:
            raise ShapeMismatch(
                f"Shape {format_shape(self.shape)} does not fit in storage of size {storage.size}"
            )

    @staticmethod
    def _compute_strides(shape: Tuple[int, ...]) -> Tuple[int, ...]:
        strides = [1]
        for dim in reversed(shape[1:]):
            strides.append(strides[-1] * dim)
        return tuple(reversed(strides))

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def numel(self) -> int:
        return self.shape.numel

    def _normalize(self, axis: int, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Tensor indices must be integers, got {index!r}")
        size = self.shape[axis]
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise ShapeMismatch(f"Index {index} out of bounds for dimension {axis} with size {size}")
        return int(index)

    def _flat_index(self, indices: Sequence[int]) -> int:
        if len(indices) > self.ndim:
            raise ShapeMismatch(
                f"Number of indices {list(indices)} exceeds tensor dimensions {self.ndim}"
            )
        idx = self.offset
        for axis, (index, stride) in enumerate(zip(indices, self.strides)):
            idx += self._normalize(axis, index) * stride
        return idx

    def get(self, indices: Sequence[int]) -> float:
        if len(indices) != self.ndim:
            raise ShapeMismatch(
                f"Number of indices {list(indices)} does not match tensor dimensions {self.ndim}"
            )
        return self.storage[self._flat_index(indices)]

    def set(self, indices: Sequence[int], value: float):
        if len(indices) != self.ndim:
            raise ShapeMismatch(
                f"Number of indices {list(indices)} does not match tensor dimensions {self.ndim}"
            )
        self.storage[self._flat_index(indices)] = value

    def sub_core(self, indices: Sequence[int]) -> 'TensorCore':
        """View of the sub-tensor addressed by a strict prefix of indices."""
        if len(indices) >= self.ndim:
            raise ShapeMismatch(
                f"Number of indices {list(indices)} must be less than the number of "
                f"tensor dimensions {self.ndim}"
            )
        return TensorCore(self.storage, self.shape.drop(len(indices)), self._flat_index(indices))

    def clone(self) -> 'TensorCore':
        return TensorCore(Storage.wrap(self.numpy().copy()), self.shape)

    def numpy(self) -> np.ndarray:
        """Row-major view of this core's values, shaped like the tensor."""
        data = self.storage.numpy()[self.offset:self.offset + self.numel]
        return data.reshape(self.shape)

    def flat(self) -> np.ndarray:
        return self.storage.numpy()[self.offset:self.offset + self.numel]

    def __repr__(self) -> str:
        return f"TensorCore(shape={format_shape(self.shape)}, offset={self.offset})"


def core_from_numpy(arr: np.ndarray, frozen: bool = False) -> TensorCore:
    """Build a core owning a copy of ``arr``."""
    arr = np.asarray(arr, dtype=np.float64)
    storage = Storage(arr.size, arr)
    if frozen:
        storage.freeze()
    return TensorCore(storage, arr.shape)


def core_from_buffer(buffer: np.ndarray, shape: Sequence[int], frozen: bool = False) -> TensorCore:
    """Build a core that adopts ``buffer`` (which must not be referenced elsewhere)."""
    storage = Storage.wrap(buffer)
    if frozen:
        storage.freeze()
    return TensorCore(storage, shape)
