"""
Tensor: an immutable N-dimensional container of float64 scalars.

Every tensor is a :class:`~strider.core.TensorCore` over one contiguous
row-major buffer. ``Tensor`` freezes its buffer at construction, which is
what makes it a value type: operations never mutate their inputs and every
result owns (or shares read-only) fresh storage. ``MutableTensor`` (see
:mod:`strider.mutable`) reuses all of the read operations defined on
:class:`BaseTensor` and adds indexed writes.

Example:
    >>> import strider as st
    >>> a = st.tensor([[1.0, 2.0], [3.0, 4.0]])
    >>> a.det()
    -2.0
    >>> (a + 1).sum(axis=1)
    Tensor([5.0, 9.0])
"""

from __future__ import annotations
import functools
import math
import numbers
import operator
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

from . import linalg
from .core.storage import (
    Shape,
    TensorCore,
    core_from_buffer,
    core_from_numpy,
    format_shape,
)
from .errors import ShapeMismatch
from .formatting import format_tensor
from .sampling import DistributionSampler, RandomSource, permutation, resolve_random

Number = Union[int, float]

_DEFAULT = object()


def _as_array(data: Any) -> np.ndarray:
    """Convert constructor input (numbers, nested sequences, tensors, arrays) to float64."""
    if isinstance(data, (str, bytes)):
        raise TypeError(f"Cannot create tensor from {type(data).__name__}")
    if isinstance(data, BaseTensor):
        return data._core.numpy()
    try:
        arr = np.asarray(data)
    except ValueError as exc:
        raise ShapeMismatch(f"Sub-tensors must all share the same shape: {exc}") from exc
    if arr.dtype.kind not in "biufO":
        raise TypeError(f"Tensor values must be real numbers, got {arr.dtype} data")
    try:
        return arr.astype(np.float64, copy=False)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"Tensor values must be real numbers: {exc}") from exc


def _wrap(buffer: np.ndarray, shape: Sequence[int]) -> 'Tensor':
    return Tensor._from_core(core_from_buffer(buffer, shape, frozen=True))


class BaseTensor:
    """
    Read operations shared by :class:`Tensor` and ``MutableTensor``.

    Every operation validates shapes before building output and raises
    :class:`~strider.errors.ShapeMismatch` on violation. Results are always
    immutable :class:`Tensor` instances.
    """

    # Make NumPy defer binary operators (``np.float64(2) * t``) to us.
    __array_ufunc__ = None

    _FROZEN = True

    def __init__(self, data: Any):
        """
        Create a tensor from explicit values.

        Args:
            data: Nested sequence of numbers, sequence of equally shaped
                tensors, NumPy array, or another tensor. The values are
                always copied.

        Raises:
            ShapeMismatch: If the data is empty, ragged or zero-dimensional
        """
        self._core = core_from_numpy(_as_array(data), frozen=self._FROZEN)

    @classmethod
    def _from_core(cls, core: TensorCore) -> 'BaseTensor':
        instance = cls.__new__(cls)
        instance._core = core
        return instance

    @classmethod
    def _from_buffer(cls, buffer: np.ndarray, shape: Sequence[int]) -> 'BaseTensor':
        return cls._from_core(core_from_buffer(buffer, shape, frozen=cls._FROZEN))

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, *shape: int) -> 'BaseTensor':
        """Tensor of the given shape filled with ``0.0``."""
        shape = Shape.of(*shape)
        return cls._from_buffer(np.zeros(shape.numel, dtype=np.float64), shape)

    @classmethod
    def generate(cls, *shape: int, fn: Callable[[int], float]) -> 'BaseTensor':
        """
        Tensor whose scalars are produced from their flat row-major index.

        Example:
            >>> Tensor.generate(2, 3, fn=lambda i: i * 2.0)
            Tensor([[0.0, 2.0, 4.0]
            [6.0, 8.0, 10.0]])
        """
        shape = Shape.of(*shape)
        n = shape.numel
        buffer = np.fromiter((float(fn(i)) for i in range(n)), dtype=np.float64, count=n)
        return cls._from_buffer(buffer, shape)

    @classmethod
    def random(cls, *shape: int, random: Optional[RandomSource] = None) -> 'BaseTensor':
        """
        Tensor of uniform samples in ``[0, 1)``.

        Args:
            *shape: Dimension sizes
            random: Random source; pass a seeded ``random.Random`` for
                reproducible values
        """
        rng = resolve_random(random)
        return cls.generate(*shape, fn=lambda _: rng.random())

    @classmethod
    def sample(cls, *shape: int, sampler: DistributionSampler) -> 'BaseTensor':
        """Tensor filled by repeatedly calling ``sampler.sample()``."""
        return cls.generate(*shape, fn=lambda _: sampler.sample())

    @classmethod
    def stack(cls, tensors: Iterable['BaseTensor']) -> 'BaseTensor':
        """
        Stack equally shaped tensors along a new leading axis.

        Args:
            tensors: Sub-tensors, all with the same shape

        Returns:
            Tensor of shape ``[len(tensors), *sub_shape]``

        Raises:
            ShapeMismatch: If no tensors are given or their shapes differ
        """
        parts = list(tensors)
        if not parts:
            raise ShapeMismatch("Cannot stack an empty sequence of tensors")
        for part in parts:
            if not isinstance(part, BaseTensor):
                raise TypeError(f"stack() expects tensors, got {type(part).__name__}")
        first = parts[0].shape
        for part in parts[1:]:
            if part.shape != first:
                raise ShapeMismatch(
                    f"Sub-tensor shapes do not match: {format_shape(first)} and {format_shape(part.shape)}"
                )
        stacked = np.stack([part._core.numpy() for part in parts])
        return cls._from_buffer(stacked.reshape(-1), stacked.shape)

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> 'BaseTensor':
        return cls(np.asarray(arr))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def shape(self) -> Shape:
        return self._core.shape

    @property
    def ndim(self) -> int:
        return self._core.ndim

    @property
    def size(self) -> int:
        """Total number of scalars (product of the shape)."""
        return self._core.numel

    def __len__(self) -> int:
        return self.shape[0]

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def _flat_snapshot(self) -> np.ndarray:
        """Row-major scalars that are safe to adopt into a frozen tensor."""
        flat = self._core.flat()
        if self._core.storage.read_only:
            return flat
        return flat.copy()

    def numpy(self) -> np.ndarray:
        """Copy of the values as an array shaped like the tensor."""
        return self._core.numpy().copy()

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        arr = self.numpy()
        if dtype is not None:
            arr = arr.astype(dtype)
        return arr

    def tolist(self) -> list:
        """Values as nested Python lists."""
        return self._core.numpy().tolist()

    def values(self) -> Iterator[float]:
        """Iterate over every scalar in row-major order."""
        return iter(self._core.flat().tolist())

    def copy(self) -> 'BaseTensor':
        return type(self)._from_core(self._core.clone())

    def to_mutable(self):
        """Deep copy as a ``MutableTensor``."""
        from .mutable import MutableTensor
        return MutableTensor._from_core(self._core.clone())

    def to_tensor(self) -> 'Tensor':
        """Deep copy as an immutable :class:`Tensor`."""
        return Tensor._from_core(core_from_numpy(self._core.numpy(), frozen=True))

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def get(self, *indices: int) -> float:
        """
        Scalar at the given position.

        Raises:
            ShapeMismatch: If the index count differs from the rank or an
                index is out of bounds
        """
        return self._core.get(indices)

    def _child(self, index: int) -> 'Tensor':
        core = self._core.sub_core((index,))
        if self._core.storage.read_only:
            return Tensor._from_core(core)
        return Tensor._from_core(core_from_numpy(core.numpy(), frozen=True))

    def select(self, *indices: Optional[int]) -> 'Tensor':
        """
        Sub-tensor selected by a partial index pattern.

        ``None`` acts as a wildcard that keeps the whole axis. Trailing
        wildcards are dropped; a wildcard elsewhere maps over that axis, so the
        result keeps one axis per wildcard plus every unindexed trailing axis.

        Example:
            >>> t = Tensor.generate(2, 3, 3, fn=float)
            >>> t.select(None, 1).shape
            [2, 3]

        Raises:
            ShapeMismatch: If there are more indices than dimensions or the
                pattern leaves no axis (use :meth:`get` for scalars)
        """
        idx = list(indices)
        while idx and idx[-1] is None:
            idx.pop()
        if not idx:
            return self.to_tensor()
        if len(idx) > self.ndim:
            raise ShapeMismatch(
                f"Number of indices {idx} exceeds tensor dimensions {self.ndim}"
            )
        if len(idx) == self.ndim and all(i is not None for i in idx):
            raise ShapeMismatch(
                f"Index pattern {idx} selects a scalar from a {self.ndim}-dimensional tensor; use get()"
            )
        if all(i is not None for i in idx):
            core = self._core.sub_core(idx)
            return Tensor._from_core(core_from_numpy(core.numpy(), frozen=True))

        key = tuple(
            slice(None) if i is None else self._core._normalize(axis, i)
            for axis, i in enumerate(idx)
        )
        selected = np.array(self._core.numpy()[key], dtype=np.float64)
        return _wrap(selected.reshape(-1), selected.shape)

    def __getitem__(self, key) -> Union[float, 'Tensor']:
        if not isinstance(key, tuple):
            key = (key,)
        if len(key) == self.ndim and all(k is not None for k in key):
            return self.get(*key)
        return self.select(*key)

    def __iter__(self) -> Iterator[Union[float, 'Tensor']]:
        if self.ndim == 1:
            yield from self._core.flat().tolist()
        else:
            for i in range(self.shape[0]):
                yield self._child(i)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _check_same_shape(self, other: 'BaseTensor') -> None:
        if self.shape != other.shape:
            raise ShapeMismatch(
                f"Tensor sizes do not match: {format_shape(self.shape)} and {format_shape(other.shape)}"
            )

    def _binary(self, other: Any, op: Callable, reflected: bool = False):
        if isinstance(other, BaseTensor):
            self._check_same_shape(other)
            rhs = other._core.flat()
        elif isinstance(other, numbers.Real):
            rhs = float(other)
        else:
            return NotImplemented
        lhs = self._core.flat()
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            result = op(rhs, lhs) if reflected else op(lhs, rhs)
        return _wrap(np.asarray(result, dtype=np.float64), self.shape)

    def __neg__(self) -> 'Tensor':
        return _wrap(np.negative(self._core.flat()), self.shape)

    def __pos__(self) -> 'Tensor':
        return self.to_tensor()

    def __add__(self, other):
        return self._binary(other, operator.add)

    def __radd__(self, other):
        return self._binary(other, operator.add, reflected=True)

    def __sub__(self, other):
        return self._binary(other, operator.sub)

    def __rsub__(self, other):
        return self._binary(other, operator.sub, reflected=True)

    def __mul__(self, other):
        return self._binary(other, operator.mul)

    def __rmul__(self, other):
        return self._binary(other, operator.mul, reflected=True)

    def __truediv__(self, other):
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other):
        return self._binary(other, operator.truediv, reflected=True)

    def __matmul__(self, other):
        if not isinstance(other, BaseTensor):
            return NotImplemented
        return self.matmul(other)

    def matmul(self, other: 'BaseTensor', backend=None) -> 'Tensor':
        """
        Matrix product ``self x other``.

        Args:
            other: Rank 1 or rank 2 tensor
            backend: :class:`~strider.backends.MatMulBackend` used for the
                rank-2 x rank-2 case; defaults to the reference backend

        See :func:`strider.matmul.matmul` for the shape rules.
        """
        from .matmul import matmul
        return matmul(self, other, backend=backend)

    def map(self, fn: Callable[[float], float]) -> 'Tensor':
        """Apply ``fn`` to every scalar."""
        flat = self._core.flat().tolist()
        buffer = np.fromiter((float(fn(v)) for v in flat), dtype=np.float64, count=len(flat))
        return _wrap(buffer, self.shape)

    def map_indexed(self, fn: Callable[[int, float], float]) -> 'Tensor':
        """Apply ``fn(flat_index, value)`` to every scalar."""
        flat = self._core.flat().tolist()
        buffer = np.fromiter(
            (float(fn(i, v)) for i, v in enumerate(flat)), dtype=np.float64, count=len(flat)
        )
        return _wrap(buffer, self.shape)

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, BaseTensor):
            return NotImplemented
        return self.shape == other.shape and bool(
            np.array_equal(self._core.flat(), other._core.flat())
        )

    def approx_equals(self, other: 'BaseTensor', tolerance: float = 1e-8) -> bool:
        """True if shapes match and every ``|a - b| < tolerance``."""
        if not isinstance(other, BaseTensor):
            raise TypeError(f"approx_equals() expects a tensor, got {type(other).__name__}")
        if self.shape != other.shape:
            return False
        diff = np.abs(self._core.flat() - other._core.flat())
        return bool(np.all(diff < tolerance))

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------

    def fold_indexed(
        self,
        initial: float,
        fn: Callable[[int, float, float], float],
        axis: int = 0,
    ) -> 'Tensor':
        """
        Fold along an axis with access to each scalar's flat index.

        Rank 1 tensors fold every scalar into a length-1 tensor. Rank 2
        tensors fold down the columns for ``axis=0`` (one result per column)
        and across the rows for ``axis=1`` (one result per row).

        Args:
            initial: Seed of every fold
            fn: ``fn(flat_index, accumulator, value) -> accumulator``
            axis: Axis to fold along

        Raises:
            ShapeMismatch: For rank > 2 or an axis outside the tensor
        """
        if isinstance(axis, bool) or not isinstance(axis, int):
            raise TypeError(f"axis must be an integer, got {axis!r}")
        if self.ndim == 1 and axis == 0:
            acc = initial
            for index, value in enumerate(self._core.flat().tolist()):
                acc = fn(index, acc, value)
            return _wrap(np.array([acc], dtype=np.float64), (1,))

        if self.ndim == 2 and axis in (0, 1):
            rows, cols = self.shape
            m = self._core.numpy().tolist()
            results = []
            if axis == 0:
                # e.g. [[1,2,3],[4,5,6]].sum(axis=0) = [5,7,9]
                for c in range(cols):
                    acc = initial
                    for r in range(rows):
                        acc = fn(r * cols + c, acc, m[r][c])
                    results.append(acc)
            else:
                # e.g. [[1,2,3],[4,5,6]].sum(axis=1) = [6,15]
                for r in range(rows):
                    acc = initial
                    for c in range(cols):
                        acc = fn(r * cols + c, acc, m[r][c])
                    results.append(acc)
            return _wrap(np.array(results, dtype=np.float64), (len(results),))

        raise ShapeMismatch(
            f"Folding is only supported along axis 0 of rank 1 tensors and axes 0 or 1 "
            f"of rank 2 tensors, got axis {axis} for shape {format_shape(self.shape)}"
        )

    def fold(self, initial: float, fn: Callable[[float, float], float], axis: int = 0) -> 'Tensor':
        """Fold along ``axis`` with ``fn(accumulator, value)``; see :meth:`fold_indexed`."""
        return self.fold_indexed(initial, lambda _, acc, value: fn(acc, value), axis)

    def sum(self, axis: int = 0) -> 'Tensor':
        return self.fold(0.0, operator.add, axis)

    def product(self, axis: int = 0) -> 'Tensor':
        return self.fold(1.0, operator.mul, axis)

    def max(self, axis: int = 0) -> 'Tensor':
        return self.fold(-math.inf, lambda acc, value: value if value > acc else acc, axis)

    def min(self, axis: int = 0) -> 'Tensor':
        return self.fold(math.inf, lambda acc, value: value if value < acc else acc, axis)

    def argmax(self, random: Optional[RandomSource] = None) -> int:
        """
        Flat row-major index of the largest scalar.

        Ties are broken uniformly at random, so an all-zero tensor may
        return any index.

        Args:
            random: Random source used only when several indices tie
        """
        best = -math.inf
        ties: List[int] = []
        for index, value in enumerate(self._core.flat().tolist()):
            if value > best:
                best = value
                ties = [index]
            elif value == best:
                ties.append(index)
        if not ties:
            # Every scalar is NaN.
            return 0
        if len(ties) == 1:
            return ties[0]
        return ties[resolve_random(random).randrange(len(ties))]

    def dot(self, other: 'BaseTensor') -> float:
        """Sum of the elementwise product of two equally shaped tensors."""
        if not isinstance(other, BaseTensor):
            raise TypeError(f"dot() expects a tensor, got {type(other).__name__}")
        self._check_same_shape(other)
        products = (self._core.flat() * other._core.flat()).tolist()
        return functools.reduce(operator.add, products, 0.0)

    # ------------------------------------------------------------------
    # Linear algebra
    # ------------------------------------------------------------------

    def transpose(self) -> 'Tensor':
        """
        Matrix transpose.

        ``[x]`` stays ``[x]``, a row of length n becomes an ``[n, 1]``
        column, an ``[n, 1]`` column becomes a row, and ``[r, c]`` becomes
        ``[c, r]``.
        """
        result = linalg.transpose(self._core.numpy())
        return _wrap(result.reshape(-1), result.shape)

    @property
    def T(self) -> 'Tensor':
        return self.transpose()

    def det(self) -> float:
        """Determinant of a square matrix; see :func:`strider.linalg.det`."""
        return float(linalg.det(self._core.numpy()))

    def inverse(self) -> 'Tensor':
        """Inverse of a square matrix; raises ``ShapeMismatch`` when singular."""
        result = linalg.inverse(self._core.numpy())
        return _wrap(result.reshape(-1), result.shape)

    def submatrix(self, row: int, col: int) -> 'Tensor':
        """Minor with ``row`` and ``col`` removed."""
        result = linalg.submatrix(self._core.numpy(), row, col)
        return _wrap(result.reshape(-1), result.shape)

    # ------------------------------------------------------------------
    # Reshaping
    # ------------------------------------------------------------------

    def flatten(self) -> 'Tensor':
        """Rank 1 tensor of all scalars in row-major order."""
        return _wrap(self._flat_snapshot(), (self.size,))

    def reshape(self, *shape: int) -> 'Tensor':
        """
        Same scalars, new shape.

        Raises:
            ShapeMismatch: If the element counts differ
        """
        new_shape = Shape.of(*shape)
        if new_shape.numel != self.size:
            raise ShapeMismatch(
                f"Cannot reshape {format_shape(self.shape)} to {format_shape(new_shape)}"
            )
        return _wrap(self._flat_snapshot(), new_shape)

    def shuffle(self, axis: Optional[int] = None, random: Optional[RandomSource] = None) -> 'Tensor':
        """
        Randomly permute the tensor.

        Args:
            axis: ``None`` permutes every scalar; ``0`` permutes the
                top-level sub-tensors; ``k > 0`` shuffles each sub-tensor
                along axis ``k - 1``
            random: Random source for the Fisher-Yates permutation

        Raises:
            ShapeMismatch: If ``axis`` is outside ``[0, ndim)``
        """
        rng = resolve_random(random)
        flat = self._core.flat()
        if axis is None:
            return _wrap(flat[permutation(self.size, rng)], self.shape)

        if isinstance(axis, bool) or not isinstance(axis, int):
            raise TypeError(f"axis must be an integer or None, got {axis!r}")
        if axis < 0 or axis >= self.ndim:
            raise ShapeMismatch(
                f"Axis {axis} is out of range for a {self.ndim}-dimensional tensor"
            )
        outer = math.prod(self.shape[:axis])
        blocks = flat.reshape(outer, self.shape[axis], -1)
        shuffled = np.empty_like(blocks)
        for o in range(outer):
            shuffled[o] = blocks[o, permutation(self.shape[axis], rng)]
        return _wrap(shuffled.reshape(-1), self.shape)

    def insert(self, index: int, value: Number) -> 'Tensor':
        """
        New row vector with ``value`` inserted before position ``index``.

        Raises:
            ShapeMismatch: If the tensor is not rank 1 or ``index`` is
                outside ``[0, len]``
        """
        if self.ndim != 1:
            raise ShapeMismatch("Only row tensors can insert values")
        n = self.shape[0]
        if index < 0 or index > n:
            raise ShapeMismatch(f"Insert position {index} is out of range for length {n}")
        return _wrap(np.insert(self._core.flat(), index, float(value)), (n + 1,))

    def append(self, value: Number) -> 'Tensor':
        """New row vector with ``value`` added at the end."""
        if self.ndim != 1:
            raise ShapeMismatch("Only row tensors can append values")
        return self.insert(self.shape[0], value)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def to_string(self, truncate=_DEFAULT) -> str:
        """
        Human-readable rendering; ``truncate=None`` prints every value.

        See :func:`strider.formatting.format_tensor`.
        """
        if truncate is _DEFAULT:
            return format_tensor(self._core.numpy())
        return format_tensor(self._core.numpy(), truncate)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()})"


class Tensor(BaseTensor):
    """
    Immutable N-dimensional tensor of float64 scalars.

    The backing buffer is read-only, so tensors are safe to share between
    threads and are hashable.
    """

    _FROZEN = True

    def __hash__(self) -> int:
        # ``+ 0.0`` folds -0.0 into 0.0 so equal tensors hash equally.
        return hash((tuple(self.shape), (self._core.flat() + 0.0).tobytes()))

    def copy(self) -> 'Tensor':
        return self.to_tensor()
