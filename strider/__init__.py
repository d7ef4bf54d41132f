"""
strider: Strided N-dimensional Tensors
======================================

strider is a small tensor library for float64 data: an immutable
``Tensor`` value type, a ``MutableTensor`` for algorithms that update
state in place, exact small-matrix linear algebra, and matrix
multiplication through a replaceable backend.

Example:
    >>> import strider as st
    >>> w = st.tensor([[1.0, 2.0], [3.0, 4.0]])
    >>> w.inverse() @ w
    Tensor([[1.0, 0.0]
    [0.0, 1.0]])
    >>> q = st.zeros(4, 2).to_mutable()
    >>> q[2, 1] = 0.5
    >>> q.argmax()
    5
"""

__version__ = "0.1.0"

# Core types
from .tensor import BaseTensor, Tensor
from .mutable import MutableTensor
from .errors import ShapeMismatch

# Matrix multiplication
from .matmul import matmul
from .backends import (
    MatMulBackend,
    ReferenceBackend,
    BlasBackend,
    available_backends,
    get_backend,
    register_backend,
)

# Configuration and collaborator protocols
from .config import DisplayOptions, display_options, get_display_options, set_display_options
from .sampling import DistributionSampler, RandomSource

# Low-level core (for advanced users)
from .core import Shape, Storage, TensorCore


# Factory functions
tensor = Tensor
zeros = Tensor.zeros
rand = Tensor.random
generate = Tensor.generate
sample = Tensor.sample
stack = Tensor.stack
from_numpy = Tensor.from_numpy


__all__ = [
    # Version
    "__version__",

    # Main classes
    "BaseTensor",
    "Tensor",
    "MutableTensor",
    "ShapeMismatch",

    # Factory functions
    "tensor",
    "zeros",
    "rand",
    "generate",
    "sample",
    "stack",
    "from_numpy",

    # Matrix multiplication
    "matmul",
    "MatMulBackend",
    "ReferenceBackend",
    "BlasBackend",
    "available_backends",
    "get_backend",
    "register_backend",

    # Configuration and protocols
    "DisplayOptions",
    "display_options",
    "get_display_options",
    "set_display_options",
    "DistributionSampler",
    "RandomSource",

    # Core types (advanced)
    "Shape",
    "Storage",
    "TensorCore",
]
