"""Core storage and shape infrastructure for strider."""

from .storage import (
    Shape,
    Storage,
    TensorCore,
    core_from_buffer,
    core_from_numpy,
    format_shape,
)

__all__ = [
    'Shape',
    'Storage',
    'TensorCore',
    'core_from_buffer',
    'core_from_numpy',
    'format_shape',
]
