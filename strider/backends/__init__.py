"""
Pluggable matrix-multiply backends.

``reference`` is pure Python and always present. ``blas`` calls SciPy's
BLAS ``dgemm``. ``torch`` runs on a torch device and is imported only when
first requested. Host applications pick a backend explicitly and pass it to
:func:`strider.matmul.matmul`; there is no process-wide "current" backend.

Example:
    >>> from strider.backends import get_backend
    >>> blas = get_backend("blas")
    >>> c = a.matmul(b, backend=blas)
"""

from __future__ import annotations
import importlib
import importlib.util
import logging
from threading import RLock
from typing import Callable, Dict, List

from .base import MatMulBackend
from .blas import BlasBackend
from .reference import ReferenceBackend

logger = logging.getLogger(__name__)

REFERENCE = ReferenceBackend()


def _torch_backend() -> MatMulBackend:
    if importlib.util.find_spec("torch") is None:
        raise RuntimeError(
            "torch is not installed. Install it with: pip install strider[torch]\n"
            "See: https://pytorch.org/get-started/locally/"
        )
    module = importlib.import_module(".torch_backend", __name__)
    return module.TorchBackend()


_FACTORIES: Dict[str, Callable[[], MatMulBackend]] = {
    "reference": lambda: REFERENCE,
    "blas": BlasBackend,
    "torch": _torch_backend,
}
_INSTANCES: Dict[str, MatMulBackend] = {}
_LOCK = RLock()


def register_backend(name: str, factory: Callable[[], MatMulBackend]) -> None:
    """Register (or replace) a backend factory under ``name``."""
    with _LOCK:
        _FACTORIES[name] = factory
        _INSTANCES.pop(name, None)


def get_backend(name: str) -> MatMulBackend:
    """
    Return the backend registered under ``name``, creating it on first use.

    Raises:
        KeyError: If no backend has that name
        RuntimeError: If the backend's library is not installed
    """
    with _LOCK:
        cached = _INSTANCES.get(name)
        if cached is not None:
            return cached
        try:
            factory = _FACTORIES[name]
        except KeyError:
            raise KeyError(
                f"Unknown matmul backend '{name}'. Available: {', '.join(sorted(_FACTORIES))}"
            ) from None
        backend = factory()
        _INSTANCES[name] = backend
        logger.debug("Created matmul backend %r", backend)
        return backend


def available_backends() -> List[str]:
    """Names of registered backends whose libraries can be imported."""
    names = []
    for name in sorted(_FACTORIES):
        if name == "torch" and importlib.util.find_spec("torch") is None:
            continue
        names.append(name)
    return names


__all__ = [
    "MatMulBackend",
    "ReferenceBackend",
    "BlasBackend",
    "REFERENCE",
    "available_backends",
    "get_backend",
    "register_backend",
]
