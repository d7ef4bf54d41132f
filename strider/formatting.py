"""Human-readable tensor rendering. Diagnostic only, never parsed back."""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from .config import get_display_options

_DEFAULT = object()


def _truncated(items: List[str], truncate: Optional[int]) -> List[str]:
    if truncate is None or len(items) <= truncate:
        return items
    return items[:truncate - 1] + ["..."] + items[-1:]


def _render(values: np.ndarray, truncate: Optional[int]) -> str:
    if values.ndim == 1:
        items = [repr(float(v)) for v in values]
        return "[" + ", ".join(_truncated(items, truncate)) + "]"
    # Only the kept children are rendered.
    n = values.shape[0]
    if truncate is None or n <= truncate:
        rows = [_render(child, truncate) for child in values]
    else:
        head = [_render(values[i], truncate) for i in range(truncate - 1)]
        rows = head + ["...", _render(values[n - 1], truncate)]
    return "[" + "\n".join(rows) + "]"


def format_tensor(values: np.ndarray, truncate=_DEFAULT) -> str:
    """
    Render ``values`` as nested brackets.

    Rank-1 tensors render as ``[1.0, 2.0]``; higher ranks join their
    children with newlines. Any axis longer than ``truncate`` shows its first
    ``truncate - 1`` entries, ``...``, and its last entry.

    Args:
        values: Array shaped like the tensor
        truncate: Axis length limit; defaults to the configured display
            option, ``None`` disables truncation

    Example:
        >>> format_tensor(np.arange(1.0, 13.0), truncate=10)
        '[1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, ..., 12.0]'
    """
    if truncate is _DEFAULT:
        truncate = get_display_options().truncate
    return _render(values, truncate)
