"""Process-wide display settings."""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, Optional

_UNSET = object()


@dataclass(frozen=True)
class DisplayOptions:
    """
    Controls how tensors render with ``str()``.

    Attributes:
        truncate: Longest axis printed in full. Longer axes show their
            first ``truncate - 1`` entries, ``...`` and the last entry.
            ``None`` disables truncation.
    """
    truncate: Optional[int] = 10

    def __post_init__(self):
        if self.truncate is not None and self.truncate < 2:
            raise ValueError(f"truncate must be at least 2 or None, got {self.truncate}")


_options = DisplayOptions()


def get_display_options() -> DisplayOptions:
    return _options


def set_display_options(truncate=_UNSET) -> DisplayOptions:
    """
    Update the default display options.

    Args:
        truncate: New truncation limit, or ``None`` to print everything

    Returns:
        The previous options, so callers can restore them.
    """
    global _options

    previous = _options
    if truncate is not _UNSET:
        _options = replace(_options, truncate=truncate)
    return previous


@contextmanager
def display_options(**kwargs) -> Iterator[DisplayOptions]:
    """Temporarily override display options inside a ``with`` block."""
    global _options

    previous = set_display_options(**kwargs)
    try:
        yield _options
    finally:
        _options = previous
