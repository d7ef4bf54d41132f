"""Randomness capabilities consumed from callers.

strider never owns a global random state. Operations that need randomness
(uniform factories, ``argmax`` tie-breaking, ``shuffle``) take a
``RandomSource`` argument; ``random.Random`` satisfies the protocol, so a
seeded instance makes results reproducible.
"""

from __future__ import annotations
import random as _random
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        """Uniform float in [0, 1)."""
        ...

    def randrange(self, stop: int) -> int:
        """Uniform int in [0, stop)."""
        ...


@runtime_checkable
class DistributionSampler(Protocol):
    def sample(self) -> float:
        """Draw one value from the distribution."""
        ...


def resolve_random(random: Optional[RandomSource]) -> RandomSource:
    """Return ``random``, or a fresh unseeded generator when none is given."""
    if random is None:
        return _random.Random()
    return random


def permutation(n: int, random: RandomSource) -> list:
    """Fisher-Yates permutation of ``range(n)`` drawn from ``random``."""
    order = list(range(n))
    for i in range(n - 1, 0, -1):
        j = random.randrange(i + 1)
        order[i], order[j] = order[j], order[i]
    return order
