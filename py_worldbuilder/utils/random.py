"""
Random number sources for procedural sampling.

Every sampling routine takes its random source as an argument instead of
reaching for a module-level generator. Production callers pass an unseeded
generator; tests pass a seeded one to get exact, repeatable output.
"""

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in [0, 1)."""

    def random(self) -> float:
        ...


def make_random_source(seed: Optional[int] = None) -> np.random.Generator:
    """
    Create a random source.

    Args:
        seed: Optional integer seed. ``None`` draws fresh OS entropy.

    Returns:
        NumPy Generator usable as a RandomSource
    """
    return np.random.default_rng(seed)


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw a float uniformly from [low, high)."""
    return low + float(rng.random()) * (high - low)
