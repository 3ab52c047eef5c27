"""Random number generation utilities for the grid world learner."""

import numpy as np
from typing import Optional


class SeededRNG:
    """
    Seedable randomness provider.

    Each grid and engine draws from the instance it was given, so two runs
    built from the same seed make identical decisions.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return float(self._generator.random())

    def randint(self, a: int, b: int) -> int:
        """Generate random integer in [a, b]."""
        return int(self._generator.integers(a, b + 1))

    def randrange(self, stop: int) -> int:
        """Generate random integer in [0, stop)."""
        return int(self._generator.integers(0, stop))

    def uniform_array(self, shape) -> np.ndarray:
        """Array of floats drawn uniformly from [0, 1)."""
        return self._generator.random(shape)

    def spawn_seed(self) -> int:
        """Draw a seed for an independent child generator."""
        return int(self._generator.integers(0, 2**31 - 1))
