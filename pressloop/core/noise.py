from __future__ import annotations

"""
Gaussian sensor noise.

Box-Muller transform on uniforms drawn from a numpy Generator. A draw of
exactly 0.0 is rejected before it reaches the logarithm.
"""

import math

import numpy as np


class NoiseSource:
    def __init__(self, seed: int | None = None, rng=None) -> None:
        # rng only needs a .random() returning a float in [0, 1)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def _uniform(self) -> float:
        u = 0.0
        while u == 0.0:
            u = float(self.rng.random())
        return u

    def sample(self, sigma: float = 1.0) -> float:
        u = self._uniform()
        v = self._uniform()
        z = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
        return z * sigma


_shared = NoiseSource()


def shared_source() -> NoiseSource:
    """Process-wide source; loops and sessions built without one draw from it."""
    return _shared


def sample(sigma: float = 1.0) -> float:
    """Draw from the process-wide noise source."""
    return _shared.sample(sigma)
