from __future__ import annotations

"""
Operator-triggered leak disturbance.

The leak subtracts from the plant input at a fixed rate [PSI/s] until its
duration has elapsed or it is cleared.
"""

import math
from dataclasses import dataclass

from .clock import reached


@dataclass
class LeakDisturbance:
    rate: float = 0.0       # active leak [PSI/s]
    duration: float = 0.0   # [s]
    elapsed: float = 0.0    # [s] since apply()

    def reset(self) -> None:
        self.rate = 0.0
        self.duration = 0.0
        self.elapsed = 0.0

    @property
    def active(self) -> bool:
        return self.rate > 0.0

    def apply(self, rate, duration) -> bool:
        """Start a leak. Negative or non-numeric rates are ignored (returns False)."""
        try:
            r = float(rate)
        except (TypeError, ValueError):
            return False
        if math.isnan(r) or r < 0.0:
            return False
        try:
            d = float(duration)
        except (TypeError, ValueError):
            d = math.nan
        self.rate = r
        self.duration = d
        self.elapsed = 0.0
        return True

    def clear(self) -> None:
        self.rate = 0.0

    def tick(self, dt: float) -> None:
        if self.rate > 0.0:
            self.elapsed += dt
            if reached(self.elapsed, self.duration):
                self.rate = 0.0
                self.elapsed = 0.0
