from __future__ import annotations

from dataclasses import dataclass


def reached(value: float, limit: float) -> bool:
    """value >= limit, tolerating the rounding of repeated dt additions.

    Thirty additions of 0.1 land just below 3.0.
    """
    return value >= limit or abs(value - limit) <= 1e-9 * max(1.0, abs(limit))


@dataclass
class SimulationClock:
    t: float = 0.0

    def reset(self) -> None:
        self.t = 0.0

    def advance(self, dt: float) -> float:
        self.t += dt
        return self.t

    def reached(self, horizon: float) -> bool:
        return reached(self.t, horizon)
