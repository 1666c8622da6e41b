from __future__ import annotations

"""
Operating band indicator for the pressure trend.

Display-only: the simulation never clamps pressure to the band.
"""

import math
from dataclasses import dataclass

from ..core.params import ConfigError


@dataclass
class BandThresholds:
    low: float = 115.0
    high: float = 130.0


class BandMonitor:
    def __init__(self, th: BandThresholds | None = None) -> None:
        self.th = th or BandThresholds()
        self.inside = 0
        self.total = 0

    @classmethod
    def from_yaml(cls, data: dict | None) -> "BandMonitor":
        d = data or {}
        if not isinstance(d, dict):
            raise ConfigError(f"band: expected a mapping with low/high, got {type(d).__name__}")
        try:
            th = BandThresholds(
                low=float(d.get("low", 115.0)),
                high=float(d.get("high", 130.0)),
            )
        except (TypeError, ValueError):
            raise ConfigError(f"band: low/high must be numeric: {d!r}") from None
        return cls(th)

    def in_band(self, pressure: float) -> bool:
        return self.th.low <= pressure <= self.th.high

    def evaluate(self, pressure: float) -> str:
        """Return 'IN', 'LOW', 'HIGH' or 'NAN' and update the running tally."""
        self.total += 1
        if math.isnan(pressure):
            return "NAN"
        if pressure < self.th.low:
            return "LOW"
        if pressure > self.th.high:
            return "HIGH"
        self.inside += 1
        return "IN"

    @property
    def fraction_inside(self) -> float:
        return self.inside / self.total if self.total else 0.0
