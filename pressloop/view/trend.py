from __future__ import annotations

"""
Bounded rolling series for plotting.

Keeps the last ``max_points`` StepOutput samples per signal; the oldest
sample is dropped first.
"""

from collections import deque

import numpy as np

from ..core.simulation import StepOutput

SIGNALS = ("t", "pressure", "measurement", "error", "control", "leak", "setpoint")


class TrendBuffer:
    def __init__(self, max_points: int = 20000) -> None:
        self.max_points = int(max_points)
        self.series: dict[str, deque] = {k: deque(maxlen=self.max_points) for k in SIGNALS}

    def __len__(self) -> int:
        return len(self.series["t"])

    def __call__(self, out: StepOutput) -> None:
        self.append(out)

    def append(self, out: StepOutput) -> None:
        for k in SIGNALS:
            self.series[k].append(getattr(out, k))

    def clear(self) -> None:
        for d in self.series.values():
            d.clear()

    def array(self, name: str) -> np.ndarray:
        return np.asarray(self.series[name], dtype=float)

    def arrays(self) -> dict[str, np.ndarray]:
        return {k: self.array(k) for k in SIGNALS}
