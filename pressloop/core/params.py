from __future__ import annotations

"""
Simulation parameters read by the loop on every tick.

The session takes one snapshot per tick, so an edit made between ticks is
seen by the next tick and never half-way through one.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml


class ConfigError(ValueError):
    """Raised when a parameter file or mapping cannot be turned into numbers."""


@dataclass
class SimulationParameters:
    setpoint: float = 120.0     # target pressure [PSI]
    kp: float = 0.1             # proportional gain
    ki: float = 0.05            # integral gain
    noise_sigma: float = 0.0    # sensor noise std-dev [PSI]
    dt: float = 0.1             # integration step [s]
    total_time: float = 50.0    # simulation horizon [s]
    p0: float = 100.0           # initial pressure [PSI]
    # Fixed plant constants
    plant_gain: float = 40.0
    plant_tau: float = 5.0

    @classmethod
    def from_yaml(cls, data: dict | None) -> "SimulationParameters":
        d = data or {}
        if not isinstance(d, dict):
            raise ConfigError(f"expected a mapping of parameters, got {type(d).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(f"unknown parameter(s): {', '.join(unknown)}")
        values = {}
        for name, raw in d.items():
            try:
                values[name] = float(raw)
            except (TypeError, ValueError):
                raise ConfigError(f"parameter '{name}' is not numeric: {raw!r}") from None
        return cls(**values)

    def with_changes(self, **changes) -> "SimulationParameters":
        return replace(self, **changes)

    def problems(self) -> list[str]:
        """List out-of-domain values. The loop itself never checks these."""
        out: list[str] = []
        if not self.kp >= 0.0:
            out.append(f"kp must be >= 0 (got {self.kp})")
        if not self.ki >= 0.0:
            out.append(f"ki must be >= 0 (got {self.ki})")
        if not self.noise_sigma >= 0.0:
            out.append(f"noise_sigma must be >= 0 (got {self.noise_sigma})")
        if not self.dt > 0.0:
            out.append(f"dt must be > 0 (got {self.dt})")
        if not self.total_time > 0.0:
            out.append(f"total_time must be > 0 (got {self.total_time})")
        if not self.plant_tau > 0.0:
            out.append(f"plant_tau must be > 0 (got {self.plant_tau})")
        return out


def load_config(path: str | Path) -> dict:
    """Read a pressloop YAML file and return its top-level mapping."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def load_params(path: str | Path) -> SimulationParameters:
    data = load_config(path)
    return SimulationParameters.from_yaml(data.get("sim"))
