from __future__ import annotations

"""
PI controller with clamp-style anti-windup.

Output is a valve command u in [0, 1]. The integrator is frozen while the
actuator is saturated in the direction the error pushes, and its per-step
change is limited to +/- 0.5*dt whatever the gains are.
"""

import math
from dataclasses import dataclass


def clamp(v: float, lo: float, hi: float) -> float:
    # NaN passes through
    if math.isnan(v):
        return v
    return max(lo, min(hi, v))


@dataclass
class ControllerState:
    integral: float = 0.0

    def reset(self) -> None:
        self.integral = 0.0


class PIController:
    u_min = 0.0
    u_max = 1.0
    rate_limit = 0.5            # max |dI| per second of simulated time

    def saturate(self, u: float) -> float:
        return clamp(u, self.u_min, self.u_max)

    def windup_blocked(self, u_sat: float, error: float) -> bool:
        return (u_sat == self.u_max and error > 0) or (u_sat == self.u_min and error < 0)

    def step(self, setpoint: float, measurement: float, state: ControllerState,
             kp: float, ki: float, dt: float) -> float:
        """Return the saturated control and update ``state.integral`` in place.

        The saturation test uses the integral from before this step; the
        returned control uses the integral after it.
        """
        error = setpoint - measurement

        u_sat = self.saturate(kp * error + ki * state.integral)

        if not self.windup_blocked(u_sat, error):
            max_di = self.rate_limit * dt
            state.integral += clamp(error * dt, -max_di, max_di)

        return self.saturate(kp * error + ki * state.integral)
