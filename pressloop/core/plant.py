"""
First-order pressure lag.

    dP/dt = (-P + gain*u - leak) / tau

Integrated with forward Euler. No clamping here; saturation lives in the
controller and the display band lives in the view layer.
"""

import math


def advance(pressure: float, control: float, leak_rate: float,
            gain: float, tau: float, dt: float) -> float:
    dPdt = (-pressure + gain * control - leak_rate) / tau
    return pressure + dt * dPdt


def steady_state(control: float, leak_rate: float, gain: float) -> float:
    return gain * control - leak_rate


def analytic_response(p0: float, control: float, leak_rate: float,
                      gain: float, tau: float, t: float) -> float:
    """Exact solution for constant control and leak, used to check the Euler step."""
    p_ss = steady_state(control, leak_rate, gain)
    return p_ss + (p0 - p_ss) * math.exp(-t / tau)
