"""Core simulation models for the pressure loop.

Exports:
- SimulationParameters / load_params: per-tick parameter snapshot
- PIController / ControllerState: clamp anti-windup PI law
- advance: first-order plant Euler step
- LeakDisturbance: timed leak event
- SimulationClock, NoiseSource
- PressureLoop / StepOutput: one tick of the closed loop
"""

from .params import SimulationParameters, ConfigError, load_params  # re-export
from .noise import NoiseSource  # re-export
from .plant import advance, steady_state, analytic_response  # re-export
from .controller import PIController, ControllerState, clamp  # re-export
from .disturbance import LeakDisturbance  # re-export
from .clock import SimulationClock, reached  # re-export
from .simulation import PressureLoop, StepOutput  # re-export

__all__ = [
    "SimulationParameters",
    "ConfigError",
    "load_params",
    "NoiseSource",
    "advance",
    "steady_state",
    "analytic_response",
    "PIController",
    "ControllerState",
    "clamp",
    "LeakDisturbance",
    "SimulationClock",
    "reached",
    "PressureLoop",
    "StepOutput",
]
