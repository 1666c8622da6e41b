"""
Discrete-time closed loop: noisy sensor -> PI controller -> pressure plant.

One call to ``PressureLoop.step(params)`` is one tick:

    f = P + noise(sigma)
    u = PI(setpoint, f)                 (integral updated in place)
    P = P + dt * (-P + K*u - leak)/tau  (leak held at start of tick)
    leak timer ticks
    t += dt

The loop holds no parameters of its own; every tick works from the snapshot
it is given.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field

from .clock import SimulationClock
from .controller import ControllerState, PIController
from .disturbance import LeakDisturbance
from .noise import NoiseSource, shared_source
from .params import SimulationParameters
from .plant import advance


@dataclass(frozen=True)
class StepOutput:
    t: float
    pressure: float
    measurement: float
    error: float
    control: float
    leak: float
    setpoint: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class PlantState:
    pressure: float = 0.0


@dataclass
class PressureLoop:
    noise: NoiseSource = field(default_factory=shared_source)
    controller: PIController = field(default_factory=PIController)
    clock: SimulationClock = field(default_factory=SimulationClock)
    ctrl: ControllerState = field(default_factory=ControllerState)
    plant: PlantState = field(default_factory=PlantState)
    leak: LeakDisturbance = field(default_factory=LeakDisturbance)
    control: float = 0.0

    def reset(self, p0: float) -> None:
        self.clock.reset()
        self.ctrl.reset()
        self.plant.pressure = p0
        self.leak.reset()
        self.control = 0.0

    def step(self, p: SimulationParameters) -> StepOutput:
        dt = p.dt
        measurement = self.plant.pressure + self.noise.sample(p.noise_sigma)
        error = p.setpoint - measurement

        u = self.controller.step(p.setpoint, measurement, self.ctrl, p.kp, p.ki, dt)
        self.control = u

        leak_now = self.leak.rate
        self.plant.pressure = advance(
            self.plant.pressure, u, leak_now, p.plant_gain, p.plant_tau, dt
        )
        self.leak.tick(dt)
        t = self.clock.advance(dt)

        return StepOutput(
            t=t,
            pressure=self.plant.pressure,
            measurement=measurement,
            error=error,
            control=u,
            leak=leak_now,
            setpoint=p.setpoint,
        )

    def finished(self, p: SimulationParameters) -> bool:
        return self.clock.reached(p.total_time)
