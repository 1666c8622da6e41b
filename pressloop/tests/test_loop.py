from __future__ import annotations

import math
import pytest

from pressloop.core import NoiseSource, PressureLoop, SimulationParameters
from pressloop.logic import Session

# Noiseless case from the process sheet: setpoint above the plant's reach
SHEET = SimulationParameters(
    setpoint=120.0, kp=0.1, ki=0.05, noise_sigma=0.0,
    dt=0.1, total_time=50.0, p0=100.0, plant_gain=40.0, plant_tau=5.0,
)
# Same loop with a setpoint the plant can hold (gain*u <= 40 PSI)
REACHABLE = SHEET.with_changes(setpoint=30.0)


def collect(params: SimulationParameters, leak_at: float | None = None,
            rate: float = 10.0, duration: float = 5.0) -> list:
    outs = []
    session: Session | None = None

    def sink(out):
        outs.append(out)
        if leak_at is not None and abs(out.t - leak_at) < params.dt / 2:
            session.apply_leak(rate, duration)

    session = Session(params, sink=sink, noise=NoiseSource(seed=0))
    session.run()
    return outs


def test_tick_order_and_record():
    loop = PressureLoop(noise=NoiseSource(seed=0))
    loop.reset(100.0)
    loop.leak.apply(10.0, 0.1)
    out = loop.step(SHEET)
    # measurement is noiseless; controller saw P=100 before the plant moved
    assert out.measurement == 100.0
    assert out.error == pytest.approx(20.0)
    assert out.control == 1.0
    assert out.leak == 10.0
    assert out.pressure == pytest.approx(100.0 + 0.1 * (-100.0 + 40.0 - 10.0) / 5.0)
    assert out.t == pytest.approx(0.1)
    assert out.setpoint == 120.0
    # leak expired at the end of the tick it was active in
    assert loop.leak.rate == 0.0


def test_run_stops_at_total_time():
    outs = collect(SHEET)
    assert len(outs) == 500
    assert outs[-1].t == pytest.approx(50.0)


def test_unreachable_setpoint_saturates_without_windup():
    session = Session(SHEET, noise=NoiseSource(seed=0))
    session.run()
    snap = session.snapshot()
    assert session.last.control == 1.0
    assert snap["integral"] == 0.0
    # plant settles at gain * 1
    assert snap["pressure"] == pytest.approx(40.0, abs=0.1)


def test_reachable_setpoint_tracks():
    outs = collect(REACHABLE)
    assert all(0.0 <= o.control <= 1.0 for o in outs)
    assert abs(outs[-1].pressure - 30.0) < 1.0


def test_leak_dips_then_recovers():
    outs = collect(REACHABLE, leak_at=20.0)
    # tick end times drift off the dt grid, so split on half-tick boundaries
    half = REACHABLE.dt / 2
    before = next(o for o in outs if o.t == pytest.approx(20.0))
    window = [o for o in outs if 20.0 + half < o.t <= 25.0 + half]
    after = [o for o in outs if o.t > 25.0 + half]

    assert len(window) == 50
    assert before.leak == 0.0

    assert all(o.leak == 10.0 for o in window)
    assert all(o.leak == 0.0 for o in after)
    assert min(o.pressure for o in window) < before.pressure
    assert max(o.control for o in window) > before.control
    assert abs(outs[-1].pressure - 30.0) < 1.0


def test_parameter_edits_apply_next_tick():
    seen = []
    session: Session | None = None

    def sink(out):
        seen.append(out.setpoint)
        if len(seen) == 3:
            session.update_params(setpoint=55.0)

    session = Session(SHEET.with_changes(total_time=1.0), sink=sink, noise=NoiseSource(seed=0))
    session.run()
    assert seen[:3] == [120.0, 120.0, 120.0]
    assert seen[3:] == [55.0] * (len(seen) - 3)


def test_source_is_polled_every_tick():
    calls = []

    def source():
        calls.append(1)
        return SHEET.with_changes(total_time=0.5)

    session = Session(source=source, noise=NoiseSource(seed=0))
    n_init = len(calls)
    assert session.run() == 5
    assert len(calls) - n_init >= 5


def test_nan_parameters_propagate_without_crash():
    session = Session(REACHABLE.with_changes(kp=math.nan, total_time=1.0), noise=NoiseSource(seed=0))
    assert session.run() == 10
    assert math.isnan(session.last.pressure)
    assert math.isnan(session.last.control)


def test_noisy_measurement_differs_from_pressure():
    session = Session(REACHABLE.with_changes(noise_sigma=1.0, total_time=1.0), noise=NoiseSource(seed=5))
    session.run()
    assert session.last.measurement != session.last.pressure
