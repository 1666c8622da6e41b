import math
import pytest

from pressloop.core.plant import advance, analytic_response, steady_state


def run_to_seconds(p0: float, control: float, leak: float, dt: float, seconds: float,
                   gain: float = 40.0, tau: float = 5.0) -> float:
    steps = int(round(seconds / dt))
    P = p0
    for _ in range(steps):
        P = advance(P, control, leak, gain, tau, dt)
    return P


def test_single_euler_step():
    # dP/dt = (-100 + 40*0.5 - 2)/5 = -16.4
    assert advance(100.0, 0.5, 2.0, 40.0, 5.0, 0.1) == pytest.approx(100.0 - 1.64)


def test_steady_state_is_fixed_point():
    p_ss = steady_state(0.75, 3.0, 40.0)
    assert p_ss == pytest.approx(27.0)
    assert advance(p_ss, 0.75, 3.0, 40.0, 5.0, 0.1) == pytest.approx(p_ss)


@pytest.mark.parametrize("control,leak", [
    (0.5, 2.0),
    (1.0, 0.0),
    (0.0, 10.0),
])
def test_converges_to_analytic_solution(control: float, leak: float):
    exact = analytic_response(100.0, control, leak, 40.0, 5.0, 10.0)
    errors = [abs(run_to_seconds(100.0, control, leak, dt, 10.0) - exact)
              for dt in (0.1, 0.01, 0.001)]
    assert errors[0] > errors[1] > errors[2]
    assert errors[2] < 0.01


def test_no_bounds_enforced():
    P = run_to_seconds(0.0, 0.0, 50.0, 0.1, 60.0)
    assert P < -49.0
    assert math.isfinite(P)


def test_nan_propagates():
    assert math.isnan(advance(100.0, math.nan, 0.0, 40.0, 5.0, 0.1))
