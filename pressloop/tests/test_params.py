import math

import pytest

from pressloop.core import ConfigError, SimulationParameters, load_params


def test_defaults_match_process_sheet():
    p = SimulationParameters()
    assert (p.setpoint, p.kp, p.ki, p.dt, p.total_time, p.p0) == (120.0, 0.1, 0.05, 0.1, 50.0, 100.0)
    assert (p.plant_gain, p.plant_tau) == (40.0, 5.0)
    assert p.problems() == []


def test_from_yaml_converts_numbers():
    p = SimulationParameters.from_yaml({"setpoint": "125", "kp": 1})
    assert p.setpoint == 125.0
    assert p.kp == 1.0
    assert p.ki == 0.05


@pytest.mark.parametrize("data", [
    {"kp": "fast"},
    {"kp": None},
    {"unknown": 1.0},
    ["kp", 1.0],
])
def test_from_yaml_rejects(data):
    with pytest.raises(ConfigError):
        SimulationParameters.from_yaml(data)


@pytest.mark.parametrize("field,value", [
    ("kp", -0.1),
    ("ki", -1.0),
    ("noise_sigma", -0.5),
    ("dt", 0.0),
    ("total_time", -5.0),
    ("plant_tau", 0.0),
    ("dt", math.nan),
])
def test_problems(field, value):
    p = SimulationParameters().with_changes(**{field: value})
    msgs = p.problems()
    assert len(msgs) == 1
    assert msgs[0].startswith(field)


def test_load_params(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text("sim:\n  setpoint: 118\n  noise_sigma: 0.2\n", encoding="utf-8")
    p = load_params(path)
    assert p.setpoint == 118.0
    assert p.noise_sigma == 0.2


def test_load_params_needs_mapping(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_params(path)
