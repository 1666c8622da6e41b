#!/usr/bin/env python3
"""
Scenario runner: drives an in-process Session from a YAML plan.

Plan YAML example:

sim: { setpoint: 30, kp: 0.1, ki: 0.05, dt: 0.1, total_time: 60, p0: 100 }
seed: 1
steps:
  - run: { seconds: 20 }
  - leak: { rate: 10, duration: 5 }
  - run: { seconds: 5 }
  - assert: { field: leak, equals: 10 }
  - run: { seconds: 25 }
  - assert: { field: pressure, min: 28, max: 32 }
  - set: { setpoint: 25 }
  - clear_leak: {}
  - reset: {}

`run` starts a fresh session when it is idle and ticks synchronously; the
session's own total_time stop still applies. Starting clears any leak
applied before the first `run`. `assert` reads StepOutput fields of the
last tick first, then Session.snapshot() keys (integral, leak_rate, ...).
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict

from pressloop.core import ConfigError, NoiseSource, SimulationParameters
from pressloop.core.clock import reached
from pressloop.core.params import load_config
from pressloop.logic import Session, SessionCmd, RunState


class ScenarioError(AssertionError):
    pass


def build_session(plan: Dict[str, Any], verbose: bool = False) -> Session:
    params = SimulationParameters.from_yaml(plan.get("sim"))
    seed = plan.get("seed")
    return Session(
        params,
        noise=NoiseSource(seed=None if seed is None else int(seed)),
        verbose=verbose,
    )


def _observed(session: Session, field: str) -> float:
    if session.last is not None:
        rec = session.last.as_dict()
        if field in rec:
            return float(rec[field])
    snap = session.snapshot()
    if field not in snap:
        raise ValueError(f"unknown field: {field}")
    return float(snap[field])


def _run_for(session: Session, seconds: float) -> None:
    if session.state is RunState.IDLE:
        # Stopped runs are not resumed; only a fresh (or reset) session starts
        if session.loop.clock.t > 0.0:
            return
        session.start(background=False)
    stop_at = session.loop.clock.t + seconds
    while session.running and not reached(session.loop.clock.t, stop_at):
        if session.tick() is None:
            break


def run_step(session: Session, step: Dict[str, Any]) -> None:
    if "set" in step:
        session.update_params(**{k: float(v) for k, v in (step["set"] or {}).items()})
        return
    if "leak" in step:
        lk = step["leak"] or {}
        session.dispatch(SessionCmd.APPLY_LEAK, rate=lk.get("rate"), duration=lk.get("duration"))
        return
    if "clear_leak" in step:
        session.dispatch(SessionCmd.CLEAR_LEAK)
        return
    if "reset" in step:
        session.dispatch(SessionCmd.RESET)
        return
    if "stop" in step:
        session.dispatch(SessionCmd.STOP)
        return
    if "run" in step:
        _run_for(session, float((step["run"] or {}).get("seconds", 0.0)))
        return
    if "assert" in step:
        a = step["assert"]
        field = a["field"]
        val = _observed(session, field)
        if "equals" in a and not abs(val - float(a["equals"])) <= float(a.get("tol", 1e-9)):
            raise ScenarioError(f"assert equals failed: {field}={val} != {a['equals']}")
        if "min" in a and not val >= float(a["min"]):
            raise ScenarioError(f"assert min failed: {field}={val} < {a['min']}")
        if "max" in a and not val <= float(a["max"]):
            raise ScenarioError(f"assert max failed: {field}={val} > {a['max']}")
        return
    raise ValueError(f"Unknown step: {step}")


def run_plan(plan: Dict[str, Any], verbose: bool = False) -> Session:
    session = build_session(plan, verbose=verbose)
    steps = plan.get("steps") or []
    for i, step in enumerate(steps, 1):
        if verbose:
            print(f"[runner] step {i}: {list(step.keys())[0]}")
        run_step(session, step)
    return session


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run a pressloop scenario plan")
    ap.add_argument("--plan", required=True, help="YAML plan path")
    ap.add_argument("--verbose", action="store_true", help="Print each step")
    args = ap.parse_args(argv)
    try:
        plan = load_config(args.plan)
    except FileNotFoundError:
        print(f"[runner] config not found: {args.plan}")
        return 2
    except ConfigError as e:
        print(f"[runner] config error: {e}")
        return 2

    steps = plan.get("steps") or []
    print(f"[runner] steps={len(steps)} plan={args.plan}")
    try:
        run_plan(plan, verbose=args.verbose)
    except ScenarioError as e:
        print(f"[runner] FAILED: {e}")
        return 1
    except (ConfigError, ValueError, TypeError, KeyError) as e:
        # bad sim values, unknown steps or malformed step bodies
        print(f"[runner] config error: {e}")
        return 2
    print("[runner] completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
