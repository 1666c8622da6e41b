#!/usr/bin/env python3
"""
Console loop that runs the pressure PI simulator and prints the trend as CSV.

Example:
  python -m pressloop.cli.run --setpoint 30 --kp 0.1 --ki 0.05 --dt 0.1 --seconds 50
  python -m pressloop.cli.run --config config/pressloop.yaml --leak 10 5 20 --realtime
"""

from __future__ import annotations

import argparse
import sys

from pressloop.core import ConfigError, NoiseSource, SimulationParameters
from pressloop.core.clock import reached
from pressloop.core.params import load_config
from pressloop.logic import Session
from pressloop.view import BandMonitor, TrendBuffer

# argparse dest -> SimulationParameters field
_OVERRIDES = {
    "setpoint": "setpoint",
    "kp": "kp",
    "ki": "ki",
    "sigma": "noise_sigma",
    "dt": "dt",
    "seconds": "total_time",
    "p0": "p0",
}


def parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the PI pressure-loop simulator")
    p.add_argument("--config", type=str, default="", help="YAML config path (sim/band/trend sections)")
    p.add_argument("--setpoint", type=float, default=None, help="Pressure setpoint (PSI)")
    p.add_argument("--kp", type=float, default=None, help="Proportional gain")
    p.add_argument("--ki", type=float, default=None, help="Integral gain")
    p.add_argument("--sigma", type=float, default=None, help="Sensor noise std-dev (PSI)")
    p.add_argument("--dt", type=float, default=None, help="Step time (s)")
    p.add_argument("--seconds", type=float, default=None, help="Total simulated seconds")
    p.add_argument("--p0", type=float, default=None, help="Initial pressure (PSI)")
    p.add_argument(
        "--leak",
        type=float,
        nargs=3,
        action="append",
        default=[],
        metavar=("RATE", "DURATION", "AT"),
        help="Apply a leak of RATE PSI/s for DURATION s from the tick starting at "
        "simulated time AT (repeatable)",
    )
    p.add_argument("--seed", type=int, default=None, help="Noise seed")
    p.add_argument("--realtime", action="store_true", help="Tick on a timer instead of as fast as possible")
    p.add_argument("--time-scale", type=float, default=1.0, help="Real seconds per simulated second (--realtime)")
    p.add_argument("--verbose", action="store_true", help="Print session diagnostics")
    return p.parse_args(argv)


def build_params(args: argparse.Namespace, cfg: dict) -> SimulationParameters:
    params = SimulationParameters.from_yaml(cfg.get("sim"))
    changes = {}
    for dest, name in _OVERRIDES.items():
        v = getattr(args, dest)
        if v is not None:
            changes[name] = v
    return params.with_changes(**changes)


class LeakSchedule:
    """Fires queued leak events once simulated time reaches their start."""

    def __init__(self, events: list[list[float]]) -> None:
        self.pending = sorted((float(at), float(rate), float(dur)) for rate, dur, at in events)

    def due(self, t: float) -> list[tuple[float, float]]:
        fired = []
        while self.pending and reached(t, self.pending[0][0]):
            _, rate, dur = self.pending.pop(0)
            fired.append((rate, dur))
        return fired


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        cfg = load_config(args.config) if args.config else {}
        params = build_params(args, cfg)
        band = BandMonitor.from_yaml(cfg.get("band"))
        trend_cfg = cfg.get("trend") or {}
        if not isinstance(trend_cfg, dict):
            raise ConfigError(f"trend: expected a mapping, got {type(trend_cfg).__name__}")
        trend = TrendBuffer(int(trend_cfg.get("max_points", 20000)))
    except FileNotFoundError:
        print(f"[run] config not found: {args.config}")
        return 2
    except (ConfigError, ValueError, TypeError) as e:
        print(f"[run] config error: {e}")
        return 2

    problems = params.problems()
    if problems:
        for msg in problems:
            print(f"[run] invalid parameter: {msg}")
        return 2

    schedule = LeakSchedule(args.leak)
    session: Session | None = None

    def fire_due(t: float) -> None:
        for rate, dur in schedule.due(t):
            session.apply_leak(rate, dur)

    def on_step(out) -> None:
        trend.append(out)
        status = band.evaluate(out.pressure)
        print(
            f"{out.t:.2f}, {out.pressure:.3f}, {out.measurement:.3f}, {out.error:.3f}, "
            f"{out.control:.3f}, {out.leak:.3f}, {out.setpoint:.3f}, {status}"
        )
        fire_due(out.t)

    session = Session(
        params,
        sink=on_step,
        # events at t <= 0 act from the first tick
        on_start=lambda: fire_due(0.0),
        noise=NoiseSource(seed=args.seed) if args.seed is not None else None,
        time_scale=args.time_scale,
        verbose=args.verbose,
    )
    print("# time_s, P, f, e, u, leak, ref, band")
    if args.realtime:
        session.start()
        try:
            while not session.wait(timeout=0.5):
                pass
        except KeyboardInterrupt:
            session.stop()
            print("\n[run] stopped by user")
    else:
        session.run()

    p_final = trend.array("pressure")[-1] if len(trend) else params.p0
    print(f"# samples={len(trend)} final_P={p_final:.3f} in_band={band.fraction_inside:.1%}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
