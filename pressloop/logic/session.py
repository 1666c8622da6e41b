from __future__ import annotations

"""
Session state machine and tick scheduler.

IDLE --start()--> RUNNING --stop() / t >= total_time--> IDLE
reset() is accepted in any state and always ends in IDLE.

All ticks and all commands run under one re-entrant lock, so a command
issued from another thread lands between two ticks, never inside one.
Each run gets a generation number; a worker whose generation is stale
stops without ticking.
"""

import threading
import time
from typing import Callable, Optional

from ..core.noise import NoiseSource, shared_source
from ..core.params import SimulationParameters
from ..core.simulation import PressureLoop, StepOutput
from .commands import RunState, SessionCmd, parse_cmd


class Session:
    """Owns the loop state, the parameter snapshot and the tick thread.

    External API:
    - start(), stop(), reset(): lifecycle
    - apply_leak(rate, duration), clear_leak(): disturbance commands
    - update_params(**changes): parameter edits, seen by the next tick
    - on_start: optional hook called after each start's reinit, before ticking
    - tick(): one synchronous step (no-op unless RUNNING)
    - run(): synchronous start + tick until IDLE, without sleeping
    - dispatch(cmd, **kwargs): command enum front-end for runners
    """

    min_period = 0.005          # floor on real-time tick period [s]

    def __init__(
        self,
        params: SimulationParameters | None = None,
        *,
        source: Optional[Callable[[], SimulationParameters]] = None,
        sink: Optional[Callable[[StepOutput], None]] = None,
        on_start: Optional[Callable[[], None]] = None,
        noise: NoiseSource | None = None,
        time_scale: float = 1.0,
        verbose: bool = False,
    ) -> None:
        self.params = params or SimulationParameters()
        self.source = source
        self.sink = sink
        self.on_start = on_start
        self.loop = PressureLoop(noise=noise if noise is not None else shared_source())
        self.time_scale = float(time_scale)
        self.verbose = verbose
        self.state: RunState = RunState.IDLE
        self.last: StepOutput | None = None
        self._lock = threading.RLock()
        self._gen = 0
        self._halt = threading.Event()
        self._worker: threading.Thread | None = None
        self._reinit()

    # --- Parameters ---
    def current_params(self) -> SimulationParameters:
        if self.source is not None:
            return self.source()
        return self.params

    def update_params(self, **changes) -> SimulationParameters:
        with self._lock:
            self.params = self.params.with_changes(**changes)
            return self.params

    # --- Lifecycle ---
    @property
    def running(self) -> bool:
        return self.state is RunState.RUNNING

    def start(self, background: bool = True) -> bool:
        """Reinitialise and start ticking. No-op when running.

        With background=False no worker is spawned and the caller drives
        ticks through tick().
        """
        with self._lock:
            if self.running:
                return False
            gen = self._begin()
            if background:
                worker = threading.Thread(
                    target=self._run_worker, args=(gen, self._halt), name="pressloop-tick", daemon=True
                )
                self._worker = worker
                worker.start()
        if self.verbose:
            p = self.current_params()
            print(f"[session] start dt={p.dt} total_time={p.total_time} p0={p.p0}")
        return True

    def stop(self) -> bool:
        """Halt ticking and keep all state. No-op when idle."""
        with self._lock:
            if not self.running:
                return False
            self._end()
            worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=5.0)
            if worker.is_alive() and self.verbose:
                print("[session] worker still busy after stop; no further ticks will run")
        if self.verbose:
            print(f"[session] stop t={self.loop.clock.t:.3f}")
        return True

    def reset(self) -> None:
        self.stop()
        with self._lock:
            self._reinit()
        if self.verbose:
            print("[session] reset")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the background run ends. Returns True once IDLE."""
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        return not self.running

    # --- Disturbance commands ---
    def apply_leak(self, rate, duration) -> bool:
        with self._lock:
            ok = self.loop.leak.apply(rate, duration)
        if self.verbose:
            if ok:
                print(f"[session] leak rate={rate} duration={duration}")
            else:
                print(f"[session] leak rejected rate={rate!r}")
        return ok

    def clear_leak(self) -> None:
        with self._lock:
            self.loop.leak.clear()
        if self.verbose:
            print("[session] leak cleared")

    def dispatch(self, cmd, **kwargs):
        c = parse_cmd(cmd)
        if c is SessionCmd.START:
            return self.start()
        if c is SessionCmd.STOP:
            return self.stop()
        if c is SessionCmd.RESET:
            return self.reset()
        if c is SessionCmd.APPLY_LEAK:
            return self.apply_leak(kwargs.get("rate"), kwargs.get("duration"))
        if c is SessionCmd.CLEAR_LEAK:
            return self.clear_leak()
        return None

    # --- Ticking ---
    def tick(self) -> StepOutput | None:
        return self._tick(None)

    def run(self, max_ticks: int | None = None) -> int:
        """Start and tick on the calling thread until IDLE. Returns ticks executed."""
        with self._lock:
            if not self.start(background=False):
                return 0
            gen = self._gen
        n = 0
        try:
            while max_ticks is None or n < max_ticks:
                if self._tick(gen) is None:
                    break
                n += 1
        except Exception:
            with self._lock:
                if self._gen == gen:
                    self._end()
            raise
        return n

    def _tick(self, gen: int | None) -> StepOutput | None:
        with self._lock:
            if not self.running or (gen is not None and gen != self._gen):
                return None
            p = self.current_params()
            out = self.loop.step(p)
            self.last = out
            if self.sink is not None:
                self.sink(out)
            if self.running and self.loop.finished(p):
                self._end()
                if self.verbose:
                    print(f"[session] total_time reached t={out.t:.3f}")
            return out

    def _run_worker(self, gen: int, halt: threading.Event) -> None:
        # Monotonic deadline so tick work does not stretch the period
        next_tick = time.perf_counter()
        while not halt.is_set():
            try:
                out = self._tick(gen)
                if out is None:
                    return
                next_tick += self._period()
                now = time.perf_counter()
                sleep_for = next_tick - now
                if sleep_for < 0.0:
                    next_tick = now
                    if self.verbose and (-sleep_for) > 3.0 * self._period():
                        print(f"[session] loop lag {(-sleep_for):.3f}s")
                    sleep_for = 0.0
                # Event.wait overflows past TIMEOUT_MAX; stop() still wakes it
                halt.wait(min(sleep_for, threading.TIMEOUT_MAX))
            except Exception as e:
                print(f"[session] tick error, stopping: {e!r}")
                with self._lock:
                    if self._gen == gen:
                        self._end()
                return

    def _period(self) -> float:
        try:
            period = float(self.current_params().dt) * self.time_scale
        except (TypeError, ValueError):
            return self.min_period
        # max() keeps the floor when period is NaN
        return max(self.min_period, period)

    # --- Internal state ---
    def _begin(self) -> int:
        self._reinit()
        # Runs after the reinit and before the first tick, under the lock
        if self.on_start is not None:
            self.on_start()
        self.state = RunState.RUNNING
        self._gen += 1
        self._halt = threading.Event()
        return self._gen

    def _end(self) -> None:
        self.state = RunState.IDLE
        self._gen += 1
        self._halt.set()

    def _reinit(self) -> None:
        self.loop.reset(self.current_params().p0)
        self.last = None

    def snapshot(self) -> dict:
        with self._lock:
            return {
                'state': self.state.name,
                't': self.loop.clock.t,
                'pressure': self.loop.plant.pressure,
                'integral': self.loop.ctrl.integral,
                'control': self.loop.control,
                'leak_rate': self.loop.leak.rate,
                'leak_elapsed': self.loop.leak.elapsed,
            }
