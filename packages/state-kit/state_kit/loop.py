"""HostLoop - drives machines once per frame and once per fixed step."""
from __future__ import annotations

import time
from typing import Callable

from state_kit.clock import FixedStepClock
from state_kit.machine import StateMachine

LoopHook = Callable[["HostLoop"], None]


class HostLoop:
    """Minimal host cycle for state machines.

    Every frame, due fixed steps run first (``fixed_tick(fixed_dt)`` on every
    machine), then each machine gets one ``tick(dt)``. Machines are ticked in
    the order they were added. Errors raised by a machine propagate.
    """

    def __init__(self, fixed_tps: int = 50, max_fixed_steps: int = 5) -> None:
        self._clock = FixedStepClock(fixed_tps, max_fixed_steps)
        self._machines: list[StateMachine] = []
        self._start_hooks: list[LoopHook] = []
        self._stop_hooks: list[LoopHook] = []
        self._stop_requested: bool = False

    @property
    def clock(self) -> FixedStepClock:
        return self._clock

    @property
    def machines(self) -> list[StateMachine]:
        return list(self._machines)

    def add(self, machine: StateMachine) -> None:
        if machine not in self._machines:
            self._machines.append(machine)

    def remove(self, machine: StateMachine) -> None:
        """Stop driving ``machine``. Raises ValueError if it was never added."""
        self._machines.remove(machine)

    def on_start(self, hook: LoopHook) -> None:
        self._start_hooks.append(hook)

    def on_stop(self, hook: LoopHook) -> None:
        self._stop_hooks.append(hook)

    def request_stop(self) -> None:
        self._stop_requested = True

    def step(self, dt: float | None = None) -> None:
        """Run one frame of ``dt`` seconds (defaults to one fixed step)."""
        if dt is None:
            dt = self._clock.fixed_dt
        steps = self._clock.accumulate(dt)
        fixed_dt = self._clock.fixed_dt
        for _ in range(steps):
            for machine in list(self._machines):
                machine.fixed_tick(fixed_dt)
        for machine in list(self._machines):
            machine.tick(dt)

    def run(self, frames: int, dt: float | None = None) -> None:
        self._stop_requested = False
        for hook in self._start_hooks:
            hook(self)

        for _ in range(frames):
            self.step(dt)
            if self._stop_requested:
                break

        for hook in self._stop_hooks:
            hook(self)

    def run_forever(self, frame_dt: float | None = None) -> None:
        """Run paced by the wall clock until request_stop() is called.

        ``frame_dt`` is the target frame duration; it defaults to the fixed
        step. The dt passed to machines is the measured frame time.
        """
        self._stop_requested = False
        for hook in self._start_hooks:
            hook(self)

        target = frame_dt if frame_dt is not None else self._clock.fixed_dt
        last = time.monotonic()
        while not self._stop_requested:
            start = time.monotonic()
            self.step(start - last)
            last = start
            if self._stop_requested:
                break
            elapsed = time.monotonic() - start
            sleep_time = target - elapsed
            if sleep_time > 0:
                time.sleep(sleep_time)

        for hook in self._stop_hooks:
            hook(self)
