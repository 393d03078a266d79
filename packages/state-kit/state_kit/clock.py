"""FixedStepClock - frame counting and fixed-timestep accumulation."""


class FixedStepClock:
    """Splits variable frame times into fixed steps.

    Each call to accumulate() counts one frame and returns how many fixed
    steps of ``fixed_dt`` became due. At most ``max_fixed_steps`` are
    returned per frame; leftover time beyond that is dropped so a long
    stall does not snowball.
    """

    def __init__(self, fixed_tps: int, max_fixed_steps: int = 5) -> None:
        if fixed_tps <= 0:
            raise ValueError("fixed_tps must be positive")
        if max_fixed_steps <= 0:
            raise ValueError("max_fixed_steps must be positive")
        self._fixed_tps = fixed_tps
        self._fixed_dt = 1.0 / fixed_tps
        self._max_fixed_steps = max_fixed_steps
        self._accumulator = 0.0
        self._frame_number = 0
        self._fixed_step_number = 0
        self._elapsed = 0.0

    @property
    def fixed_tps(self) -> int:
        return self._fixed_tps

    @property
    def fixed_dt(self) -> float:
        return self._fixed_dt

    @property
    def max_fixed_steps(self) -> int:
        return self._max_fixed_steps

    @property
    def frame_number(self) -> int:
        return self._frame_number

    @property
    def fixed_step_number(self) -> int:
        return self._fixed_step_number

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def accumulator(self) -> float:
        return self._accumulator

    def accumulate(self, dt: float) -> int:
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        self._frame_number += 1
        self._elapsed += dt
        self._accumulator += dt
        # Small epsilon so 1/tps sums that land a hair under a step still count.
        steps = int((self._accumulator + 1e-9) // self._fixed_dt)
        if steps > self._max_fixed_steps:
            steps = self._max_fixed_steps
            self._accumulator = 0.0
        else:
            self._accumulator = max(0.0, self._accumulator - steps * self._fixed_dt)
        self._fixed_step_number += steps
        return steps

    def reset(self) -> None:
        self._accumulator = 0.0
        self._frame_number = 0
        self._fixed_step_number = 0
        self._elapsed = 0.0
