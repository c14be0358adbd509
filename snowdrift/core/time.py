# snowdrift/core/time.py

import time


class TimeManager:
    """
    Frame clock feeding a fixed simulation step.

    tick() measures the frame and banks it; consume_fixed_step() then
    hands out whole fixed steps. A manual clock (headless runs) makes every
    frame last exactly one fixed step, so runs replay identically.
    """

    MAX_FRAME_TIME = 0.25  # Longer stalls are dropped, not replayed

    def __init__(self, fixed_timestep: float = 1 / 60.0, manual: bool = False):
        self.fixed_delta = fixed_timestep
        self.delta_time = 0.0
        self.time_scale = 1.0
        self.manual = manual

        self._last_frame_time = time.perf_counter()
        self._accumulator = 0.0
        self._fixed_time = 0.0

        self.frame_count = 0
        self.fixed_frame_count = 0

    def tick(self) -> float:
        """Call once per frame. Returns the scaled frame delta."""
        if self.manual:
            elapsed = self.fixed_delta
        else:
            current_time = time.perf_counter()
            elapsed = current_time - self._last_frame_time
            self._last_frame_time = current_time

        self.delta_time = min(elapsed, self.MAX_FRAME_TIME) * self.time_scale
        self._accumulator += self.delta_time
        self.frame_count += 1
        return self.delta_time

    def consume_fixed_step(self) -> bool:
        """Take one pending fixed step off the accumulator, if there is one."""
        if self._accumulator < self.fixed_delta:
            return False
        self._accumulator -= self.fixed_delta
        self._fixed_time += self.fixed_delta
        self.fixed_frame_count += 1
        return True

    @property
    def fixed_time(self) -> float:
        """Simulated time covered by consumed fixed steps."""
        return self._fixed_time
