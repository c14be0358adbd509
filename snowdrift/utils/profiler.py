# snowdrift/utils/profiler.py

import time
from collections import deque
from contextlib import contextmanager
from typing import Deque, Dict, Tuple
from snowdrift.core.logging import get_logger

logger = get_logger()


class Profiler:
    """
    Rolling per-section timings in milliseconds.
    Each section keeps its last `history` samples.
    """

    def __init__(self, history: int = 60):
        self.history = history
        self.timings: Dict[str, Deque[float]] = {}
        self._started: Dict[str, float] = {}
        self.enabled = True

    def begin(self, section_name: str):
        if not self.enabled:
            return
        self._started[section_name] = time.perf_counter()

    def end(self, section_name: str):
        start = self._started.pop(section_name, None)
        if not self.enabled or start is None:
            return

        samples = self.timings.setdefault(section_name, deque(maxlen=self.history))
        samples.append((time.perf_counter() - start) * 1000.0)

    def get_average(self, section_name: str) -> float:
        samples = self.timings.get(section_name)
        if not samples:
            return 0.0
        return sum(samples) / len(samples)

    def get_last(self, section_name: str) -> float:
        samples = self.timings.get(section_name)
        return samples[-1] if samples else 0.0

    def summary(self) -> Dict[str, Tuple[float, float, float]]:
        """(avg, min, max) per section, in ms."""
        return {
            name: (self.get_average(name), min(samples), max(samples))
            for name, samples in self.timings.items() if samples
        }

    def print_report(self):
        """Log performance report."""
        lines = ["=== Performance Report ==="]
        for section, (avg_time, min_time, max_time) in sorted(self.summary().items()):
            lines.append(f"{section:30s}: avg={avg_time:6.2f}ms  min={min_time:6.2f}ms  max={max_time:6.2f}ms")
        logger.info("\n".join(lines))

    def reset(self):
        self.timings.clear()
        self._started.clear()


# Global profiler instance
_profiler = Profiler()


def get_profiler() -> Profiler:
    return _profiler


@contextmanager
def profile_section(name: str):
    """Time the enclosed block under `name` on the global profiler."""
    _profiler.begin(name)
    try:
        yield _profiler
    finally:
        _profiler.end(name)
