"""
Timestamp sources for meta-actions.

Timestamps are informational only: replay never reads them, so a wall clock
is fine in production and a manual clock keeps tests deterministic.
"""

import time
from dataclasses import dataclass


class SystemClock:
    """Wall clock in integer milliseconds since the epoch."""

    def now(self) -> int:
        return int(time.time() * 1000)


@dataclass
class ManualClock:
    """
    Deterministic time source.

    In tests: advance manually with tick().
    """
    current: int = 0

    def now(self) -> int:
        """Get current timestamp without advancing."""
        return self.current

    def tick(self, step: int = 1) -> int:
        """Advance clock by step and return the new timestamp."""
        self.current += step
        return self.current


DEFAULT_CLOCK = SystemClock()
