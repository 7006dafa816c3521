"""Time sources for the staking engine."""

import time


class SystemClock:
    """Wall-clock time in whole seconds since the epoch."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Deterministic clock advanced explicitly by the caller.

    Parameters
    ----------
    start : int
        Initial timestamp in seconds.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        self.now += seconds
        return self.now

    def set(self, timestamp: int) -> None:
        if timestamp < self.now:
            raise ValueError("cannot move a clock backwards")
        self.now = timestamp
