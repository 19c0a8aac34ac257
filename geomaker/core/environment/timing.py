"""
Session Timing Utilities.

Wall-clock tracking used by the headless runner to report how long a
simulated run took.
"""

import time
from typing import Optional, Protocol


class TimeTrackerProtocol(Protocol):
    """Protocol for duration tracking."""

    def start(self) -> None: ...  # pragma: no cover

    def stop(self) -> float: ...  # pragma: no cover

    @property
    def elapsed_formatted(self) -> str: ...  # pragma: no cover


class TimeTracker:
    """Measures elapsed time between ``start()`` and ``stop()``."""

    def __init__(self) -> None:
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> None:
        self._start_time = time.monotonic()
        self._end_time = None

    def stop(self) -> float:
        self._end_time = time.monotonic()
        return self.elapsed_seconds

    @property
    def elapsed_seconds(self) -> float:
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else time.monotonic()
        return end - self._start_time

    @property
    def elapsed_formatted(self) -> str:
        """Human-readable elapsed time (e.g. '2m 5s', '4.3s')."""
        total_seconds = self.elapsed_seconds
        minutes, seconds = divmod(int(total_seconds), 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{total_seconds:.1f}s"
