"""
Tick Timers.

The scheduler never sleeps or spawns threads itself: it hands each
follow-up tick to a timer implementing ``TickTimerProtocol``. At most one
tick is pending per timer at any time.
"""

import threading
from typing import Callable, Optional, Protocol


class TickTimerProtocol(Protocol):
    """One-shot scheduling of the next tick."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> None: ...  # pragma: no cover

    def cancel(self) -> None: ...  # pragma: no cover


class ThreadingTickTimer:
    """
    ``threading.Timer`` backed implementation.

    Timer threads are daemonic so an interrupted process never waits on a
    pending simulated epoch.
    """

    def __init__(self) -> None:
        self._timer: Optional[threading.Timer] = None
        self._guard = threading.Lock()

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._guard:
            return self._timer is not None and self._timer.is_alive()


class ManualTickTimer:
    """
    Timer driven by explicit ``fire()`` calls.

    Used by the test-suite and by callers that want to step a run epoch by
    epoch without wall-clock delays.
    """

    def __init__(self) -> None:
        self._callback: Optional[Callable[[], None]] = None
        self.last_delay: Optional[float] = None
        self.scheduled_count = 0

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self._callback = callback
        self.last_delay = delay
        self.scheduled_count += 1

    def cancel(self) -> None:
        self._callback = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def fire(self) -> bool:
        """Runs the pending callback; returns False when nothing was pending."""
        callback, self._callback = self._callback, None
        if callback is None:
            return False
        callback()
        return True

    def take(self) -> Optional[Callable[[], None]]:
        """Detaches the pending callback without running it."""
        callback, self._callback = self._callback, None
        return callback
