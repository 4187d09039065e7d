"""
Cooperative cancellation token shared by every block of a run.

The monitor is passed explicitly to each `process` call. Blocks call `checkpoint()` at
statement boundaries: it returns True once `halt()` has been requested, and while the
run is paused it waits (in short polling slices) until `resume()`, `step()` or
`halt()` is called from another thread. `sleep()` backs the PAUSE statement and
returns early when the run is halted.
"""

import logging
import threading

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05


class HaltMonitor:
    """Halt / pause / single-step flag for one running program.

    Attributes:
        poll_interval (float): Seconds between wake-ups while paused.
    """

    def __init__(self, poll_interval: float = POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval
        self._halted = threading.Event()
        self._running = threading.Event()
        self._running.set()
        self._lock = threading.Lock()
        self._single_step = False

    def halt(self) -> None:
        logger.info("Halt requested")
        self._halted.set()
        # a paused run must wake up to observe the halt
        self._running.set()

    def is_halted(self) -> bool:
        return self._halted.is_set()

    def reset(self) -> None:
        """Clears halt and pause state so the monitor can serve another run."""
        with self._lock:
            self._single_step = False
        self._halted.clear()
        self._running.set()

    def pause(self) -> None:
        self._running.clear()

    def resume(self) -> None:
        with self._lock:
            self._single_step = False
        self._running.set()

    def step(self) -> None:
        """Lets a paused run execute one more statement, then pause again."""
        with self._lock:
            self._single_step = True
        self._running.set()

    @property
    def paused(self) -> bool:
        return not self._running.is_set()

    def checkpoint(self) -> bool:
        """Statement boundary: waits while paused, then reports whether to halt."""
        while not self._running.wait(self.poll_interval):
            if self._halted.is_set():
                return True
        with self._lock:
            if self._single_step:
                self._single_step = False
                self._running.clear()
        return self._halted.is_set()

    def sleep(self, seconds: float) -> bool:
        """Sleeps at most `seconds`; returns True if the run was halted meanwhile."""
        if seconds <= 0:
            return self._halted.is_set()
        return self._halted.wait(seconds)


__all__ = ["HaltMonitor", "POLL_INTERVAL"]
