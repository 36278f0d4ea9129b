"""
Cancellable periodic task.

One daemon thread runs the callback every `interval_seconds`. Ticks never
overlap: the next wait starts only after the previous tick returns. A tick
that raises is logged and the schedule keeps going.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run `func` on a fixed interval until stopped.

    Usage:
        task = PeriodicTask(30, worker.run_tick, name="dispatch")
        task.start()
        ...
        task.stop()
    """

    def __init__(self, interval_seconds: float, func: Callable[[], object], name: str = "periodic"):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.name = name
        self._func = func
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Start the background thread. First tick fires after one interval.

        Raises:
            RuntimeError: If already running
        """
        if self.running:
            raise RuntimeError(f"Periodic task '{self.name}' is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Periodic task '{self.name}' started (every {self.interval_seconds}s)")

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait for the in-flight tick to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info(f"Periodic task '{self.name}' stopped")

    def run_once(self) -> bool:
        """
        Run a single tick in the calling thread.

        Returns False if a tick was already in progress (nothing was run),
        True otherwise. Errors raised by the callback are logged, not raised.
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning(f"Periodic task '{self.name}' tick skipped: previous tick still running")
            return False
        try:
            self._func()
        except Exception:
            logger.exception(f"Periodic task '{self.name}' tick failed")
        finally:
            self._tick_lock.release()
        return True

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
