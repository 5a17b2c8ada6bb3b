"""
Periodic job runner shared by the safety detectors.

Each job owns one daemon thread that fires a cycle, then waits out the
interval on a stop event. Cycles of one job never overlap:
- timer cycles are skipped if the previous (or an on-demand) cycle still
  holds the cycle lock
- on-demand cycles wait for the lock and then run

Stopping sets the event, so the thread wakes immediately instead of
finishing its sleep.
"""

import logging
import threading
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class PeriodicJob:
    """
    Base class for a side-effecting job run on a fixed interval.

    Subclasses implement ``_run_cycle`` and may override ``_empty_result``
    for the value returned when a cycle fails or is skipped.
    """

    name = 'job'

    def __init__(self, interval: float):
        if interval <= 0:
            raise ValueError(f'{self.name} interval must be > 0, got {interval}')
        self.interval = interval

        self._cycle_lock = threading.Lock()
        # Guards counters touched without the cycle lock
        self._stats_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._cycle_count = 0
        self._skipped_count = 0
        self._error_count = 0
        self._last_cycle_time: float = 0
        self._last_duration_ms: float = 0

    def _run_cycle(self) -> Any:
        raise NotImplementedError

    def _empty_result(self) -> Any:
        return None

    def run_cycle(self, blocking: bool = True) -> Any:
        """
        Execute one cycle now.

        With ``blocking=False`` the cycle is skipped (and the empty result
        returned) when another cycle is in progress.
        """
        if not self._cycle_lock.acquire(blocking=blocking):
            with self._stats_lock:
                self._skipped_count += 1
            logger.debug(f'{self.name}: previous cycle still running, skipping')
            return self._empty_result()

        start = time.perf_counter()
        try:
            result = self._run_cycle()
            self._cycle_count += 1
            return result
        except Exception as e:
            self._error_count += 1
            logger.error(f'{self.name} cycle failed: {e}')
            return self._empty_result()
        finally:
            self._last_cycle_time = time.time()
            self._last_duration_ms = (time.perf_counter() - start) * 1000
            self._cycle_lock.release()

    def _run_loop(self, stop_event: threading.Event) -> None:
        logger.info(f'Starting {self.name} (check every {self.interval}s)')

        # Initial check, then one per interval until stopped
        while not stop_event.is_set():
            self.run_cycle(blocking=False)
            if stop_event.wait(self.interval):
                break

        logger.info(f'{self.name} stopped')

    def start(self) -> None:
        """Start the job in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning(f'{self.name} already running')
            return

        # Fresh event per run so a stale thread can never be revived
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(self._stop_event,),
            name=self.name,
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float = 5) -> None:
        """Stop the background thread. Safe to call repeatedly."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    @property
    def stats(self) -> dict:
        """Get job statistics."""
        return {
            'running': self.is_running,
            'interval_seconds': self.interval,
            'cycle_count': self._cycle_count,
            'skipped_count': self._skipped_count,
            'error_count': self._error_count,
            'last_cycle_time': self._last_cycle_time,
            'last_duration_ms': round(self._last_duration_ms, 2),
        }
