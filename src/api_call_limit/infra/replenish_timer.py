from __future__ import annotations

import logging
from threading import Event, Thread, current_thread

from ..core.ports.rate_limiter_port import RateLimiterPort

logger = logging.getLogger(__name__)


class ReplenishTimer:
    """Background thread resetting a permit pool to full capacity every ``period`` seconds.

    Ticks use a fixed delay: the first one fires ``period`` seconds after
    ``start()``, each following one ``period`` seconds after the previous
    replenish returned. Ticks run on the timer's own daemon thread and are
    independent of what callers are doing with the pool.
    """

    def __init__(self, pool: RateLimiterPort, period: float, *, name: str = "replenish-timer") -> None:
        self._pool = pool
        self._period = period
        self._name = name
        self._stop = Event()
        self._thread: Thread | None = None
        self._ticks = 0

    @property
    def period(self) -> float:
        return self._period

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")
        self._thread = Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Started {self._name} with period {self._period}s")

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not current_thread():
            thread.join(timeout)
        logger.debug(f"Stopped {self._name} after {self._ticks} ticks")

    def _run(self) -> None:
        while not self._stop.wait(self._period):
            try:
                self._pool.replenish()
            except Exception:
                logger.exception(f"{self._name} failed to replenish permits")
                continue
            self._ticks += 1

    def __enter__(self) -> ReplenishTimer:
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
