from __future__ import annotations

import logging
import time
from collections import deque
from threading import Condition

from ..core.domain.errors import PermitPoolClosedError, require_capacity
from ..core.ports.rate_limiter_port import RateLimiterPort

logger = logging.getLogger(__name__)


class PermitPool(RateLimiterPort):
    """Fixed-capacity, first-come-first-served admission gate.

    Permits are never handed back by callers. The only way supply grows is
    ``replenish()``, which resets ``available`` to ``capacity`` no matter how
    many callers are still in flight (fixed-window semantics).

    Waiters are served strictly in arrival order: a caller that finds permits
    available but other callers already queued joins the end of the queue.

    Example:
        pool = PermitPool(capacity=3)
        pool.acquire()            # blocks while the window budget is spent
        pool.acquire(timeout=5)   # gives up after 5 seconds, returns False
        pool.replenish()          # usually called by ReplenishTimer
    """

    def __init__(self, capacity: int) -> None:
        require_capacity("capacity", capacity)
        self._capacity = capacity
        self._available = capacity
        self._waiters: deque[object] = deque()
        self._cond = Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def available(self) -> int:
        with self._cond:
            return self._available

    @property
    def waiting(self) -> int:
        with self._cond:
            return len(self._waiters)

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, timeout: float | None = None) -> bool:
        """Take one permit, waiting in FIFO order if none can be granted now.

        Args:
            timeout: Seconds to wait before giving up. None waits indefinitely.

        Returns:
            True once a permit was taken, False if the timeout elapsed first.

        Raises:
            PermitPoolClosedError: If the pool is closed before a permit is granted.
        """
        with self._cond:
            if self._closed:
                raise PermitPoolClosedError("Permit pool is closed")
            if not self._waiters and self._available > 0:
                self._available -= 1
                return True
            if timeout is not None and timeout <= 0:
                return False

            ticket = object()
            self._waiters.append(ticket)
            deadline = None if timeout is None else time.monotonic() + timeout
            logger.debug(f"Waiting for permit (queue length: {len(self._waiters)})")
            try:
                while not (self._waiters[0] is ticket and self._available > 0):
                    if self._closed:
                        raise PermitPoolClosedError("Permit pool was closed while waiting")
                    if deadline is None:
                        self._cond.wait()
                        continue
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        logger.debug("Timed out waiting for permit")
                        return False
                    self._cond.wait(remaining)
                self._available -= 1
                return True
            finally:
                if self._waiters[0] is ticket:
                    self._waiters.popleft()
                else:
                    self._waiters.remove(ticket)
                # The head of the queue may have changed
                self._cond.notify_all()

    def replenish(self) -> int:
        with self._cond:
            restored = self._capacity - self._available
            self._available = self._capacity
            self._cond.notify_all()
        logger.debug(f"Permits replenished: restored {restored}/{self._capacity}")
        return restored

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()
