from __future__ import annotations

from typing import Protocol


class RateLimiterPort(Protocol):
    def acquire(self, timeout: float | None = None) -> bool:
        """Block until a permit is granted. Return False if timeout elapsed first."""
        ...

    def replenish(self) -> int:
        """Reset available permits to full capacity and return how many were restored."""
        ...
