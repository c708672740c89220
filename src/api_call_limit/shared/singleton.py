from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingletonInitializer(Generic[T]):
    """Lazily creates exactly one instance, safely under concurrent first use.

    The common path (instance already published) reads without locking. Only
    callers that see no instance take the lock, check again and build it.
    The instance is assigned to the slot after the factory returns, so
    readers never see a partially constructed object.
    """

    def __init__(self) -> None:
        self._instance: Optional[T] = None
        self._lock = Lock()

    @property
    def instance(self) -> Optional[T]:
        return self._instance

    def get_or_create(self, factory: Callable[[], T]) -> T:
        instance = self._instance
        if instance is None:
            with self._lock:
                instance = self._instance
                if instance is None:
                    logger.debug("Creating shared instance")
                    instance = factory()
                    self._instance = instance
        return instance

    def reset(self) -> Optional[T]:
        """Forget the current instance and return it (None if there was none)."""
        with self._lock:
            instance, self._instance = self._instance, None
        return instance
