from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, ClassVar, Optional

from ..config.settings import AppConfig
from ..core.domain.errors import ApiCallError, PermitTimeoutError, require_capacity, require_window
from ..core.domain.models import Document
from ..core.ports.serializer_port import DocumentSerializerPort
from ..core.ports.transport_port import TransportPort
from ..infra.http_client import HttpClient
from ..infra.json_serializer import JsonDocumentSerializer
from ..infra.permit_pool import PermitPool
from ..infra.replenish_timer import ReplenishTimer
from ..infra.transport import DocumentTransport
from ..shared.singleton import SingletonInitializer

logger = logging.getLogger(__name__)

Window = float | timedelta


def _window_seconds(window: Window) -> float:
    seconds = window.total_seconds() if isinstance(window, timedelta) else float(window)
    require_window("window", seconds)
    return seconds


class Dispatcher:
    """Admits at most ``capacity`` API calls per ``window`` and performs them.

    Each call takes a permit from a FIFO permit pool, serializes the document
    and sends it. A background timer resets the pool to full capacity every
    window. Permits are not returned when a call finishes or fails.

    Example:
        # Process-wide shared instance, created on first use
        api = Dispatcher.of(window=1.0, capacity=3)
        response = api.call(document, "token")

        # Explicitly owned instance with its own lifetime
        with Dispatcher(1.0, 3, transport=transport, serializer=serializer) as api:
            api.call(document, "token")
    """

    _shared: ClassVar[SingletonInitializer["Dispatcher"]] = SingletonInitializer()

    def __init__(
        self,
        window: Window,
        capacity: int,
        *,
        transport: TransportPort,
        serializer: DocumentSerializerPort,
        acquire_timeout: Optional[float] = None,
        close_transport: bool = False,
    ) -> None:
        require_capacity("capacity", capacity)
        self._window = _window_seconds(window)
        self._capacity = capacity
        self._transport = transport
        self._serializer = serializer
        self._acquire_timeout = acquire_timeout
        self._close_transport = close_transport
        self._pool = PermitPool(capacity)
        self._timer = ReplenishTimer(self._pool, self._window)
        self._timer.start()
        logger.info(f"Dispatcher ready: {capacity} requests per {self._window}s")

    @classmethod
    def of(
        cls,
        window: Window,
        capacity: int,
        *,
        transport: Optional[TransportPort] = None,
        serializer: Optional[DocumentSerializerPort] = None,
    ) -> Dispatcher:
        """Return the process-wide dispatcher, creating it on first use (thread-safe).

        Parameters are validated on every call. Once the shared instance exists,
        later calls return it unchanged and their window/capacity are ignored.

        Args:
            window: Length of the rate window, in seconds or as a timedelta.
            capacity: Maximum number of requests per window.
            transport: Transport for a newly created instance. Defaults to an
                HTTP transport configured from AppConfig.
            serializer: Serializer for a newly created instance. Defaults to JSON.

        Raises:
            ConfigurationError: If capacity is not a positive integer or window is not a positive finite number.
        """
        require_capacity("capacity", capacity)
        seconds = _window_seconds(window)

        def create() -> Dispatcher:
            if transport is None:
                config = AppConfig()
                default_transport = DocumentTransport(
                    HttpClient(timeout_seconds=config.timeout_seconds),
                    config.api_url,
                    owns_client=True,
                )
                return cls(
                    seconds,
                    capacity,
                    transport=default_transport,
                    serializer=serializer or JsonDocumentSerializer(),
                    acquire_timeout=config.acquire_timeout_seconds,
                    close_transport=True,
                )
            return cls(seconds, capacity, transport=transport, serializer=serializer or JsonDocumentSerializer())

        instance = cls._shared.get_or_create(create)
        if (instance.window, instance.capacity) != (seconds, capacity):
            logger.warning(
                f"Shared dispatcher already configured with {instance.capacity} requests per {instance.window}s; "
                f"ignoring requested {capacity} per {seconds}s"
            )
        return instance

    @classmethod
    def reset_shared(cls) -> None:
        """Close and forget the shared instance so the next ``of()`` builds a new one."""
        instance = cls._shared.reset()
        if instance is not None:
            instance.close()

    @property
    def window(self) -> float:
        return self._window

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pool(self) -> PermitPool:
        return self._pool

    @property
    def timer(self) -> ReplenishTimer:
        return self._timer

    def call(self, document: Document, credentials: str, *, acquire_timeout: Optional[float] = None) -> Any:
        """Wait for a permit, then serialize and send document.

        Args:
            document: Document to create.
            credentials: Bearer token for the Authorization header.
            acquire_timeout: Seconds to wait for a permit. Falls back to the
                dispatcher default; None waits indefinitely.

        Returns:
            The transport's response.

        Raises:
            ApiCallError: On any failure, with the original exception as ``cause``.
        """
        timeout = acquire_timeout if acquire_timeout is not None else self._acquire_timeout
        try:
            if not self._pool.acquire(timeout):
                raise PermitTimeoutError(f"No permit granted within {timeout}s")
            body = self._serializer.serialize(document)
            return self._transport.send(body, credentials)
        except Exception as e:
            logger.warning(f"API call for document {getattr(document, 'doc_id', '?')} failed: {e!r}")
            raise ApiCallError(e) from e

    def close(self) -> None:
        self._timer.stop()
        self._pool.close()
        if self._close_transport:
            self._transport.close()
        logger.info("Dispatcher closed")

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
