from __future__ import annotations

from typing import Any, Sequence

import httpx
from dependency_injector import providers

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.models import Document, SubmissionResult


class DocumentApiClient:
    """Client for creating documents through the rate-limited registry API.

    The container and its resources (HTTP client, dispatcher and its
    replenish timer) are initialized once and reused across calls; they are
    released by ``close()``.

    Example:
        # Using default configuration (from environment variables)
        client = DocumentApiClient()
        response = client.create_document(document, token="...")
        client.close()

        # Using context manager (recommended)
        with DocumentApiClient(request_limit=10, window_seconds=60) as client:
            results = client.submit_documents(documents)
    """

    def __init__(
        self,
        *,
        api_url: str | None = None,
        auth_token: str | None = None,
        request_limit: int | None = None,
        window_seconds: float | None = None,
        timeout_seconds: float | None = None,
        max_workers: int | None = None,
        acquire_timeout_seconds: float | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_url: Document creation endpoint. If None, uses API_CALL_LIMIT_API_URL or the default.
            auth_token: Default bearer token. If None, uses API_CALL_LIMIT_AUTH_TOKEN.
            request_limit: Maximum requests per window. If None, uses API_CALL_LIMIT_REQUEST_LIMIT or 3.
            window_seconds: Window length in seconds. If None, uses API_CALL_LIMIT_WINDOW_SECONDS or 1.0.
            timeout_seconds: HTTP timeout. If None, uses API_CALL_LIMIT_TIMEOUT_SECONDS or 30.
            max_workers: Threads used by submit_documents. If None, uses API_CALL_LIMIT_MAX_WORKERS or 30.
            acquire_timeout_seconds: Give up waiting for a permit after this long. If None, waits forever.
            http_transport: Optional httpx transport (e.g. httpx.MockTransport) used instead of the network.
        """
        self._container = Container()

        # Build config dict with only provided values
        overrides = {
            "api_url": api_url,
            "auth_token": auth_token,
            "request_limit": request_limit,
            "window_seconds": window_seconds,
            "timeout_seconds": timeout_seconds,
            "max_workers": max_workers,
            "acquire_timeout_seconds": acquire_timeout_seconds,
        }
        config_dict = {k: v for k, v in overrides.items() if v is not None}
        if config_dict:
            self._container.config.from_pydantic(AppConfig(**config_dict))

        if http_transport is not None:
            self._container.http_transport.override(providers.Object(http_transport))

        self._container.init_resources()

    @property
    def container(self) -> Container:
        return self._container

    def create_document(self, document: Document, token: str | None = None) -> Any:
        """Create a single document once a rate-limit permit is available.

        Raises:
            ApiCallError: If waiting, serialization or the HTTP request failed.
            ConfigurationError: If no token was given and none is configured.
        """
        uc = self._container.create_uc()
        return uc.execute(document, token)

    def submit_documents(self, documents: Sequence[Document], token: str | None = None) -> list[SubmissionResult]:
        """Create many documents concurrently; results keep the input order."""
        uc = self._container.submit_uc()
        return uc.execute(documents, token)

    def close(self) -> None:
        self._container.shutdown_resources()

    def __enter__(self) -> DocumentApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "DocumentApiClient",
    "AppConfig",
]
