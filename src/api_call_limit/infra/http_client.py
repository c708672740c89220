from __future__ import annotations

from typing import Mapping, Optional

import httpx


class HttpClient:
    def __init__(
        self,
        base_headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers=dict(base_headers or {}),
            transport=transport,
        )

    @property
    def timeout(self) -> httpx.Timeout:
        return self._client.timeout

    def post_text(self, url: str, body: str, headers: Optional[Mapping[str, str]] = None) -> httpx.Response:
        """POST body as UTF-8 text and return the response without raising on HTTP status."""
        return self._client.post(url, content=body.encode("utf-8"), headers=dict(headers or {}))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
