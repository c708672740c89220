from __future__ import annotations

from typing import Any, Protocol

from ..domain.models import Document


class DispatchPort(Protocol):
    def call(self, document: Document, credentials: str, *, acquire_timeout: float | None = None) -> Any:
        """Send document once a rate-limit permit is granted. Failures surface as ApiCallError."""
        ...
