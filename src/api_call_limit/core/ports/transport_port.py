from __future__ import annotations

from typing import Any, Protocol


class TransportPort(Protocol):
    def send(self, body: str, credentials: str) -> Any:
        """POST an already serialized body authorized with credentials; return the raw response."""
        ...

    def close(self) -> None:  # pragma: no cover - default no-op
        return None
