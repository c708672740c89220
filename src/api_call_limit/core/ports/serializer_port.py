from __future__ import annotations

from typing import Protocol

from ..domain.models import Document


class DocumentSerializerPort(Protocol):
    def serialize(self, document: Document) -> str:
        """Return the wire representation of document."""
        ...
