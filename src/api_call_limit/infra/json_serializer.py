from __future__ import annotations

from pathlib import Path

from ..core.domain.models import Document
from ..core.ports.serializer_port import DocumentSerializerPort
from .schemas import DocumentSchema


class JsonDocumentSerializer(DocumentSerializerPort):
    """Maps documents to and from the registry's JSON body.

    Keys keep the wire names (``importRequest``, ``participantInn`` ...) and
    dates are written as ``yyyy-MM-dd``.
    """

    def serialize(self, document: Document) -> str:
        return DocumentSchema.from_domain(document).model_dump_json(by_alias=True)

    def deserialize(self, data: str | bytes) -> Document:
        return DocumentSchema.model_validate_json(data).to_domain()

    def load(self, path: str | Path) -> Document:
        return self.deserialize(Path(path).read_bytes())
