from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .errors import ApiCallError


@dataclass(frozen=True)
class DocDescription:
    participant_inn: str = ""


@dataclass(frozen=True)
class Product:
    certificate_document: str = ""
    certificate_document_date: Optional[date] = None
    certificate_document_number: str = ""
    owner_inn: str = ""
    producer_inn: str = ""
    production_date: Optional[date] = None
    tnved_code: str = ""
    uit_code: str = ""
    uitu_code: str = ""


@dataclass(frozen=True)
class Document:
    doc_id: str
    description: DocDescription = field(default_factory=DocDescription)
    doc_status: str = ""
    doc_type: str = ""
    import_request: bool = False
    owner_inn: str = ""
    participant_inn: str = ""
    producer_inn: str = ""
    production_date: Optional[date] = None
    production_type: str = ""
    products: tuple[Product, ...] = field(default_factory=tuple)
    reg_date: Optional[date] = None
    reg_number: str = ""


@dataclass(frozen=True)
class SubmissionResult:
    doc_id: str
    response: Any = None
    error: Optional[ApiCallError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
