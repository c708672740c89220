from __future__ import annotations

import logging
from typing import Any, Optional

from ..domain.errors import ConfigurationError
from ..domain.models import Document
from ..ports.dispatch_port import DispatchPort

logger = logging.getLogger(__name__)


def resolve_token(token: Optional[str], default_token: Optional[str]) -> str:
    resolved = token or default_token
    if not resolved:
        raise ConfigurationError("Parameter 'auth_token' must be set. Current value [None].")
    return resolved


class CreateDocumentUseCase:
    def __init__(self, dispatcher: DispatchPort, default_token: Optional[str] = None) -> None:
        self._dispatcher = dispatcher
        self._default_token = default_token

    def execute(self, document: Document, token: Optional[str] = None) -> Any:
        credentials = resolve_token(token, self._default_token)
        logger.info(f"Creating document {document.doc_id}")
        return self._dispatcher.call(document, credentials)
