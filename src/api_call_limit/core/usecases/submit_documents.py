from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from ..domain.errors import ApiCallError
from ..domain.models import Document, SubmissionResult
from ..ports.dispatch_port import DispatchPort
from .create_document import resolve_token

logger = logging.getLogger(__name__)


class SubmitDocumentsUseCase:
    """Submit many documents concurrently through one rate-limited dispatcher.

    Every document runs on a worker thread and waits for its own permit, so
    the dispatcher decides the admission order. A failed document is reported
    in its result and does not affect the others.
    """

    def __init__(self, dispatcher: DispatchPort, default_token: Optional[str] = None, max_workers: int = 30) -> None:
        self._dispatcher = dispatcher
        self._default_token = default_token
        self._max_workers = max_workers

    def execute(self, documents: Sequence[Document], token: Optional[str] = None) -> list[SubmissionResult]:
        credentials = resolve_token(token, self._default_token)
        logger.info(f"Submitting {len(documents)} documents with {self._max_workers} workers")

        def submit(document: Document) -> SubmissionResult:
            try:
                response = self._dispatcher.call(document, credentials)
            except ApiCallError as e:
                return SubmissionResult(doc_id=document.doc_id, error=e)
            return SubmissionResult(doc_id=document.doc_id, response=response)

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="submit") as executor:
            results = list(executor.map(submit, documents))

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Submitted {len(results)} documents, {failed} failed")
        return results
