"""tests/api_call_limit/conftest.py

Common fixtures for the entire test suite.
"""

import json
import threading
import time
from datetime import date

import httpx
import pytest

from api_call_limit.app.dispatcher import Dispatcher
from api_call_limit.core.domain.models import DocDescription, Document, Product


class RecordingTransport:
    """Transport stub that records every admitted body and the time it arrived."""

    def __init__(self, fail_for: set[str] | None = None, delay: float = 0.0) -> None:
        self.calls: list[tuple[str, str, float]] = []
        self.fail_for = fail_for or set()
        self.delay = delay
        self.closed = False
        self._lock = threading.Lock()

    def send(self, body: str, credentials: str):
        with self._lock:
            self.calls.append((body, credentials, time.monotonic()))
        if self.delay:
            time.sleep(self.delay)
        doc_id = json.loads(body)["doc_id"]
        if doc_id in self.fail_for:
            raise httpx.ConnectError(f"connection refused for {doc_id}")
        return {"doc_id": doc_id, "status": 200}

    def close(self) -> None:
        self.closed = True

    @property
    def count(self) -> int:
        with self._lock:
            return len(self.calls)


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.005) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture(autouse=True)
def reset_shared_dispatcher():
    """Every test starts without a process-wide dispatcher and leaves none behind."""
    Dispatcher.reset_shared()
    yield
    Dispatcher.reset_shared()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "API_CALL_LIMIT_API_URL",
        "API_CALL_LIMIT_AUTH_TOKEN",
        "API_CALL_LIMIT_REQUEST_LIMIT",
        "API_CALL_LIMIT_WINDOW_SECONDS",
        "API_CALL_LIMIT_TIMEOUT_SECONDS",
        "API_CALL_LIMIT_MAX_WORKERS",
        "API_CALL_LIMIT_ACQUIRE_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_document():
    """Factory fixture building a fully populated document."""

    def _make(doc_id: str = "1") -> Document:
        product = Product(
            certificate_document="CONFORMITY_CERTIFICATE",
            certificate_document_date=date(2024, 1, 5),
            certificate_document_number="CERT-1",
            owner_inn="7700000001",
            producer_inn="7700000002",
            production_date=date(2024, 1, 2),
            tnved_code="6403",
            uit_code="010460",
            uitu_code="",
        )
        return Document(
            doc_id=doc_id,
            description=DocDescription(participant_inn="7700000003"),
            doc_status="DRAFT",
            doc_type="LP_INTRODUCE_GOODS",
            import_request=True,
            owner_inn="7700000001",
            participant_inn="7700000003",
            producer_inn="7700000002",
            production_date=date(2024, 1, 2),
            production_type="OWN_PRODUCTION",
            products=(product,),
            reg_date=date(2024, 1, 10),
            reg_number="REG-1",
        )

    return _make


@pytest.fixture
def mock_http():
    """
    Builds an httpx.MockTransport that records requests and answers with a
    registered status code and JSON payload.
    """
    requests: list[httpx.Request] = []
    state = {"status": 200, "payload": {"value": "ok"}}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(state["status"], json=state["payload"])

    transport = httpx.MockTransport(handler)
    transport.requests = requests  # type: ignore[attr-defined]
    transport.state = state  # type: ignore[attr-defined]
    return transport


@pytest.fixture
def transport_factory():
    return RecordingTransport


@pytest.fixture(name="wait_until")
def wait_until_fixture():
    return wait_until
