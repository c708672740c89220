from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import httpx
import pytest

from api_call_limit.app.dispatcher import Dispatcher
from api_call_limit.core.domain.errors import (
    ApiCallError,
    ConfigurationError,
    PermitPoolClosedError,
    PermitTimeoutError,
)
from api_call_limit.infra.json_serializer import JsonDocumentSerializer


@pytest.fixture
def serializer():
    return JsonDocumentSerializer()


@pytest.mark.parametrize("capacity", [0, -3])
def test_non_positive_capacity_is_configuration_error(capacity, recording_transport, serializer):
    with pytest.raises(ConfigurationError) as exc:
        Dispatcher(1.0, capacity, transport=recording_transport, serializer=serializer)
    assert str(exc.value) == f"Parameter 'capacity' must be positive. Current value [{capacity}]."

    with pytest.raises(ConfigurationError, match="'capacity'"):
        Dispatcher.of(1.0, capacity, transport=recording_transport)


def test_non_positive_window_is_configuration_error(recording_transport, serializer):
    with pytest.raises(ConfigurationError, match="'window'"):
        Dispatcher(0, 3, transport=recording_transport, serializer=serializer)


def test_window_accepts_timedelta(recording_transport, serializer):
    with Dispatcher(timedelta(milliseconds=1500), 2, transport=recording_transport, serializer=serializer) as d:
        assert d.window == 1.5
        assert d.capacity == 2
        assert d.timer.period == 1.5
        assert d.timer.is_running


def test_invalid_capacity_does_not_affect_existing_instance(recording_transport):
    shared = Dispatcher.of(1.0, 3, transport=recording_transport)
    with pytest.raises(ConfigurationError):
        Dispatcher.of(1.0, 0)
    assert Dispatcher.of(1.0, 3) is shared


def test_of_returns_same_instance_and_ignores_later_parameters(recording_transport, caplog):
    first = Dispatcher.of(1.0, 3, transport=recording_transport)
    with caplog.at_level("WARNING"):
        second = Dispatcher.of(5.0, 10)
    assert second is first
    assert second.capacity == 3
    assert second.window == 1.0
    assert "ignoring requested 10 per 5.0s" in caplog.text


def test_concurrent_first_use_constructs_exactly_one(monkeypatch, transport_factory):
    constructed = []
    original_init = Dispatcher.__init__

    def counting_init(self, *args, **kwargs):
        # Widen the race window between check and publish
        time.sleep(0.05)
        constructed.append(self)
        original_init(self, *args, **kwargs)

    monkeypatch.setattr(Dispatcher, "__init__", counting_init)
    n = 16
    barrier = threading.Barrier(n)
    transport = transport_factory()

    def first_use(_):
        barrier.wait()
        return Dispatcher.of(1.0, 3, transport=transport)

    with ThreadPoolExecutor(max_workers=n) as pool:
        instances = list(pool.map(first_use, range(n)))

    assert len(constructed) == 1
    assert all(i is instances[0] for i in instances)


def test_call_serializes_and_sends(recording_transport, serializer, make_document):
    with Dispatcher(1.0, 3, transport=recording_transport, serializer=serializer) as d:
        result = d.call(make_document("9"), "token-1")

    assert result == {"doc_id": "9", "status": 200}
    body, credentials, _ = recording_transport.calls[0]
    assert '"doc_id":"9"' in body
    assert credentials == "token-1"


def test_transport_failure_wrapped_with_cause(transport_factory, serializer, make_document):
    transport = transport_factory(fail_for={"bad"})
    with Dispatcher(1.0, 3, transport=transport, serializer=serializer) as d:
        with pytest.raises(ApiCallError) as exc:
            d.call(make_document("bad"), "t")
        assert isinstance(exc.value.cause, httpx.ConnectError)
        assert exc.value.__cause__ is exc.value.cause
        # A failed call keeps its permit until the next tick
        assert d.pool.available == 2


def test_serialization_failure_wrapped(recording_transport, make_document):
    class BrokenSerializer:
        def serialize(self, document):
            raise ValueError("cannot encode")

    with Dispatcher(1.0, 3, transport=recording_transport, serializer=BrokenSerializer()) as d:
        with pytest.raises(ApiCallError) as exc:
            d.call(make_document(), "t")
    assert isinstance(exc.value.cause, ValueError)
    assert recording_transport.count == 0


def test_acquire_timeout_is_opt_in(recording_transport, serializer, make_document):
    with Dispatcher(10.0, 1, transport=recording_transport, serializer=serializer) as d:
        d.call(make_document("1"), "t")
        with pytest.raises(ApiCallError) as exc:
            d.call(make_document("2"), "t", acquire_timeout=0.05)
    assert isinstance(exc.value.cause, PermitTimeoutError)
    assert recording_transport.count == 1


def test_close_interrupts_waiting_callers(recording_transport, serializer, make_document, wait_until):
    d = Dispatcher(10.0, 1, transport=recording_transport, serializer=serializer)
    d.call(make_document("1"), "t")
    errors: list[ApiCallError] = []

    def waiter():
        try:
            d.call(make_document("2"), "t")
        except ApiCallError as e:
            errors.append(e)

    t = threading.Thread(target=waiter)
    t.start()
    assert wait_until(lambda: d.pool.waiting == 1)
    d.close()
    t.join(timeout=2)

    assert len(errors) == 1
    assert isinstance(errors[0].cause, PermitPoolClosedError)
    assert not d.timer.is_running


def test_fixed_window_end_to_end(transport_factory, serializer, make_document, wait_until):
    transport = transport_factory()
    window = 0.5
    with Dispatcher(window, 3, transport=transport, serializer=serializer) as d:
        start = time.monotonic()
        with ThreadPoolExecutor(max_workers=10) as pool:
            futures = [pool.submit(d.call, make_document(str(i)), "t") for i in range(10)]

            assert wait_until(lambda: transport.count == 3, timeout=window * 0.8)
            time.sleep(window * 0.2)
            # Before the first tick only the initial budget was admitted
            if time.monotonic() - start < window:
                assert transport.count == 3

            results = [f.result(timeout=10) for f in futures]

    assert len(results) == 10
    assert transport.count == 10
    admitted = sorted(ts - start for _, _, ts in transport.calls)
    # Every window admits at most 3 calls: the 4th needs one tick, the 7th two, the 10th three
    assert admitted[3] >= window * 0.9
    assert admitted[6] >= 2 * window * 0.9
    assert admitted[9] >= 3 * window * 0.9


def test_failure_is_isolated_to_its_call(transport_factory, serializer, make_document):
    transport = transport_factory(fail_for={"3"})
    with Dispatcher(0.1, 5, transport=transport, serializer=serializer) as d:
        with ThreadPoolExecutor(max_workers=5) as pool:
            futures = {str(i): pool.submit(d.call, make_document(str(i)), "t") for i in range(6)}
            outcomes = {}
            for doc_id, f in futures.items():
                try:
                    outcomes[doc_id] = f.result(timeout=5)
                except ApiCallError as e:
                    outcomes[doc_id] = e

    assert isinstance(outcomes.pop("3"), ApiCallError)
    assert all(r["status"] == 200 for r in outcomes.values())


def test_reset_shared_closes_owned_transport(transport_factory):
    transport = transport_factory()
    shared = Dispatcher.of(1.0, 2, transport=transport)
    Dispatcher.reset_shared()
    assert not shared.timer.is_running
    assert shared.pool.closed
    # Caller-provided transports stay open
    assert transport.closed is False
    assert Dispatcher.of(1.0, 4, transport=transport) is not shared


def test_default_shared_instance_reads_config(monkeypatch):
    monkeypatch.setenv("API_CALL_LIMIT_API_URL", "http://registry.test/create")
    monkeypatch.setenv("API_CALL_LIMIT_TIMEOUT_SECONDS", "5")
    d = Dispatcher.of(1.0, 3)
    assert d._transport.url == "http://registry.test/create"
    assert d._transport._http.timeout.read == 5.0


@pytest.mark.parametrize("window", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_window_is_configuration_error(window, recording_transport, serializer):
    with pytest.raises(ConfigurationError, match="'window'"):
        Dispatcher(window, 1, transport=recording_transport, serializer=serializer)
    with pytest.raises(ConfigurationError, match="'window'"):
        Dispatcher.of(window, 1, transport=recording_transport)
    assert Dispatcher._shared.instance is None


@pytest.mark.parametrize("capacity", [1.5, True])
def test_non_integer_capacity_is_configuration_error(capacity, recording_transport, serializer):
    with pytest.raises(ConfigurationError, match="'capacity' must be an integer"):
        Dispatcher(1.0, capacity, transport=recording_transport, serializer=serializer)
    with pytest.raises(ConfigurationError, match="'capacity' must be an integer"):
        Dispatcher.of(1.0, capacity, transport=recording_transport)
