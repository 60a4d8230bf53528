"""Push client: health bookkeeping and per-item batch isolation."""

from __future__ import annotations

import json
import threading

import httpx
import pytest

from transcript_logger.adapters.loki.ingestion import IngestionClient
from transcript_logger.domain.record_builder import build_record
from transcript_logger.observability.health import HealthCounters
from transcript_logger.security.http_client import LokiHttpClient
from transcript_logger.shared.exceptions import BackendError, IngestionError, TransportError


def _record(turn: int):
    return build_record(
        {"sessionId": "s1", "turnNumber": turn, "timestamp": 1000 + turn, "messageType": "user", "content": "hi"},
        job="j",
    )


def _ingestion(handler, **kwargs) -> IngestionClient:
    http = LokiHttpClient("http://loki.test", transport=httpx.MockTransport(handler))
    return IngestionClient(http, **kwargs)


def test_push_sends_single_stream_and_counts_success():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/loki/api/v1/push"
        seen.append(json.loads(request.content))
        return httpx.Response(204)

    health = HealthCounters(clock=lambda: 42.0)
    client = _ingestion(handler, health=health)
    record = _record(1)
    client.push(record)

    assert seen == [{"streams": [{"stream": record.labels, "values": [record.to_value()]}]}]
    snap = health.snapshot()
    assert snap.entries_total == 1
    assert snap.errors_total == 0
    assert snap.last_success_timestamp == 42.0


def test_rejected_push_raises_with_status_and_body():
    client = _ingestion(lambda request: httpx.Response(400, text="stream limit exceeded"))

    with pytest.raises(IngestionError) as excinfo:
        client.push(_record(1))

    err = excinfo.value
    assert err.status_code == 400
    assert err.body == "stream limit exceeded"
    assert isinstance(err.cause, BackendError)
    assert "stream limit exceeded" in str(err)
    snap = client.health.snapshot()
    assert snap.errors_total == 1
    assert snap.entries_total == 0
    assert snap.last_success_timestamp is None


def test_timeout_counts_as_failure():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = _ingestion(handler)
    with pytest.raises(IngestionError) as excinfo:
        client.push(_record(1))

    assert isinstance(excinfo.value.cause, TransportError)
    assert excinfo.value.cause.timed_out is True
    assert excinfo.value.status_code is None
    assert client.health.snapshot().errors_total == 1


@pytest.mark.parametrize("workers", [1, 3])
def test_batch_isolates_the_rejected_item(workers):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        turn = body["streams"][0]["stream"]["turn_number"]
        if turn == "2":
            return httpx.Response(500, text="boom")
        return httpx.Response(204)

    client = _ingestion(handler, batch_workers=workers)
    outcomes = client.push_batch([_record(1), _record(2), _record(3)])

    assert [o.ok for o in outcomes] == [True, False, True]
    assert [o.record.labels["turn_number"] for o in outcomes] == ["1", "2", "3"]
    assert outcomes[1].status == "error"
    assert isinstance(outcomes[1].error, IngestionError)
    snap = client.health.snapshot()
    assert snap.entries_total == 2
    assert snap.errors_total == 1


def test_concurrent_pushes_do_not_lose_increments():
    client = _ingestion(lambda request: httpx.Response(204))
    record = _record(1)

    def worker():
        for _ in range(25):
            client.push(record)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert client.health.snapshot().entries_total == 200


def test_batch_survives_non_httpx_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["streams"][0]["stream"]["turn_number"] == "2":
            raise OSError("socket exploded")
        return httpx.Response(204)

    client = _ingestion(handler)
    outcomes = client.push_batch([_record(1), _record(2), _record(3)])

    assert [o.ok for o in outcomes] == [True, False, True]
    assert isinstance(outcomes[1].error.cause, TransportError)
    snap = client.health.snapshot()
    assert snap.entries_total == 2
    assert snap.errors_total == 1
