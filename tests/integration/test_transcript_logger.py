"""End-to-end facade scenarios against an in-memory Loki stub."""

from __future__ import annotations

import json

import httpx
import pytest

from transcript_logger import LokiSettings, TranscriptLogger
from transcript_logger.shared.exceptions import IngestionError, StatsError


class _LokiStub:
    """Stores pushed streams and echoes them back on query_range."""

    def __init__(self) -> None:
        self.streams: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.push_status = 204

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/loki/api/v1/push":
            if self.push_status >= 300:
                return httpx.Response(self.push_status, text="rejected")
            self.streams.extend(json.loads(request.content)["streams"])
            return httpx.Response(self.push_status)
        if request.url.path == "/loki/api/v1/query_range":
            selector = request.url.params["query"]
            matched = [s for s in self.streams if self._matches(selector, s["stream"])]
            return httpx.Response(200, json={"status": "success", "data": {"resultType": "streams", "result": matched}})
        return httpx.Response(404, text="not found")

    @staticmethod
    def _matches(selector: str, labels: dict) -> bool:
        pairs = [part.strip() for part in selector.strip("{}").split(",") if part.strip()]
        for pair in pairs:
            key, _, value = pair.partition("=")
            if labels.get(key.strip()) != value.strip().strip('"'):
                return False
        return True


@pytest.fixture
def stub():
    return _LokiStub()


@pytest.fixture
def client(stub, structured_logger):
    with TranscriptLogger(
        LokiSettings(base_url="http://loki.test"),
        transport=httpx.MockTransport(stub),
        logger=structured_logger,
    ) as logger:
        yield logger


def test_round_trip_push_then_query(client, stub, log_stream):
    record = client.log_transcript(
        {
            "sessionId": "s1",
            "turnNumber": 1,
            "timestamp": 1000,
            "messageType": "user",
            "content": "hi",
            "metadata": {},
            "context": {},
        }
    )

    assert record is not None
    metrics = client.get_metrics()
    assert metrics["transcript_entries_total"] == 1
    assert metrics["last_transcript_timestamp"] is not None

    result = client.search_transcripts('{session_id="s1"}', start=0, end=2000)
    assert len(result.streams) == 1
    assert result.streams[0].labels["session_id"] == "s1"
    assert len(result.streams[0].values) == 1
    assert result.streams[0].values[0].timestamp_ns == 1000 * 10**9
    assert result.streams[0].values[0].payload_object()["content"] == "hi"

    events = [json.loads(line)["event"] for line in log_stream.getvalue().splitlines()]
    assert "transcript_logged" in events


def test_disabled_logger_skips_network(stub, structured_logger, log_stream):
    logger = TranscriptLogger(
        LokiSettings(base_url="http://loki.test", enabled=False),
        transport=httpx.MockTransport(stub),
        logger=structured_logger,
    )
    result = logger.log_transcript({"sessionId": "s1", "turnNumber": 1, "timestamp": 1, "messageType": "user"})

    assert result is None
    assert stub.requests == []
    assert logger.get_metrics()["transcript_entries_total"] == 0
    assert "transcript_logging_disabled" in log_stream.getvalue()


def test_failed_push_is_raised_and_logged(client, stub, log_stream):
    stub.push_status = 400
    with pytest.raises(IngestionError) as excinfo:
        client.log_transcript({"sessionId": "s1", "turnNumber": 1, "timestamp": 1, "messageType": "user"})

    assert excinfo.value.status_code == 400
    assert client.snapshot().errors_total == 1
    assert "transcript_log_failed" in log_stream.getvalue()


def test_batch_and_stats(client, stub):
    events = [
        {"sessionId": "s1", "turnNumber": 1, "timestamp": 100, "messageType": "user", "content": "hello"},
        {"sessionId": "s1", "turnNumber": 2, "timestamp": 101, "messageType": "zara", "content": "hi there"},
        {"sessionId": "s2", "turnNumber": 1, "timestamp": 102, "messageType": "user", "content": "hey"},
    ]
    outcomes = client.log_transcripts(events)
    assert all(outcome.ok for outcome in outcomes)

    stats = client.get_transcript_stats("24h")
    assert stats.counts == {"user": 2, "zara": 1, "system": 0}
    assert stats.total_count == 3


def test_stats_fail_closed(stub, structured_logger):
    def failing(request: httpx.Request) -> httpx.Response:
        if 'message_type="zara"' in request.url.params.get("query", ""):
            return httpx.Response(500, text="querier down")
        return stub(request)

    logger = TranscriptLogger(
        LokiSettings(base_url="http://loki.test"),
        transport=httpx.MockTransport(failing),
        logger=structured_logger,
    )
    with pytest.raises(StatsError):
        logger.get_transcript_stats("1h")


def test_render_metrics(client):
    client.log_transcript({"sessionId": "s1", "turnNumber": 1, "timestamp": 1, "messageType": "user"})
    text = client.render_metrics()
    assert 'transcript_entries_total{job="zaralive-transcripts"} 1.0' in text


def test_batch_with_invalid_middle_event_still_pushes_the_rest(client, stub):
    events = [
        {"sessionId": "s1", "turnNumber": 1, "timestamp": 100, "messageType": "user"},
        {"sessionId": "", "turnNumber": 2, "timestamp": 101, "messageType": "user"},
        {"sessionId": "s1", "turnNumber": 3, "timestamp": 102, "messageType": "user"},
    ]
    outcomes = client.log_transcripts(events)

    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[1].record is None
    assert isinstance(outcomes[1].error, ValueError)
    assert [o.record.labels["turn_number"] for o in (outcomes[0], outcomes[2])] == ["1", "3"]
    assert len(stub.streams) == 2
    snap = client.snapshot()
    assert snap.entries_total == 2
    assert snap.errors_total == 1


def test_disabled_batch_reports_success_without_network(stub, structured_logger):
    logger = TranscriptLogger(
        LokiSettings(base_url="http://loki.test", enabled=False),
        transport=httpx.MockTransport(stub),
        logger=structured_logger,
    )
    outcomes = logger.log_transcripts(
        [
            {"sessionId": "s1", "turnNumber": 1, "timestamp": 1, "messageType": "user"},
            {"sessionId": "s1", "turnNumber": 2, "timestamp": 2, "messageType": "zara"},
        ]
    )

    assert [o.ok for o in outcomes] == [True, True]
    assert all(o.record is not None for o in outcomes)
    assert stub.requests == []
    assert logger.snapshot().entries_total == 0
    assert logger.snapshot().errors_total == 0


def test_each_client_gets_its_own_structured_logger(stub):
    first = TranscriptLogger(LokiSettings(base_url="http://loki.test"), transport=httpx.MockTransport(stub))
    second = TranscriptLogger(LokiSettings(base_url="http://loki.test"), transport=httpx.MockTransport(stub))
    assert first._log is not second._log


def test_push_timers_are_released_on_failure(client, stub, structured_logger):
    stub.push_status = 500
    with pytest.raises(IngestionError):
        client.log_transcript({"sessionId": "s1", "turnNumber": 1, "timestamp": 1, "messageType": "user"})
    assert structured_logger._timers == {}


class _InjectedHttp:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_close_leaves_injected_http_client_open():
    http = _InjectedHttp()
    with TranscriptLogger(LokiSettings(base_url="http://loki.test"), http_client=http):
        pass
    assert http.closed is False
