"""Push client for the Loki write endpoint."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Sequence

from transcript_logger.adapters.loki.wire import encode_push_body
from transcript_logger.domain.models import LogRecord, PushOutcome
from transcript_logger.observability.health import HealthCounters
from transcript_logger.security.http_client import LokiHttpClient
from transcript_logger.shared.exceptions import (
    BackendError,
    IngestionError,
    TranscriptLoggingError,
    TransportError,
)

_logger = logging.getLogger("transcript-logger.ingest")


class IngestionClient:
    """Pushes log records one request per call; no retries.

    Every attempt updates ``health`` exactly once: success on a 2xx response,
    failure on any other status or on a transport error (timeouts included).
    """

    def __init__(
        self,
        http: LokiHttpClient,
        *,
        push_path: str = "/loki/api/v1/push",
        health: HealthCounters | None = None,
        batch_workers: int = 1,
    ) -> None:
        self._http = http
        self._push_path = push_path
        self._batch_workers = max(1, int(batch_workers))
        self.health = health if health is not None else HealthCounters()

    def push(self, record: LogRecord) -> None:
        body = encode_push_body([record])
        try:
            self._http.post_json(self._push_path, body, endpoint="push")
        except TransportError as exc:
            self.health.record_failure()
            raise IngestionError(f"Failed to send to Loki: {exc}", exc) from exc
        except BackendError as exc:
            self.health.record_failure()
            raise IngestionError(
                f"Loki responded with status {exc.status_code}: {exc.body}", exc
            ) from exc
        self.health.record_success()

    def _push_one(self, record: LogRecord) -> PushOutcome:
        try:
            self.push(record)
        except TranscriptLoggingError as exc:
            _logger.warning("push failed for %s: %s", record.labels.get("session_id", "?"), exc)
            return PushOutcome(record=record, ok=False, error=exc)
        return PushOutcome(record=record, ok=True)

    def push_batch(self, records: Sequence[LogRecord]) -> list[PushOutcome]:
        """Push every record independently; outcomes keep input order."""
        if self._batch_workers <= 1 or len(records) <= 1:
            return [self._push_one(record) for record in records]
        with concurrent.futures.ThreadPoolExecutor(max_workers=self._batch_workers) as pool:
            return list(pool.map(self._push_one, records))


__all__ = ["IngestionClient"]
