"""TranscriptLogger facade: build, push, search and summarize transcript turns."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping, Optional, Union

import httpx

from transcript_logger.adapters.loki.ingestion import IngestionClient
from transcript_logger.adapters.loki.query import QueryClient
from transcript_logger.config.settings import LokiSettings
from transcript_logger.domain.enums import TimeWindow
from transcript_logger.domain.models import LogRecord, PushOutcome, QueryResult, StatsWindow, TranscriptEvent
from transcript_logger.domain.record_builder import build_record
from transcript_logger.infrastructure.logging import StructuredLogger
from transcript_logger.observability.health import HealthCounters, HealthSnapshot
from transcript_logger.observability.prometheus_export import render_prometheus_metrics
from transcript_logger.security.http_client import LokiHttpClient
from transcript_logger.services.stats_service import StatsService, WindowSpec
from transcript_logger.shared.exceptions import TranscriptLoggingError

EventLike = Union[TranscriptEvent, Mapping[str, Any]]


def _as_event(event: EventLike) -> TranscriptEvent:
    if isinstance(event, TranscriptEvent):
        return event
    return TranscriptEvent.model_validate(event)


class TranscriptLogger:
    """Client for one log backend; owns its own health counters.

    Safe to share between threads: the only mutable state is ``health``.
    """

    def __init__(
        self,
        settings: Optional[LokiSettings] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[LokiHttpClient] = None,
        health: Optional[HealthCounters] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.settings = settings or LokiSettings()
        self.health = health if health is not None else HealthCounters()
        self._log = logger or StructuredLogger()
        self._owns_http = http_client is None
        self._http = http_client or LokiHttpClient(
            self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            headers=self.settings.request_headers(),
            transport=transport,
        )
        self._ingestion = IngestionClient(
            self._http,
            push_path=self.settings.push_path,
            health=self.health,
            batch_workers=self.settings.batch_workers,
        )
        self._query = QueryClient(
            self._http,
            query_path=self.settings.query_path,
            limit=self.settings.query_limit,
        )
        self._stats = StatsService(
            self._query,
            job=self.settings.job,
            categories=self.settings.stats_categories,
            strict_windows=self.settings.strict_windows,
        )

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def build(self, event: EventLike) -> LogRecord:
        return build_record(_as_event(event), job=self.settings.job)

    def log_transcript(self, event: EventLike) -> Optional[LogRecord]:
        """Build and push one turn. Returns None when logging is disabled.

        Raises IngestionError when the backend rejects the push or is unreachable.
        """
        transcript = _as_event(event)
        if not self.enabled:
            self._log.info("transcript_logging_disabled", session_id=transcript.session_id)
            return None

        record = self.build(transcript)
        timer = f"push:{transcript.session_id}:{transcript.turn_number}:{uuid.uuid4().hex[:8]}"
        self._log.operation_start(timer)
        try:
            self._ingestion.push(record)
        except Exception as exc:
            self._log.operation_end(
                timer,
                "transcript_log_failed",
                level="error",
                error=str(exc),
                session_id=transcript.session_id,
                turn_number=transcript.turn_number,
                status_code=getattr(exc, "status_code", None),
            )
            raise
        self._log.operation_end(
            timer,
            "transcript_logged",
            session_id=transcript.session_id,
            turn_number=transcript.turn_number,
        )
        return record

    def log_transcripts(self, events: Iterable[EventLike]) -> list[PushOutcome]:
        """Push a batch; one failed item never stops the rest."""
        outcomes: list[Optional[PushOutcome]] = []
        pending: list[tuple[int, LogRecord]] = []
        for event in events:
            try:
                record = self.build(event)
            except ValueError as exc:
                # Invalid events count as failed ingestions, like rejected pushes.
                if self.enabled:
                    self.health.record_failure()
                outcomes.append(PushOutcome(record=None, ok=False, error=exc))
                continue
            pending.append((len(outcomes), record))
            outcomes.append(None)

        if not self.enabled:
            self._log.info("transcript_logging_disabled", batch_size=len(outcomes))
            for index, record in pending:
                outcomes[index] = PushOutcome(record=record, ok=True)
            return [outcome for outcome in outcomes if outcome is not None]

        pushed = self._ingestion.push_batch([record for _, record in pending])
        for (index, _), outcome in zip(pending, pushed):
            outcomes[index] = outcome
        results = [outcome for outcome in outcomes if outcome is not None]
        failed = [outcome for outcome in results if not outcome.ok]
        self._log.info(
            "transcript_batch_logged",
            batch_size=len(results),
            failed=len(failed),
        )
        return results

    def search_transcripts(
        self,
        selector: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> QueryResult:
        try:
            return self._query.query(selector, start, end)
        except TranscriptLoggingError as exc:
            self._log.error("transcript_query_failed", str(exc), selector=selector)
            raise

    def get_transcript_stats(
        self,
        window: WindowSpec = TimeWindow.LAST_HOUR,
        categories: Optional[Iterable[str]] = None,
    ) -> StatsWindow:
        try:
            return self._stats.compute_stats(window, values=categories)
        except TranscriptLoggingError as exc:
            self._log.error("transcript_stats_failed", str(exc), window=str(window))
            raise

    def snapshot(self) -> HealthSnapshot:
        return self.health.snapshot()

    def get_metrics(self) -> dict[str, object]:
        return self.health.snapshot().as_metrics()

    def render_metrics(self) -> str:
        return render_prometheus_metrics(self.health.snapshot(), job=self.settings.job)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "TranscriptLogger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["TranscriptLogger"]
