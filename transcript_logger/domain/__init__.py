"""Domain models and the record builder."""

from transcript_logger.domain.enums import MessageType, TimeWindow
from transcript_logger.domain.models import (
    LogRecord,
    PushOutcome,
    QueryResult,
    QueryStream,
    QueryValue,
    RecordAnnotations,
    StatsWindow,
    TimeBounds,
    TranscriptEvent,
)
from transcript_logger.domain.record_builder import build_record, seconds_to_nanos

__all__ = [
    "LogRecord",
    "MessageType",
    "PushOutcome",
    "QueryResult",
    "QueryStream",
    "QueryValue",
    "RecordAnnotations",
    "StatsWindow",
    "TimeBounds",
    "TimeWindow",
    "TranscriptEvent",
    "build_record",
    "seconds_to_nanos",
]
