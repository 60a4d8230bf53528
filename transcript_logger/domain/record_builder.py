"""Transcript turn -> label-indexed log record.

Pure transformation, no I/O. The label set is fixed so the backend's stream
cardinality stays predictable; everything else travels in the JSON payload.
"""

from __future__ import annotations

import datetime as dt
import json
from typing import Any, Mapping

from transcript_logger.domain.models import LogRecord, RecordAnnotations, TranscriptEvent

NANOS_PER_SECOND = 1_000_000_000

LABEL_JOB = "job"
LABEL_SESSION_ID = "session_id"
LABEL_MESSAGE_TYPE = "message_type"
LABEL_TURN_NUMBER = "turn_number"
LABEL_CONTENT_LENGTH = "content_length"
LABEL_SAFETY_FLAGS = "safety_flags"
LABEL_VOCABULARY_COMPLEXITY = "vocabulary_complexity"
LABEL_GRAMMAR_COMPLEXITY = "grammar_complexity"
LABEL_CONVERSATION_FLOW = "conversation_flow"
LABEL_USER_INTENT = "user_intent"


def seconds_to_nanos(seconds: int) -> int:
    # Exact integer nanoseconds, never a float product.
    return int(seconds) * NANOS_PER_SECOND


def iso_timestamp(seconds: int) -> str:
    moment = dt.datetime.fromtimestamp(int(seconds), tz=dt.timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def build_labels(event: TranscriptEvent, annotations: RecordAnnotations, *, job: str) -> dict[str, str]:
    content_length = len(event.content) if event.content else 0
    return {
        LABEL_JOB: job,
        LABEL_SESSION_ID: event.session_id,
        LABEL_MESSAGE_TYPE: event.message_type,
        LABEL_TURN_NUMBER: str(event.turn_number),
        LABEL_CONTENT_LENGTH: str(content_length),
        LABEL_SAFETY_FLAGS: annotations.safety_flags_label,
        LABEL_VOCABULARY_COMPLEXITY: annotations.vocabulary_complexity,
        LABEL_GRAMMAR_COMPLEXITY: annotations.grammar_complexity,
        LABEL_CONVERSATION_FLOW: annotations.conversation_flow,
        LABEL_USER_INTENT: annotations.user_intent,
    }


def build_payload(event: TranscriptEvent, annotations: RecordAnnotations) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": iso_timestamp(event.timestamp),
        "level": "info",
        "message": "Transcript recorded",
        "sessionId": event.session_id,
        "turnNumber": event.turn_number,
        "messageType": event.message_type,
    }
    # Absent optional fields are left out rather than serialized as null.
    if event.content is not None:
        payload["content"] = event.content
    if event.metadata is not None:
        payload["metadata"] = event.metadata
    if event.context is not None:
        payload["context"] = event.context
    payload.update(
        {
            "contentLength": len(event.content) if event.content else 0,
            "safetyFlags": list(annotations.safety_flags),
            "vocabularyComplexity": annotations.vocabulary_complexity,
            "grammarComplexity": annotations.grammar_complexity,
            "turnDuration": annotations.turn_duration,
            "messageId": annotations.message_id,
        }
    )
    return payload


def build_record(event: TranscriptEvent | Mapping[str, Any], *, job: str) -> LogRecord:
    """Build the log record for one transcript turn.

    Never fails for a valid event: missing optional fields fall back to
    ``unknown`` (or ``none`` for an empty safety-flag list).
    """
    if not isinstance(event, TranscriptEvent):
        event = TranscriptEvent.model_validate(event)
    annotations = RecordAnnotations.from_event(event)
    payload = build_payload(event, annotations)
    return LogRecord(
        labels=build_labels(event, annotations, job=job),
        timestamp_ns=seconds_to_nanos(event.timestamp),
        payload=json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str),
    )


__all__ = [
    "LABEL_CONVERSATION_FLOW",
    "LABEL_CONTENT_LENGTH",
    "LABEL_GRAMMAR_COMPLEXITY",
    "LABEL_JOB",
    "LABEL_MESSAGE_TYPE",
    "LABEL_SAFETY_FLAGS",
    "LABEL_SESSION_ID",
    "LABEL_TURN_NUMBER",
    "LABEL_USER_INTENT",
    "LABEL_VOCABULARY_COMPLEXITY",
    "NANOS_PER_SECOND",
    "build_labels",
    "build_payload",
    "build_record",
    "iso_timestamp",
    "seconds_to_nanos",
]
