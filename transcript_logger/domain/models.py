"""Pydantic domain models."""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN = "unknown"
NO_SAFETY_FLAGS = "none"


class TranscriptEvent(BaseModel):
    """One conversational turn as reported by the voice/chat server."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    session_id: str = Field(alias="sessionId", min_length=1)
    turn_number: int = Field(alias="turnNumber", ge=0)
    timestamp: int = Field(description="Event time in whole seconds since epoch")
    message_type: str = Field(alias="messageType")
    content: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    context: Optional[dict[str, Any]] = None


def _text_or_unknown(value: Any) -> str:
    if value is None:
        return UNKNOWN
    text = str(value)
    return text if text else UNKNOWN


def _level_of(metadata: Mapping[str, Any], key: str) -> str:
    node = metadata.get(key)
    if isinstance(node, Mapping):
        return _text_or_unknown(node.get("level"))
    return UNKNOWN


@dataclass(frozen=True)
class RecordAnnotations:
    """Optional metadata/context fields resolved with their defaults.

    Empty strings are treated as missing. Safety flags keep their input order.
    """

    safety_flags: tuple[str, ...] = ()
    vocabulary_complexity: str = UNKNOWN
    grammar_complexity: str = UNKNOWN
    conversation_flow: str = UNKNOWN
    user_intent: str = UNKNOWN
    turn_duration: float | int = 0
    message_id: str = UNKNOWN

    @property
    def safety_flags_label(self) -> str:
        return ",".join(self.safety_flags) if self.safety_flags else NO_SAFETY_FLAGS

    @classmethod
    def from_event(cls, event: TranscriptEvent) -> "RecordAnnotations":
        metadata: Mapping[str, Any] = event.metadata or {}
        context: Mapping[str, Any] = event.context or {}

        raw_flags = metadata.get("safetyFlags")
        flags = tuple(str(flag) for flag in raw_flags) if isinstance(raw_flags, (list, tuple)) else ()

        duration = metadata.get("turnDuration")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0:
            duration = 0

        return cls(
            safety_flags=flags,
            vocabulary_complexity=_level_of(metadata, "vocabularyComplexity"),
            grammar_complexity=_level_of(metadata, "grammarComplexity"),
            conversation_flow=_text_or_unknown(context.get("conversationFlow")),
            user_intent=_text_or_unknown(context.get("userIntent")),
            turn_duration=duration,
            message_id=_text_or_unknown(metadata.get("messageId")),
        )


class LogRecord(BaseModel):
    """A transcript turn ready for the push endpoint."""

    model_config = ConfigDict(frozen=True)

    labels: dict[str, str]
    timestamp_ns: int
    payload: str

    def payload_object(self) -> dict[str, Any]:
        return json.loads(self.payload)

    def to_value(self) -> list[str]:
        return [str(self.timestamp_ns), self.payload]


class QueryValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp_ns: int
    line: str

    def payload_object(self) -> Any:
        return json.loads(self.line)


class QueryStream(BaseModel):
    labels: dict[str, str] = Field(default_factory=dict)
    values: list[QueryValue] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Streams in backend order; values are not re-sorted or deduplicated."""

    streams: list[QueryStream] = Field(default_factory=list)

    @property
    def total_values(self) -> int:
        return sum(len(stream.values) for stream in self.streams)


class TimeBounds(BaseModel):
    """Explicit window in whole seconds since epoch."""

    start: int
    end: int

    @model_validator(mode="after")
    def _check_order(self) -> "TimeBounds":
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must not be after end ({self.end})")
        return self


class StatsWindow(BaseModel):
    time_range: str
    counts: dict[str, int] = Field(default_factory=dict)
    total_count: int = 0
    start: dt.datetime
    end: dt.datetime

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()


class PushOutcome(BaseModel):
    """Result of one record inside a batch push."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    record: Optional[LogRecord] = None
    ok: bool
    error: Optional[Exception] = None

    @property
    def status(self) -> str:
        return "success" if self.ok else "error"
