"""Shared cross-layer exceptions."""

from transcript_logger.shared.exceptions import (
    BackendError,
    IngestionError,
    InvalidWindowError,
    ParseError,
    QueryError,
    StatsError,
    TranscriptLoggingError,
    TransportError,
)

__all__ = [
    "BackendError",
    "IngestionError",
    "InvalidWindowError",
    "ParseError",
    "QueryError",
    "StatsError",
    "TranscriptLoggingError",
    "TransportError",
]
