"""Transcript logging client for a Loki-style log backend."""

from transcript_logger.application.transcript_logger import TranscriptLogger
from transcript_logger.config.settings import LokiSettings, load_settings
from transcript_logger.domain.models import LogRecord, QueryResult, StatsWindow, TranscriptEvent
from transcript_logger.domain.record_builder import build_record

__all__ = [
    "LogRecord",
    "LokiSettings",
    "QueryResult",
    "StatsWindow",
    "TranscriptEvent",
    "TranscriptLogger",
    "build_record",
    "load_settings",
]
