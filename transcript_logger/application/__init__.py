"""Application-level entry points."""

from transcript_logger.application.transcript_logger import TranscriptLogger

__all__ = ["TranscriptLogger"]
