"""Cross-cutting infrastructure utilities."""

from transcript_logger.infrastructure.logging import StructuredLogger

__all__ = ["StructuredLogger"]
