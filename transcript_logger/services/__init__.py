"""Application services."""

from transcript_logger.services.stats_service import StatsService, build_selector

__all__ = ["StatsService", "build_selector"]
