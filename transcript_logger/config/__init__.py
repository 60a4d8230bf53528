"""Runtime configuration helpers."""

from transcript_logger.config.settings import LokiSettings, load_settings

__all__ = ["LokiSettings", "load_settings"]
