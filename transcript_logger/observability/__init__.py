"""Observability utilities."""

from transcript_logger.observability.health import HealthCounters, HealthSnapshot
from transcript_logger.observability.prometheus_export import render_prometheus_metrics

__all__ = ["HealthCounters", "HealthSnapshot", "render_prometheus_metrics"]
