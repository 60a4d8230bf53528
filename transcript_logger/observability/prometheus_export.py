"""Prometheus exposition renderer for transcript ingestion health."""

from __future__ import annotations

from typing import Any

from transcript_logger.observability.health import HealthSnapshot


def _safe_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _sanitize_label_value(value: Any) -> str:
    text = str(value)
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


def _metric_line(name: str, value: Any, labels: dict[str, Any] | None = None) -> str:
    if labels:
        rendered = ",".join(
            f'{str(key)}="{_sanitize_label_value(label_value)}"'
            for key, label_value in sorted(labels.items(), key=lambda item: item[0])
        )
        return f"{name}{{{rendered}}} {_safe_float(value)}"
    return f"{name} {_safe_float(value)}"


def render_prometheus_metrics(snapshot: HealthSnapshot, *, job: str = "") -> str:
    labels = {"job": job} if job else None
    lines: list[str] = [
        "# HELP transcript_entries_total Transcript entries accepted by the log backend.",
        "# TYPE transcript_entries_total counter",
        _metric_line("transcript_entries_total", snapshot.entries_total, labels),
        "",
        "# HELP transcript_errors_total Transcript pushes that failed.",
        "# TYPE transcript_errors_total counter",
        _metric_line("transcript_errors_total", snapshot.errors_total, labels),
        "",
    ]
    # Omitted until the first successful push.
    if snapshot.last_success_timestamp is not None:
        lines.extend(
            [
                "# HELP last_transcript_timestamp_seconds Wall-clock time of the last successful push.",
                "# TYPE last_transcript_timestamp_seconds gauge",
                _metric_line("last_transcript_timestamp_seconds", snapshot.last_success_timestamp, labels),
                "",
            ]
        )
    return "\n".join(lines).strip() + "\n"


__all__ = ["render_prometheus_metrics"]
