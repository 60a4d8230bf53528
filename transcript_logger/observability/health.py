"""In-process ingestion health counters."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class HealthSnapshot:
    entries_total: int = 0
    errors_total: int = 0
    last_success_timestamp: Optional[float] = None

    def as_metrics(self) -> dict[str, object]:
        return {
            "transcript_entries_total": self.entries_total,
            "transcript_errors_total": self.errors_total,
            "last_transcript_timestamp": self.last_success_timestamp,
        }


class HealthCounters:
    """Success/failure totals for one client instance.

    Written by the ingestion client only; any thread may take a snapshot.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._entries_total = 0
        self._errors_total = 0
        self._last_success_timestamp: Optional[float] = None

    def record_success(self) -> None:
        now = self._clock()
        with self._lock:
            self._entries_total += 1
            self._last_success_timestamp = now

    def record_failure(self) -> None:
        with self._lock:
            self._errors_total += 1

    def snapshot(self) -> HealthSnapshot:
        with self._lock:
            return HealthSnapshot(
                entries_total=self._entries_total,
                errors_total=self._errors_total,
                last_success_timestamp=self._last_success_timestamp,
            )


__all__ = ["HealthCounters", "HealthSnapshot"]
