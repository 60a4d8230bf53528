"""Windowed transcript counts per category label."""

from __future__ import annotations

import concurrent.futures
import datetime as dt
import logging
import time
from typing import Callable, Iterable, Union

from transcript_logger.adapters.loki.query import QueryClient
from transcript_logger.domain.enums import MessageType, TimeWindow
from transcript_logger.domain.models import QueryResult, StatsWindow, TimeBounds
from transcript_logger.domain.record_builder import LABEL_JOB, LABEL_MESSAGE_TYPE
from transcript_logger.shared.exceptions import InvalidWindowError, StatsError, TranscriptLoggingError

WindowSpec = Union[TimeWindow, str, TimeBounds]

_logger = logging.getLogger("transcript-logger.stats")


def _quote_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_selector(labels: dict[str, str]) -> str:
    rendered = ", ".join(f'{key}="{_quote_label_value(value)}"' for key, value in labels.items())
    return "{" + rendered + "}"


class StatsService:
    def __init__(
        self,
        query_client: QueryClient,
        *,
        job: str,
        categories: Iterable[str] = tuple(item.value for item in MessageType),
        strict_windows: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._query = query_client
        self._job = job
        self._categories = tuple(categories)
        self._strict_windows = strict_windows
        self._clock = clock

    def resolve_window(self, window: WindowSpec) -> tuple[str, int, int]:
        """Return (label, start, end) in seconds for a named or explicit window."""
        if isinstance(window, TimeBounds):
            return "custom", window.start, window.end

        end = int(self._clock())
        try:
            named = TimeWindow(window)
        except ValueError:
            allowed = [item.value for item in TimeWindow]
            if self._strict_windows:
                raise InvalidWindowError(str(window), allowed) from None
            _logger.warning("Unknown time window %r, falling back to 1h", window)
            return str(window), end - TimeWindow.LAST_HOUR.seconds, end
        return named.value, end - named.seconds, end

    def compute_stats(
        self,
        window: WindowSpec = TimeWindow.LAST_HOUR,
        *,
        label: str = LABEL_MESSAGE_TYPE,
        values: Iterable[str] | None = None,
    ) -> StatsWindow:
        """Count log values per ``label`` value, one concurrent query each.

        Any failed query fails the whole call with StatsError.
        """
        time_range, start, end = self.resolve_window(window)
        categories = tuple(values) if values is not None else self._categories

        def run(category: str) -> QueryResult:
            selector = build_selector({LABEL_JOB: self._job, label: category})
            return self._query.query(selector, start, end)

        counts: dict[str, int] = {}
        if categories:
            with concurrent.futures.ThreadPoolExecutor(max_workers=len(categories)) as pool:
                futures = {category: pool.submit(run, category) for category in categories}
                for category, future in futures.items():
                    try:
                        result = future.result()
                    except TranscriptLoggingError as exc:
                        raise StatsError(category, exc) from exc
                    counts[category] = result.total_values

        return StatsWindow(
            time_range=time_range,
            counts=counts,
            total_count=sum(counts.values()),
            start=dt.datetime.fromtimestamp(start, tz=dt.timezone.utc),
            end=dt.datetime.fromtimestamp(end, tz=dt.timezone.utc),
        )


__all__ = ["StatsService", "WindowSpec", "build_selector"]
