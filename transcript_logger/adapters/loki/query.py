"""Range-query client for the Loki read endpoint."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from transcript_logger.adapters.loki.wire import decode_query_response
from transcript_logger.domain.models import QueryResult
from transcript_logger.domain.record_builder import seconds_to_nanos
from transcript_logger.security.http_client import LokiHttpClient
from transcript_logger.shared.exceptions import BackendError, QueryError, TransportError

DEFAULT_LOOKBACK_SECONDS = 24 * 60 * 60

_logger = logging.getLogger("transcript-logger.query")


class QueryClient:
    def __init__(
        self,
        http: LokiHttpClient,
        *,
        query_path: str = "/loki/api/v1/query_range",
        limit: Optional[int] = 5000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._query_path = query_path
        self._limit = limit
        self._clock = clock

    def resolve_bounds(self, start: Optional[int], end: Optional[int]) -> tuple[int, int]:
        """Fill missing bounds: end defaults to now, start to end - 24h."""
        resolved_end = int(end) if end is not None else int(self._clock())
        resolved_start = int(start) if start is not None else resolved_end - DEFAULT_LOOKBACK_SECONDS
        return resolved_start, resolved_end

    def query(self, selector: str, start: Optional[int] = None, end: Optional[int] = None) -> QueryResult:
        """Run ``selector`` over [start, end] (seconds) and return streams in backend order.

        The selector is sent verbatim. Raises QueryError for transport or status
        failures and ParseError when the body does not have the expected shape.
        """
        start_s, end_s = self.resolve_bounds(start, end)
        params: dict[str, object] = {
            "query": selector,
            "start": str(seconds_to_nanos(start_s)),
            "end": str(seconds_to_nanos(end_s)),
        }
        if self._limit:
            params["limit"] = self._limit

        try:
            data = self._http.get_json(self._query_path, params=params, endpoint="query")
        except TransportError as exc:
            raise QueryError(f"Failed to query Loki: {exc}", exc) from exc
        except BackendError as exc:
            raise QueryError(f"Loki responded with status {exc.status_code}: {exc.body}", exc) from exc

        result = decode_query_response(data, endpoint="query")
        _logger.debug("query %s returned %d streams", selector, len(result.streams))
        return result


__all__ = ["DEFAULT_LOOKBACK_SECONDS", "QueryClient"]
