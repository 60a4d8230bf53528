"""Shared (non-domain) exceptions."""

from __future__ import annotations


class TranscriptLoggingError(Exception):
    """Base error for the transcript logging client."""

    retryable = False


class TransportError(TranscriptLoggingError):
    """No response was obtained (connection refused, DNS, timeout)."""

    retryable = True

    def __init__(self, endpoint: str, message: str, *, timed_out: bool = False):
        self.endpoint = endpoint
        self.timed_out = timed_out
        super().__init__(f"[{endpoint}] {message}")


class BackendError(TranscriptLoggingError):
    """The backend answered with a non-2xx status."""

    def __init__(self, endpoint: str, status_code: int, body: str):
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{endpoint}] backend responded with status {status_code}: {body}")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code >= 500 or self.status_code == 429


class ParseError(TranscriptLoggingError):
    """A response body does not match the expected query-result shape."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(f"[{endpoint}] unexpected response format: {message}")


class _OperationError(TranscriptLoggingError):
    """Wraps a transport/backend failure for a client operation."""

    def __init__(self, message: str, cause: TranscriptLoggingError):
        self.cause = cause
        super().__init__(message)

    @property
    def status_code(self) -> int | None:
        return getattr(self.cause, "status_code", None)

    @property
    def body(self) -> str | None:
        return getattr(self.cause, "body", None)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return bool(self.cause.retryable)


class IngestionError(_OperationError):
    """Pushing a record to the backend failed."""


class QueryError(_OperationError):
    """A range query against the backend failed."""


class StatsError(TranscriptLoggingError):
    """At least one category query failed; no partial statistics are returned."""

    def __init__(self, category: str, cause: TranscriptLoggingError):
        self.category = category
        self.cause = cause
        super().__init__(f"statistics query for category {category!r} failed: {cause}")


class InvalidWindowError(TranscriptLoggingError, ValueError):
    """Unrecognized named statistics window."""

    def __init__(self, window: str, allowed: list[str]):
        self.window = window
        super().__init__(f"unknown time window {window!r}; expected one of {', '.join(allowed)}")
