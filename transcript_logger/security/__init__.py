"""HTTP transport and redaction helpers."""

from transcript_logger.security.http_client import LokiHttpClient, clamp_timeout
from transcript_logger.security.redact import redact_sensitive

__all__ = ["LokiHttpClient", "clamp_timeout", "redact_sensitive"]
