"""Loki push and query adapters."""

from transcript_logger.adapters.loki.ingestion import IngestionClient
from transcript_logger.adapters.loki.query import QueryClient
from transcript_logger.adapters.loki.wire import decode_query_response, encode_push_body

__all__ = ["IngestionClient", "QueryClient", "decode_query_response", "encode_push_body"]
