"""Loki push/query wire shapes.

Push body::

    {"streams": [{"stream": {label: value}, "values": [["<ns>", "<line>"], ...]}]}

Query response::

    {"status": "success", "data": {"resultType": "streams", "result": [<stream>, ...]}}
"""

from __future__ import annotations

from typing import Any, Iterable

from transcript_logger.domain.models import LogRecord, QueryResult, QueryStream, QueryValue
from transcript_logger.shared.exceptions import ParseError


def _label_key(labels: dict[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(labels.items()))


def encode_push_body(records: Iterable[LogRecord]) -> dict[str, Any]:
    """Group records by identical label set, keeping first-seen order."""
    streams: dict[tuple[tuple[str, str], ...], dict[str, Any]] = {}
    for record in records:
        key = _label_key(record.labels)
        stream = streams.get(key)
        if stream is None:
            stream = {"stream": dict(record.labels), "values": []}
            streams[key] = stream
        stream["values"].append(record.to_value())
    return {"streams": list(streams.values())}


def _parse_value(raw: Any, endpoint: str, where: str) -> QueryValue:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        raise ParseError(endpoint, f"{where} is not a [timestamp, line] pair")
    ts_raw, line = raw[0], raw[1]
    # Timestamps are nanosecond digit strings.
    if not isinstance(ts_raw, str) or not ts_raw.isdigit():
        raise ParseError(endpoint, f"{where} has a non-integer timestamp {ts_raw!r}")
    timestamp_ns = int(ts_raw)
    if not isinstance(line, str):
        raise ParseError(endpoint, f"{where} has a non-string log line")
    return QueryValue(timestamp_ns=timestamp_ns, line=line)


def decode_query_response(data: Any, *, endpoint: str = "query") -> QueryResult:
    if not isinstance(data, dict):
        raise ParseError(endpoint, "top-level JSON value is not an object")
    body = data.get("data")
    if not isinstance(body, dict):
        raise ParseError(endpoint, "missing 'data' object")
    result_type = body.get("resultType")
    if result_type is not None and result_type != "streams":
        raise ParseError(endpoint, f"resultType is {result_type!r}, expected 'streams'")
    result = body.get("result")
    if not isinstance(result, list):
        raise ParseError(endpoint, "'data.result' is not a list")

    streams: list[QueryStream] = []
    for index, raw_stream in enumerate(result):
        if not isinstance(raw_stream, dict):
            raise ParseError(endpoint, f"result[{index}] is not an object")
        labels = raw_stream.get("stream", {})
        values = raw_stream.get("values", [])
        if not isinstance(labels, dict):
            raise ParseError(endpoint, f"result[{index}].stream is not an object")
        if not isinstance(values, list):
            raise ParseError(endpoint, f"result[{index}].values is not a list")
        streams.append(
            QueryStream(
                labels={str(key): str(value) for key, value in labels.items()},
                values=[
                    _parse_value(raw, endpoint, f"result[{index}].values[{pos}]")
                    for pos, raw in enumerate(values)
                ],
            )
        )
    return QueryResult(streams=streams)


__all__ = ["decode_query_response", "encode_push_body"]
