"""结构化日志 — JSON line 格式，支持敏感信息脱敏"""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional, TextIO

from transcript_logger.security.redact import redact_sensitive


class StructuredLogger:
    """结构化日志器，输出 JSON line，自动脱敏敏感信息。"""

    def __init__(self, trace_id: Optional[str] = None, output: Optional[TextIO] = None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        output = self._output or sys.stderr
        try:
            # 序列化后做全局脱敏
            line = redact_sensitive(json.dumps(data, ensure_ascii=False, default=str))
            output.write(line + "\n")
            output.flush()
        except Exception as exc:
            # Last-resort fallback to avoid silent logger failures.
            try:
                fallback = {
                    "event": "logger_internal_error",
                    "trace_id": self.trace_id,
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def operation_start(self, operation: str) -> None:
        self._timers[operation] = time.time()

    def operation_end(self, operation: str, event: str, **extra: Any) -> None:
        start = self._timers.pop(operation, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({"event": event, "operation": operation, "duration_ms": duration_ms, **extra})

    def info(self, event: str, **extra: Any) -> None:
        self._emit({"event": event, **extra})

    def error(self, event: str, error: str, **extra: Any) -> None:
        self._emit({"event": event, "level": "error", "error": error, **extra})


__all__ = ["StructuredLogger"]
