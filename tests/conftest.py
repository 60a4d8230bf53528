"""pytest 全局 fixtures — 测试环境隔离"""

import io

import pytest

from transcript_logger.infrastructure.logging import StructuredLogger


@pytest.fixture(autouse=True)
def clean_loki_env(monkeypatch):
    """默认清空 LOKI_* / TRANSCRIPT_* 环境变量，确保测试不依赖外部配置"""
    for name in (
        "LOKI_URL",
        "LOKI_TIMEOUT_SECONDS",
        "LOKI_TENANT_ID",
        "LOKI_QUERY_LIMIT",
        "TRANSCRIPT_LOG_JOB",
        "TRANSCRIPT_LOGGING_ENABLED",
        "TRANSCRIPT_STATS_CATEGORIES",
        "TRANSCRIPT_STRICT_WINDOWS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def structured_logger(log_stream):
    return StructuredLogger(trace_id="test", output=log_stream)
