"""日志后端 HTTP 客户端 — 所有 Loki 调用的统一出口

职责：
  1. 统一超时（上下限钳制）
  2. 把失败归类为 TransportError / BackendError / ParseError
  3. 日志与异常信息脱敏
  4. 隔离 httpx 依赖

不做自动重试：重试策略由调用方决定。
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from transcript_logger.security.redact import redact_sensitive
from transcript_logger.shared.exceptions import BackendError, ParseError, TransportError

_TIMEOUT_FLOOR_SECONDS = 0.5
_TIMEOUT_CAP_SECONDS = 60.0

_logger = logging.getLogger("transcript-logger.http")


def clamp_timeout(value: float) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 10.0
    return max(_TIMEOUT_FLOOR_SECONDS, min(_TIMEOUT_CAP_SECONDS, seconds))


class LokiHttpClient:
    """封装 httpx.Client；可注入 transport 以便测试替换后端。"""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._timeout = clamp_timeout(timeout)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=self._timeout,
            headers=headers or {},
            transport=transport,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    def _send(self, endpoint: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, path, timeout=self._timeout, **kwargs)
        except httpx.TimeoutException:
            raise TransportError(endpoint, f"请求超时（{self._timeout}s）", timed_out=True) from None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            safe_msg = redact_sensitive(str(e))
            raise TransportError(endpoint, f"网络请求失败: {safe_msg}") from None
        except Exception as e:
            # 其余异常一律视为传输失败
            safe_msg = redact_sensitive(str(e))
            raise TransportError(endpoint, f"未知错误: {type(e).__name__}: {safe_msg}") from e

        if not resp.is_success:
            # 后端返回的状态码与响应体原样透出
            _logger.warning(
                "%s %s -> HTTP %s: %s",
                method,
                endpoint,
                resp.status_code,
                redact_sensitive(resp.text[:500]),
            )
            raise BackendError(endpoint, resp.status_code, resp.text)
        return resp

    def post_json(self, path: str, payload: dict[str, Any], *, endpoint: str = "push") -> httpx.Response:
        """POST 一个 JSON 请求体，2xx 以外一律抛出。"""
        return self._send(endpoint, "POST", path, json=payload)

    def get_json(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        endpoint: str = "query",
    ) -> Any:
        """
        执行 GET 请求并返回解码后的 JSON。
        响应体不是合法 JSON 时抛出 ParseError。
        """
        resp = self._send(endpoint, "GET", path, params=params)
        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(endpoint, f"response body is not JSON ({e})") from None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["LokiHttpClient", "clamp_timeout"]
