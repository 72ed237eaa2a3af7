"""Prometheus 监控中间件。

记录 HTTP 请求的计数和延迟指标。
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from chaff.monitoring import metrics


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Prometheus 监控中间件。

    自动记录所有 HTTP 请求的计数和延迟。
    """

    def __init__(
        self,
        app: ASGIApp,
        excluded_paths: list[str] | None = None,
    ) -> None:
        """初始化中间件。

        Args:
            app: ASGI 应用
            excluded_paths: 排除监控的路径列表
        """
        super().__init__(app)
        self.excluded_paths = set(excluded_paths or ["/metrics"])

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # 路由均为静态路径，未匹配的路径归为一类，避免标签基数膨胀
        route = request.scope.get("route")
        path = getattr(route, "path", "unmatched")

        metrics.http_requests_total.labels(
            method=request.method,
            path=path,
            status=str(response.status_code),
        ).inc()

        metrics.http_request_duration_seconds.labels(
            method=request.method,
            path=path,
        ).observe(duration)

        return response
