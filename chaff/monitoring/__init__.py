"""Prometheus 监控模块。

提供 HTTP 请求、调度周期和端点请求的监控指标。
"""

from chaff.monitoring.metrics import (
    cycles_total,
    daily_quota_used,
    endpoint_requests_total,
    http_request_duration_seconds,
    http_requests_total,
    next_fire_timestamp_seconds,
)

__all__ = [
    "http_requests_total",
    "http_request_duration_seconds",
    "cycles_total",
    "endpoint_requests_total",
    "daily_quota_used",
    "next_fire_timestamp_seconds",
]
