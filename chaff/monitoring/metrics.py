"""Prometheus 指标定义。

定义所有应用级别的 Prometheus 监控指标。
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP 请求计数器
# 标签: method (HTTP 方法), path (请求路径), status (HTTP 状态码)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

# HTTP 请求延迟直方图
# 标签: method (HTTP 方法), path (请求路径)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0),
)

# 调度周期计数器
# 标签: status (周期结果: executed, cancelled, quota_exhausted, not_due ...)
cycles_total = Counter(
    "chaff_cycles_total",
    "Scheduler cycles by outcome status",
    ["status"],
)

# 端点请求计数器
# 标签: category (端点分类), outcome (success, failure, cancelled)
endpoint_requests_total = Counter(
    "chaff_endpoint_requests_total",
    "Outbound endpoint requests by category and outcome",
    ["category", "outcome"],
)

# 今日已用配额
daily_quota_used = Gauge(
    "chaff_daily_quota_used",
    "Executions counted against today's quota",
)

# 下次触发时间（Unix 秒，无计划时为 0）
next_fire_timestamp_seconds = Gauge(
    "chaff_next_fire_timestamp_seconds",
    "Unix timestamp of the next planned execution, 0 when none",
)
