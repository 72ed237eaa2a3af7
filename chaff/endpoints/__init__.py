"""端点目录与限流包。

提供候选公共 API 端点、端点选择限流器和 HTTP 客户端。
"""

from chaff.endpoints.catalog import CATALOG, build_catalog
from chaff.endpoints.client import EndpointClient, EndpointClientError, FetchResponse
from chaff.endpoints.domain.models import ApiCategory, ApiLanguage, Endpoint, EndpointState
from chaff.endpoints.rate_limiter import EndpointRateLimiter

__all__ = [
    "CATALOG",
    "build_catalog",
    "EndpointClient",
    "EndpointClientError",
    "FetchResponse",
    "ApiCategory",
    "ApiLanguage",
    "Endpoint",
    "EndpointState",
    "EndpointRateLimiter",
]
