"""端点 HTTP 客户端。

封装对公共 API 端点的单次 GET 调用。不做重试：失败由调用方记录，
在下一个计划周期再尝试。
"""

import logging
from dataclasses import dataclass

import httpx
from returns.result import Failure, Result, Success

logger = logging.getLogger(__name__)


class EndpointClientError(Exception):
    """端点客户端错误。

    表示请求未拿到 HTTP 响应（超时、连接错误等）。
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        """初始化错误。

        Args:
            message: 错误消息
            url: 请求地址（如果有）
        """
        self.message = message
        self.url = url
        super().__init__(message)


@dataclass(frozen=True)
class FetchResponse:
    """一次请求的结果摘要。"""

    status_code: int
    byte_length: int

    @property
    def is_success(self) -> bool:
        """2xx 视为成功。"""
        return 200 <= self.status_code < 300


class EndpointClient:
    """端点 HTTP 客户端。

    提供异步 HTTP 调用接口，可作为异步上下文管理器使用。
    """

    DEFAULT_TIMEOUT = 15.0  # 秒

    def __init__(
        self,
        user_agent: str = "Chaff/1.0",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """初始化客户端。

        Args:
            user_agent: 默认 User-Agent 请求头
            timeout: 默认请求超时时间（秒）
        """
        self._user_agent = user_agent
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EndpointClient":
        """进入上下文管理器。"""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """退出上下文管理器。"""
        await self.close()

    def _ensure_client(self) -> None:
        """确保 HTTP 客户端已初始化。"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=True,
            )

    async def close(self) -> None:
        """关闭 HTTP 客户端。"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[FetchResponse, EndpointClientError]:
        """请求指定端点。

        Args:
            url: 请求地址
            headers: 额外请求头
            timeout: 本次请求超时（秒），为 None 时使用默认值

        Returns:
            Result[FetchResponse, EndpointClientError]:
                Success: 拿到 HTTP 响应（任意状态码）
                Failure: 超时、网络错误等未拿到响应的情况
        """
        if not url or not url.strip():
            return Failure(EndpointClientError("请求地址不能为空"))

        self._ensure_client()
        assert self._client is not None

        try:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"端点请求超时: {url} - {e}")
            return Failure(EndpointClientError(f"请求超时: {e}", url=url))
        except httpx.HTTPError as e:
            logger.warning(f"端点网络错误: {url} - {e}")
            return Failure(EndpointClientError(f"网络错误: {e}", url=url))

        result = FetchResponse(
            status_code=response.status_code,
            byte_length=len(response.content),
        )
        if not result.is_success:
            logger.info(f"端点返回非 2xx 状态码: {url} - {response.status_code}")
        return Success(result)
