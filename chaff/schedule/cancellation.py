"""取消令牌。

宿主为每次触发分配一个执行期限，令牌在期限到达或被显式取消时触发，
协调器据此中止进行中的网络请求。
"""

import asyncio
import time


class CancellationToken:
    """基于 ``asyncio.Event`` 和单调时钟期限的取消令牌。"""

    def __init__(self, deadline: float | None = None) -> None:
        """初始化令牌。

        Args:
            deadline: ``time.monotonic()`` 下的绝对期限，None 表示无期限
        """
        self._deadline = deadline
        self._event = asyncio.Event()

    @classmethod
    def after(cls, seconds: float) -> "CancellationToken":
        """创建 ``seconds`` 秒后到期的令牌。"""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def cancel(self) -> None:
        self._event.set()

    def remaining(self) -> float | None:
        """剩余秒数；无期限时返回 None。"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    async def wait(self) -> None:
        """等待令牌被取消或到期。"""
        remaining = self.remaining()
        if remaining is None:
            await self._event.wait()
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            self._event.set()
