"""端点选择与限流服务。

根据启用的分类/语言过滤端点目录，应用冷却和失败退避后随机选取一个端点。
"""

import logging
import random
from collections.abc import Iterable
from datetime import datetime, timedelta

from chaff.endpoints.catalog import CATALOG
from chaff.endpoints.domain.models import ApiCategory, ApiLanguage, Endpoint, EndpointState

logger = logging.getLogger(__name__)


class EndpointRateLimiter:
    """端点限流器。

    持有静态目录和每个端点的可变运行时状态（按 URL 索引）。
    调用结果通过 ``record_success`` / ``record_failure`` 写入，
    下一次 ``select_endpoint`` 立即可见。
    """

    def __init__(
        self,
        catalog: Iterable[Endpoint] = CATALOG,
        cooldown_seconds: int = 300,
        failure_threshold: int = 3,
        rng: random.Random | None = None,
    ) -> None:
        """初始化限流器。

        Args:
            catalog: 候选端点目录
            cooldown_seconds: 同一端点两次调用的最小间隔（秒）
            failure_threshold: 触发线性退避的连续失败次数
            rng: 随机数源（测试时可注入带种子的实例）
        """
        self._catalog = tuple(catalog)
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._failure_threshold = failure_threshold
        self._rng = rng or random.Random()
        self._states: dict[str, EndpointState] = {}

    @property
    def catalog(self) -> tuple[Endpoint, ...]:
        return self._catalog

    def state_for(self, endpoint: Endpoint) -> EndpointState:
        """返回端点的运行时状态（不存在时为默认值）。"""
        return self._states.get(endpoint.url, EndpointState())

    def filter_enabled(
        self,
        enabled_categories: Iterable[ApiCategory],
        enabled_languages: Iterable[ApiLanguage],
    ) -> list[Endpoint]:
        """按分类和语言过滤目录。

        没有语言标记的端点只按分类过滤。
        """
        categories = set(enabled_categories)
        languages = set(enabled_languages)
        return [
            endpoint
            for endpoint in self._catalog
            if endpoint.category in categories
            and (endpoint.language is None or endpoint.language in languages)
        ]

    def is_eligible(self, endpoint: Endpoint, now: datetime) -> bool:
        """检查端点当前是否可用。

        规则：
        1. 冷却：距上次调用不足 cooldown 时不可用
        2. 退避：连续失败 >= 阈值时，需等待 cooldown × 失败次数
        """
        state = self._states.get(endpoint.url)
        if state is None or state.last_call_time is None:
            return True

        elapsed = now - state.last_call_time
        if elapsed < self._cooldown:
            return False

        if state.consecutive_failures >= self._failure_threshold:
            backoff = self._cooldown * state.consecutive_failures
            if elapsed < backoff:
                return False

        return True

    def select_endpoint(
        self,
        enabled_categories: Iterable[ApiCategory],
        enabled_languages: Iterable[ApiLanguage],
        now: datetime,
    ) -> Endpoint | None:
        """选择一个可用端点。

        Args:
            enabled_categories: 启用的分类
            enabled_languages: 启用的语言
            now: 当前时间

        Returns:
            Endpoint | None: 随机选中的端点；全部处于冷却中时返回 None
        """
        candidates = self.filter_enabled(enabled_categories, enabled_languages)
        available = [e for e in candidates if self.is_eligible(e, now)]

        if not available:
            logger.info(
                "无可用端点（候选 %d 个，全部处于冷却或退避中）", len(candidates)
            )
            return None

        endpoint = self._rng.choice(available)
        logger.debug(
            "选中端点 %s（可用 %d/%d）", endpoint.description, len(available), len(candidates)
        )
        return endpoint

    def record_success(self, endpoint: Endpoint, now: datetime) -> None:
        """记录成功调用：更新调用时间，清零失败计数。"""
        self._states[endpoint.url] = EndpointState(
            last_call_time=now,
            consecutive_failures=0,
        )

    def record_failure(self, endpoint: Endpoint, now: datetime) -> None:
        """记录失败调用：更新调用时间，失败计数 +1。"""
        previous = self.state_for(endpoint)
        failures = previous.consecutive_failures + 1
        self._states[endpoint.url] = EndpointState(
            last_call_time=now,
            consecutive_failures=failures,
        )
        if failures >= self._failure_threshold:
            logger.info(
                "端点 %s 连续失败 %d 次，进入退避（%d 秒）",
                endpoint.description,
                failures,
                int(self._cooldown.total_seconds() * failures),
            )

    def reset(self) -> None:
        """清空所有运行时状态。"""
        self._states.clear()
