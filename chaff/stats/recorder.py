"""统计记录服务。

维护有界历史与滚动计数。所有修改都是同步完成的，
调用方在事件循环中看不到中间状态。
"""

import logging
from datetime import datetime

from chaff.clock import Clock
from chaff.endpoints.domain.models import Endpoint
from chaff.stats.domain.models import SearchMode, SearchRecord, SearchStats

logger = logging.getLogger(__name__)


class StatsRecorder:
    """统计记录器。

    与 QuotaTracker 共用 ``Clock.calendar_day`` 作为日界线定义。
    """

    def __init__(
        self,
        stats: SearchStats,
        clock: Clock,
        history_limit: int = 100,
    ) -> None:
        self._stats = stats
        self._clock = clock
        self._history_limit = history_limit

    @property
    def stats(self) -> SearchStats:
        return self._stats

    def snapshot(self) -> SearchStats:
        """返回统计的深拷贝，供只读展示。"""
        return self._stats.model_copy(deep=True)

    def check_and_roll_day(self, now: datetime) -> bool:
        """跨日时清零今日计数并平移周计数。

        同一天内重复调用不产生任何修改。

        Returns:
            bool: 本次调用是否发生了日切
        """
        today = self._clock.calendar_day(now)
        last = self._stats.last_reset_day
        if last is None:
            self._stats.last_reset_day = today
            return False
        if last >= today:
            return False

        self._stats.today_count = 0
        self._stats.last_reset_day = today
        self._stats.weekly_counts = self._stats.weekly_counts[1:] + [0]
        logger.debug("统计日切: %s -> %s", last, today)
        return True

    def record(
        self,
        description: str,
        mode: SearchMode,
        success: bool,
        now: datetime,
        data_size: int | None = None,
        endpoint: Endpoint | None = None,
    ) -> SearchRecord:
        """记录一次调度请求结果。

        Args:
            description: 请求描述（通常为端点描述）
            mode: 请求模式
            success: 是否成功
            now: 发生时间
            data_size: 响应字节数（可选）
            endpoint: 端点元数据（可选）

        Returns:
            SearchRecord: 新插入的历史记录
        """
        self.check_and_roll_day(now)

        self._stats.total_count += 1
        if success:
            self._stats.success_count += 1
        else:
            self._stats.failure_count += 1
        if data_size:
            self._stats.total_bytes += data_size

        self._stats.today_count += 1
        self._stats.weekly_counts[-1] += 1

        record = SearchRecord(
            query=description,
            timestamp=now,
            mode=mode,
            success=success,
            data_size=data_size if data_size else None,
            api_url=endpoint.url if endpoint else None,
            api_category=endpoint.category.value if endpoint else None,
            api_language=endpoint.language.value if endpoint and endpoint.language else None,
        )
        self._push_history(record)
        return record

    def record_manual(self, query: str, now: datetime) -> SearchRecord:
        """记录一次手动搜索。

        手动搜索计入总数和周计数，不计入今日调度数与成功/失败计数。
        """
        self.check_and_roll_day(now)

        self._stats.total_count += 1
        self._stats.weekly_counts[-1] += 1

        record = SearchRecord(
            query=query,
            timestamp=now,
            mode=SearchMode.MANUAL,
            success=True,
        )
        self._push_history(record)
        return record

    def reset(self) -> None:
        """重置为零值（原地修改，持有者的引用保持有效）。"""
        fresh = SearchStats(last_reset_day=self._stats.last_reset_day)
        for name in SearchStats.model_fields:
            setattr(self._stats, name, getattr(fresh, name))
        logger.info("统计已重置")

    def _push_history(self, record: SearchRecord) -> None:
        self._stats.history.insert(0, record)
        if len(self._stats.history) > self._history_limit:
            del self._stats.history[self._history_limit:]
