"""每日配额服务。"""

import logging
from datetime import datetime

from chaff.clock import Clock
from chaff.schedule.domain.models import QuotaState

logger = logging.getLogger(__name__)


class QuotaTracker:
    """每日配额跟踪器。

    读取计数前必须先调用 ``check_and_roll_day``，避免看到前一天的计数。
    """

    def __init__(self, state: QuotaState, clock: Clock) -> None:
        self._state = state
        self._clock = clock

    @property
    def state(self) -> QuotaState:
        return self._state

    @property
    def daily_count(self) -> int:
        return self._state.daily_count

    def check_and_roll_day(self, now: datetime) -> bool:
        """跨日时清零计数。

        Returns:
            bool: 本次调用是否发生了重置；同一天内重复调用始终返回 False
        """
        today = self._clock.calendar_day(now)
        last = self._state.last_reset_day
        if last is not None and last >= today:
            return False

        self._state.daily_count = 0
        self._state.last_reset_day = today
        if last is not None:
            logger.info("每日配额已重置: %s -> %s", last, today)
        return last is not None

    def has_quota(self, limit: int) -> bool:
        """``limit == 0`` 表示不限制。"""
        return limit == 0 or self._state.daily_count < limit

    def increment(self) -> None:
        self._state.daily_count += 1
