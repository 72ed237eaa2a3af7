"""调度策略服务。

判断给定时间是否处于活跃时段。无状态，仅依赖配置和时钟。
"""

from datetime import datetime

from chaff.clock import Clock
from chaff.schedule.domain.models import ActiveWindow, DaySchedule, GateReason


class SchedulePolicy:
    """调度策略。"""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def today_schedule(self, window: ActiveWindow, now: datetime) -> DaySchedule | None:
        """周计划模式下查找当天的时段。"""
        weekday = self._clock.weekday_of(now)
        for day in window.weekly_schedule:
            if day.day_of_week == weekday:
                return day
        return None

    def is_within_active_window(self, window: ActiveWindow, now: datetime) -> bool:
        """判断 ``now`` 是否处于活跃时段。

        固定模式：小时落在 [start, end) 内，start > end 时跨越午夜。
        周计划模式：当天缺失或未启用返回 False，否则按 [start, end) 判断，
        不支持跨越午夜。
        """
        return self.evaluate(window, now) is None

    def evaluate(self, window: ActiveWindow, now: datetime) -> GateReason | None:
        """返回禁止原因；处于活跃时段时返回 None。"""
        hour = self._clock.hour_of(now)

        if not window.use_weekly_schedule:
            if _in_range(hour, window.start_hour, window.end_hour, wrap=True):
                return None
            return GateReason.OUTSIDE_WINDOW

        day = self.today_schedule(window, now)
        if day is None or not day.is_enabled:
            return GateReason.DAY_DISABLED
        # TODO: 确认周计划是否应与固定模式一样支持跨午夜时段
        if _in_range(hour, day.start_hour, day.end_hour, wrap=False):
            return None
        return GateReason.OUTSIDE_WINDOW

    @staticmethod
    def describe(window: ActiveWindow) -> str:
        """生成时段的展示文本。"""
        if not window.use_weekly_schedule:
            return f"{window.start_hour}:00 - {window.end_hour}:00 Daily"

        days = window.weekly_schedule
        if len(days) == 7 and all(d.is_enabled for d in days):
            first = days[0]
            if all(d.start_hour == first.start_hour and d.end_hour == first.end_hour for d in days):
                return f"{first.start_hour}:00 - {first.end_hour}:00 Daily"
        return "Custom Schedule"


def _in_range(hour: int, start: int, end: int, wrap: bool) -> bool:
    if wrap and start > end:
        return hour >= start or hour < end
    return start <= hour < end
