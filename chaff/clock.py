"""时钟与日历适配器。

封装当前时间、日界线与小时/星期提取，所有跨日逻辑都经过这里，便于测试。
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


class Clock:
    """带时区的系统时钟。

    配额和统计共用同一个 ``calendar_day`` 定义，保证两者对“今天”的判断一致。
    """

    def __init__(self, timezone: str = "UTC") -> None:
        self._tz = ZoneInfo(timezone)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        """返回当前时区的当前时间。"""
        return datetime.now(self._tz)

    def localize(self, dt: datetime) -> datetime:
        """转换到本时钟的时区；naive 时间视为 UTC。"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=ZoneInfo("UTC"))
        return dt.astimezone(self._tz)

    def calendar_day(self, dt: datetime) -> date:
        return self.localize(dt).date()

    def hour_of(self, dt: datetime) -> int:
        return self.localize(dt).hour

    def weekday_of(self, dt: datetime) -> int:
        """ISO 星期：1=周一 ... 7=周日。"""
        return self.localize(dt).isoweekday()

    def next_midnight(self, dt: datetime) -> datetime:
        """返回 ``dt`` 之后的下一个本地零点。"""
        local = self.localize(dt)
        tomorrow = local.date() + timedelta(days=1)
        return datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=self._tz)


class FrozenClock(Clock):
    """可手动设置和推进的时钟，用于测试和调试脚本。"""

    def __init__(self, start: datetime, timezone: str = "UTC") -> None:
        super().__init__(timezone)
        self._now = self.localize(start)

    def now(self) -> datetime:
        return self._now

    def set(self, dt: datetime) -> None:
        self._now = self.localize(dt)

    def advance(self, **kwargs: float) -> datetime:
        """按 ``timedelta`` 参数推进时间，返回推进后的时间。"""
        self._now = self._now + timedelta(**kwargs)
        return self._now
