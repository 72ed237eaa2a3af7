"""SchedulePolicy 单元测试。

测试固定时段（含跨午夜）和周计划模式的判断。
"""

from datetime import datetime, timezone

import pytest

from chaff.clock import Clock
from chaff.schedule.domain.models import ActiveWindow, DaySchedule, GateReason, default_week
from chaff.schedule.services.policy import SchedulePolicy


@pytest.fixture
def policy():
    return SchedulePolicy(Clock("UTC"))


def _at(hour: int, day: int = 2) -> datetime:
    """2026-03-02 是周一。"""
    return datetime(2026, 3, day, hour, 0, tzinfo=timezone.utc)


class TestFixedWindow:
    """测试固定时段模式。"""

    def test_daytime_window(self, policy):
        window = ActiveWindow(start_hour=7, end_hour=23)

        assert policy.is_within_active_window(window, _at(7))
        assert policy.is_within_active_window(window, _at(22))
        assert not policy.is_within_active_window(window, _at(23))
        assert not policy.is_within_active_window(window, _at(6))

    def test_overnight_window_wraps(self, policy):
        """22→6 时段：23 点和 2 点在内，10 点不在。"""
        window = ActiveWindow(start_hour=22, end_hour=6)

        assert policy.is_within_active_window(window, _at(23))
        assert policy.is_within_active_window(window, _at(2))
        assert not policy.is_within_active_window(window, _at(10))
        assert not policy.is_within_active_window(window, _at(6))

    def test_outside_reason(self, policy):
        window = ActiveWindow(start_hour=7, end_hour=23)
        assert policy.evaluate(window, _at(3)) == GateReason.OUTSIDE_WINDOW
        assert policy.evaluate(window, _at(12)) is None


class TestWeeklySchedule:
    """测试周计划模式。"""

    def test_disabled_day(self, policy):
        """当天未启用时返回 day_disabled。"""
        week = default_week(7, 23)
        week[0] = DaySchedule(day_of_week=1, is_enabled=False, start_hour=7, end_hour=23)
        window = ActiveWindow(use_weekly_schedule=True, weekly_schedule=week)

        assert policy.evaluate(window, _at(12, day=2)) == GateReason.DAY_DISABLED
        assert policy.evaluate(window, _at(12, day=3)) is None

    def test_missing_day(self, policy):
        """周计划中缺少当天时视为未启用。"""
        window = ActiveWindow(
            use_weekly_schedule=True,
            weekly_schedule=[DaySchedule(day_of_week=2, start_hour=7, end_hour=23)],
        )
        assert not policy.is_within_active_window(window, _at(12, day=2))
        assert policy.is_within_active_window(window, _at(12, day=3))

    def test_per_day_hours(self, policy):
        week = default_week(7, 23)
        week[6] = DaySchedule(day_of_week=7, start_hour=10, end_hour=14)
        window = ActiveWindow(use_weekly_schedule=True, weekly_schedule=week)

        # 2026-03-08 是周日
        assert policy.is_within_active_window(window, _at(11, day=8))
        assert policy.evaluate(window, _at(9, day=8)) == GateReason.OUTSIDE_WINDOW

    def test_weekly_window_does_not_wrap(self, policy):
        """周计划模式下 start > end 不跨越午夜。"""
        week = [DaySchedule(day_of_week=d, start_hour=22, end_hour=6) for d in range(1, 8)]
        window = ActiveWindow(use_weekly_schedule=True, weekly_schedule=week)

        assert not policy.is_within_active_window(window, _at(23))
        assert not policy.is_within_active_window(window, _at(2))

    def test_duplicate_days_rejected(self):
        with pytest.raises(ValueError):
            ActiveWindow(
                use_weekly_schedule=True,
                weekly_schedule=[DaySchedule(day_of_week=1), DaySchedule(day_of_week=1)],
            )


class TestDescribe:
    """测试时段展示文本。"""

    def test_fixed(self):
        window = ActiveWindow(start_hour=7, end_hour=23)
        assert SchedulePolicy.describe(window) == "7:00 - 23:00 Daily"

    def test_uniform_weekly_shown_as_daily(self):
        window = ActiveWindow(use_weekly_schedule=True, weekly_schedule=default_week(9, 17))
        assert SchedulePolicy.describe(window) == "9:00 - 17:00 Daily"

    def test_custom_weekly(self):
        week = default_week(9, 17)
        week[5] = DaySchedule(day_of_week=6, is_enabled=False)
        window = ActiveWindow(use_weekly_schedule=True, weekly_schedule=week)
        assert SchedulePolicy.describe(window) == "Custom Schedule"
