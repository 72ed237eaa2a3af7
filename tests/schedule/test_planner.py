"""FireTimePlanner 单元测试。

测试规划器状态转换和不变量。
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from chaff.clock import Clock
from chaff.schedule.domain.models import GateReason, PlannerPhase, ScheduleState
from chaff.schedule.services.planner import FireTimePlanner

NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


def _make_planner(enabled: bool = True, seed: int = 1) -> FireTimePlanner:
    return FireTimePlanner(
        ScheduleState(is_enabled=enabled),
        Clock("UTC"),
        rng=random.Random(seed),
    )


def _assert_consistent(state: ScheduleState) -> None:
    """最多只有一种情况成立：有触发时间 / 禁止 / 空闲。"""
    has_fire_time = state.next_fire_time is not None
    assert has_fire_time == (state.phase in (PlannerPhase.PLANNED, PlannerPhase.DUE))
    if state.phase == PlannerPhase.GATED:
        assert state.next_fire_time is None
        assert state.recheck_at is not None
    if not state.is_enabled:
        assert state.phase == PlannerPhase.IDLE
        assert state.next_fire_time is None


class TestPlan:
    """测试 plan。"""

    @pytest.mark.parametrize("seed", range(20))
    def test_fire_time_within_interval_bounds(self, seed):
        planner = _make_planner(seed=seed)
        planner.plan(NOW)

        delay = planner.next_fire_time - NOW
        assert timedelta(hours=1) <= delay <= timedelta(hours=6)
        assert planner.phase == PlannerPhase.PLANNED
        _assert_consistent(planner.state)

    def test_disabled_plans_nothing(self):
        planner = _make_planner(enabled=False)
        planner.plan(NOW)

        assert planner.phase == PlannerPhase.IDLE
        assert planner.next_fire_time is None

    def test_window_gate_rechecks_in_ten_minutes(self):
        planner = _make_planner()
        planner.plan(NOW, GateReason.OUTSIDE_WINDOW)

        assert planner.phase == PlannerPhase.GATED
        assert planner.state.recheck_at == NOW + timedelta(minutes=10)
        _assert_consistent(planner.state)

    def test_quota_gate_rechecks_after_midnight(self):
        planner = _make_planner()
        planner.plan(NOW, GateReason.QUOTA_EXHAUSTED)

        assert planner.state.recheck_at == datetime(2026, 3, 3, 0, 1, tzinfo=timezone.utc)
        assert planner.state.gate_reason == GateReason.QUOTA_EXHAUSTED
        _assert_consistent(planner.state)

    def test_plan_replaces_previous_fire_time(self):
        """重复规划只保留一个触发时间。"""
        planner = _make_planner()
        planner.plan(NOW)
        planner.plan(NOW + timedelta(minutes=5))

        assert planner.next_fire_time > NOW + timedelta(minutes=5)
        _assert_consistent(planner.state)


class TestTransitions:
    """测试 observe / consume / stop / recheck。"""

    def test_observe_before_fire_time(self):
        planner = _make_planner()
        planner.plan(NOW)

        assert planner.observe(NOW + timedelta(minutes=30)) is False
        assert planner.phase == PlannerPhase.PLANNED

    def test_observe_after_fire_time_becomes_due(self):
        planner = _make_planner()
        planner.plan(NOW)

        assert planner.observe(planner.next_fire_time) is True
        assert planner.phase == PlannerPhase.DUE
        _assert_consistent(planner.state)

    def test_consume_clears_fire_time(self):
        planner = _make_planner()
        planner.plan(NOW)
        planner.observe(NOW + timedelta(hours=7))
        planner.consume()

        assert planner.phase == PlannerPhase.IDLE
        assert planner.next_fire_time is None

    def test_consume_ignored_unless_due(self):
        planner = _make_planner()
        planner.plan(NOW)
        planner.consume()

        assert planner.phase == PlannerPhase.PLANNED

    @pytest.mark.parametrize("gate", [None, GateReason.OUTSIDE_WINDOW, GateReason.QUOTA_EXHAUSTED])
    def test_stop_from_any_state(self, gate):
        planner = _make_planner()
        planner.plan(NOW, gate)
        planner.stop()

        assert not planner.state.is_enabled
        assert planner.phase == PlannerPhase.IDLE
        assert planner.next_fire_time is None
        assert planner.state.recheck_at is None
        _assert_consistent(planner.state)

    def test_recheck_from_gated(self):
        planner = _make_planner()
        planner.plan(NOW, GateReason.OUTSIDE_WINDOW)
        planner.recheck(NOW + timedelta(minutes=10))

        assert planner.phase == PlannerPhase.PLANNED
        assert planner.state.gate_reason is None
        _assert_consistent(planner.state)

    def test_recheck_ignored_when_planned(self):
        planner = _make_planner()
        planner.plan(NOW)
        fire_time = planner.next_fire_time

        planner.recheck(NOW + timedelta(minutes=10))
        assert planner.next_fire_time == fire_time

    def test_needs_plan(self):
        planner = _make_planner()
        assert planner.needs_plan()

        planner.plan(NOW)
        assert not planner.needs_plan()

        planner.stop()
        assert not planner.needs_plan()

        planner.enable()
        assert planner.needs_plan()
