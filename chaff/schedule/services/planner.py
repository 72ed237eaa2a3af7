"""触发时间规划器。

维护唯一的下次触发时间及规划器状态：

    idle ──plan──> planned ──observe──> due ──consume──> idle
      │                                                  │
      └──plan(gate)──> gated ──recheck──> planned/gated ─┘

任意状态下 ``stop`` 都会回到 idle 并清除触发时间。
调用方在每次状态变化后负责持久化。
"""

import logging
import random
from datetime import datetime, timedelta

from chaff.clock import Clock
from chaff.schedule.domain.models import GateReason, PlannerPhase, ScheduleState

logger = logging.getLogger(__name__)


class FireTimePlanner:
    """触发时间规划器。"""

    def __init__(
        self,
        state: ScheduleState,
        clock: Clock,
        rng: random.Random | None = None,
        min_interval_seconds: int = 3600,
        max_interval_seconds: int = 21600,
        window_recheck_seconds: int = 600,
        quota_recheck_offset_seconds: int = 60,
    ) -> None:
        """初始化规划器。

        Args:
            state: 调度状态（就地修改）
            clock: 时钟
            rng: 随机数源，测试时可注入固定种子
            min_interval_seconds: 随机间隔下限
            max_interval_seconds: 随机间隔上限
            window_recheck_seconds: 不在活跃时段时的重新检查延迟
            quota_recheck_offset_seconds: 配额用尽时在次日零点后的偏移
        """
        self._state = state
        self._clock = clock
        self._rng = rng or random.Random()
        self._min_interval = min_interval_seconds
        self._max_interval = max_interval_seconds
        self._window_recheck = window_recheck_seconds
        self._quota_offset = quota_recheck_offset_seconds

    @property
    def state(self) -> ScheduleState:
        return self._state

    @property
    def phase(self) -> PlannerPhase:
        return self._state.phase

    @property
    def next_fire_time(self) -> datetime | None:
        return self._state.next_fire_time

    def needs_plan(self) -> bool:
        """已启用但没有未来计划（idle 或刚离开禁止状态）。"""
        return self._state.is_enabled and self._state.phase in (
            PlannerPhase.IDLE,
            PlannerPhase.GATED,
        )

    def plan(self, now: datetime, gate: GateReason | None = None) -> ScheduleState:
        """规划下一次触发。

        Args:
            now: 当前时间
            gate: 禁止原因；为 None 时规划随机间隔后的触发时间

        Returns:
            ScheduleState: 更新后的状态
        """
        state = self._state
        if not state.is_enabled:
            self._to_idle()
            return state

        if gate is not None:
            state.next_fire_time = None
            state.phase = PlannerPhase.GATED
            state.gate_reason = gate
            state.recheck_at = self._recheck_time(now, gate)
            logger.info(f"调度被禁止: {gate.value}, 重新检查时间 {state.recheck_at.isoformat()}")
            return state

        delay = self._rng.uniform(self._min_interval, self._max_interval)
        state.next_fire_time = now + timedelta(seconds=delay)
        state.phase = PlannerPhase.PLANNED
        state.gate_reason = None
        state.recheck_at = None
        logger.info(f"下次触发时间: {state.next_fire_time.isoformat()}")
        return state

    def observe(self, now: datetime) -> bool:
        """触发时间已到时进入 due。

        Returns:
            bool: 当前是否处于 due
        """
        state = self._state
        if (
            state.phase == PlannerPhase.PLANNED
            and state.next_fire_time is not None
            and now >= state.next_fire_time
        ):
            state.phase = PlannerPhase.DUE
            lateness = (now - state.next_fire_time).total_seconds()
            if lateness > 60:
                logger.info(f"补执行已过期的触发, 延迟 {lateness:.0f} 秒")
        return state.phase == PlannerPhase.DUE

    def consume(self) -> None:
        """消费 due 状态的触发时间。"""
        if self._state.phase != PlannerPhase.DUE:
            return
        self._state.next_fire_time = None
        self._state.phase = PlannerPhase.IDLE

    def stop(self) -> None:
        """停用并无条件清除计划。"""
        self._state.is_enabled = False
        self._to_idle()

    def enable(self) -> None:
        self._state.is_enabled = True

    def recheck(self, now: datetime, gate: GateReason | None = None) -> ScheduleState:
        """禁止状态下重新规划；其他状态不变。"""
        if self._state.phase != PlannerPhase.GATED:
            return self._state
        return self.plan(now, gate)

    def _to_idle(self) -> None:
        state = self._state
        state.next_fire_time = None
        state.phase = PlannerPhase.IDLE
        state.gate_reason = None
        state.recheck_at = None

    def _recheck_time(self, now: datetime, gate: GateReason) -> datetime:
        if gate == GateReason.QUOTA_EXHAUSTED:
            return self._clock.next_midnight(now) + timedelta(seconds=self._quota_offset)
        return now + timedelta(seconds=self._window_recheck)
