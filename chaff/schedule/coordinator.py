"""执行协调器。

所有触发（宿主刷新、计时器、重新检查、应用恢复）和用户操作的唯一入口。
每次入口都在 ``SchedulerState.lock`` 下串行执行：

1. 已有周期在执行 -> 丢弃（宿主触发）或等待（用户操作）
2. 未启用 -> 无操作
3. 日切（配额与统计）
4. 配额用尽 / 不在活跃时段 -> 规划器进入禁止状态
5. 未到触发时间 -> 无操作（没有计划时先规划）
6. 到期 -> 消费触发时间，选择端点，发起请求
7. 记录结果，计入配额，持久化
8. 按当前配额和时段重新规划（请求异常或被取消时同样）

协调器不向调用方抛出异常：传输错误以 ``Failure`` 值返回，
持久化错误由 StateStore 记录并吸收。
"""

import asyncio
import contextlib
import logging
import random
from collections.abc import Callable
from datetime import datetime

import httpx
from returns.result import Failure

from chaff.clock import Clock
from chaff.config import Settings
from chaff.endpoints.client import EndpointClient, FetchResponse
from chaff.endpoints.domain.models import Endpoint
from chaff.schedule.cancellation import CancellationToken
from chaff.schedule.domain.models import (
    CycleResult,
    CycleStatus,
    GateReason,
    ManualSearchResult,
    PlannerPhase,
    RuntimeConfig,
    ScheduleState,
    TriggerKind,
)
from chaff.schedule.services.planner import FireTimePlanner
from chaff.schedule.services.policy import SchedulePolicy
from chaff.schedule.services.quota import QuotaTracker
from chaff.schedule.state import SchedulerState
from chaff.search.query_generator import generate_query
from chaff.stats.domain.models import SearchMode, SearchStats
from chaff.stats.recorder import StatsRecorder
from chaff.storage.state_store import (
    CONFIG_KEY,
    QUOTA_KEY,
    SCHEDULE_KEY,
    STATS_KEY,
    StateStore,
)

logger = logging.getLogger(__name__)

ScheduleListener = Callable[[ScheduleState], None]

_GATE_STATUS = {
    GateReason.QUOTA_EXHAUSTED: CycleStatus.QUOTA_EXHAUSTED,
    GateReason.OUTSIDE_WINDOW: CycleStatus.OUTSIDE_WINDOW,
    GateReason.DAY_DISABLED: CycleStatus.DAY_DISABLED,
}


def _update_cycle_metrics(
    state: SchedulerState,
    status: CycleStatus,
    endpoint: Endpoint | None = None,
    outcome: str | None = None,
) -> None:
    """更新 Prometheus 调度指标。"""
    try:
        from chaff.config import get_settings

        if not get_settings().prometheus_enabled:
            return

        from chaff.monitoring import metrics

        metrics.cycles_total.labels(status=status.value).inc()
        if endpoint is not None and outcome is not None:
            metrics.endpoint_requests_total.labels(
                category=endpoint.category.value, outcome=outcome
            ).inc()
        metrics.daily_quota_used.set(state.quota.daily_count)
        fire_time = state.schedule.next_fire_time
        metrics.next_fire_timestamp_seconds.set(fire_time.timestamp() if fire_time else 0)

    except Exception as e:
        # 指标更新失败不影响调度
        logger.debug(f"更新调度指标失败: {e}")


class ExecutionCoordinator:
    """执行协调器。

    持有 SchedulerState 并组合策略、配额、规划器、限流器和统计记录器。
    """

    def __init__(
        self,
        state: SchedulerState,
        settings: Settings,
        clock: Clock,
        client: EndpointClient,
        store: StateStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """初始化协调器。

        Args:
            state: 调度器状态（应已从存储加载）
            settings: 启动配置
            clock: 时钟
            client: 端点 HTTP 客户端
            store: 状态存储，为 None 时不持久化
            rng: 随机数源，用于触发间隔和搜索词
        """
        self._state = state
        self._settings = settings
        self._clock = clock
        self._client = client
        self._store = store
        self._rng = rng or random.Random()

        self._policy = SchedulePolicy(clock)
        self._quota = QuotaTracker(state.quota, clock)
        self._stats = StatsRecorder(state.stats, clock, settings.history_limit)
        self._planner = FireTimePlanner(
            state.schedule,
            clock,
            rng=self._rng,
            min_interval_seconds=settings.min_fire_interval_seconds,
            max_interval_seconds=settings.max_fire_interval_seconds,
            window_recheck_seconds=settings.window_recheck_seconds,
            quota_recheck_offset_seconds=settings.quota_recheck_offset_seconds,
        )
        self._listeners: list[ScheduleListener] = []

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def policy(self) -> SchedulePolicy:
        return self._policy

    @property
    def is_running(self) -> bool:
        """是否有入口正在持有锁。"""
        return self._state.lock.locked()

    def add_listener(self, listener: ScheduleListener) -> None:
        """注册调度状态变化的回调（用于重新布置计时器）。"""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # 触发入口
    # ------------------------------------------------------------------

    async def run_cycle(
        self,
        now: datetime | None = None,
        trigger: TriggerKind = TriggerKind.TIMER,
        token: CancellationToken | None = None,
        wait: bool = False,
    ) -> CycleResult:
        """执行一个调度周期。

        Args:
            now: 当前时间，为 None 时读取时钟
            trigger: 触发来源
            token: 取消令牌，携带宿主分配的执行期限
            wait: 锁被占用时是否等待；宿主触发不等待，直接丢弃

        Returns:
            CycleResult: 周期结果
        """
        if self._state.lock.locked() and not wait:
            logger.debug(f"已有周期在执行，丢弃触发: {trigger.value}")
            result = CycleResult(status=CycleStatus.ALREADY_RUNNING, trigger=trigger)
            _update_cycle_metrics(self._state, result.status)
            return result

        async with self._state.lock:
            result = await self._run_cycle_locked(now or self._clock.now(), trigger, token)

        outcome = None
        if result.executed:
            outcome = "cancelled" if result.cancelled else ("success" if result.success else "failure")
        _update_cycle_metrics(self._state, result.status, result.endpoint, outcome)
        return result

    async def check_resume(self, now: datetime | None = None) -> CycleResult:
        """应用恢复/启动时的检查，已过期的触发时间立即补执行。"""
        return await self.run_cycle(now=now, trigger=TriggerKind.RESUME, wait=True)

    async def _run_cycle_locked(
        self,
        now: datetime,
        trigger: TriggerKind,
        token: CancellationToken | None,
    ) -> CycleResult:
        schedule = self._state.schedule
        if not schedule.is_enabled:
            logger.debug(f"调度未启用，忽略触发: {trigger.value}")
            return CycleResult(status=CycleStatus.DISABLED, trigger=trigger)

        await self._roll_day(now)

        gate = self._current_gate(now)
        if gate is not None:
            await self._apply_gate(now, gate)
            return CycleResult(
                status=_GATE_STATUS[gate],
                trigger=trigger,
                next_fire_time=schedule.next_fire_time,
            )

        if self._planner.needs_plan():
            if schedule.phase == PlannerPhase.GATED:
                self._planner.recheck(now)
            else:
                self._planner.plan(now)
            await self._schedule_changed()
            return CycleResult(
                status=CycleStatus.NOT_DUE,
                trigger=trigger,
                next_fire_time=schedule.next_fire_time,
            )

        if not self._planner.observe(now):
            logger.debug(
                f"未到触发时间: {trigger.value}, next_fire_time={schedule.next_fire_time}"
            )
            return CycleResult(
                status=CycleStatus.NOT_DUE,
                trigger=trigger,
                next_fire_time=schedule.next_fire_time,
            )

        self._planner.consume()
        try:
            result = await self._execute(now, trigger, token)
        finally:
            # 无论周期如何结束都要留下新的计划
            finished = self._clock.now()
            self._planner.plan(finished, self._current_gate(finished))
            await self._schedule_changed()

        result.next_fire_time = schedule.next_fire_time
        return result

    async def _execute(
        self,
        now: datetime,
        trigger: TriggerKind,
        token: CancellationToken | None,
    ) -> CycleResult:
        """选择端点、发起请求并记录结果。重新规划由调用方负责。"""
        config = self._state.config
        endpoint = self._state.rate_limiter.select_endpoint(
            config.enabled_api_categories,
            config.enabled_api_languages,
            now,
        )
        if endpoint is None:
            logger.info("没有可用端点，跳过本次周期")
            return CycleResult(status=CycleStatus.NO_ELIGIBLE_ENDPOINT, trigger=trigger)

        try:
            response, cancelled = await self._fetch(endpoint, token)
        except Exception:
            logger.exception(f"端点请求异常: {endpoint.url}")
            response, cancelled = None, False

        finished = self._clock.now()
        success = response is not None and response.is_success
        data_size = response.byte_length if success else None

        if success:
            self._state.rate_limiter.record_success(endpoint, finished)
        else:
            self._state.rate_limiter.record_failure(endpoint, finished)
        self._stats.record(
            endpoint.description,
            SearchMode.SCHEDULED,
            success,
            finished,
            data_size=data_size,
            endpoint=endpoint,
        )
        self._quota.increment()
        self._state.schedule.last_description = endpoint.description
        await self._persist(QUOTA_KEY, STATS_KEY)

        logger.info(
            f"周期执行完成: trigger={trigger.value}, endpoint={endpoint.description}, "
            f"success={success}, cancelled={cancelled}, "
            f"quota={self._quota.daily_count}/{config.daily_limit}"
        )
        return CycleResult(
            status=CycleStatus.CANCELLED if cancelled else CycleStatus.EXECUTED,
            trigger=trigger,
            executed=True,
            success=success,
            cancelled=cancelled,
            endpoint=endpoint,
            data_size=data_size,
        )

    async def _fetch(
        self,
        endpoint: Endpoint,
        token: CancellationToken | None,
    ) -> tuple[FetchResponse | None, bool]:
        """发起请求并与取消令牌竞争。

        Returns:
            tuple[FetchResponse | None, bool]: (响应，未拿到响应时为 None; 是否被取消)
        """
        if token is not None and token.cancelled:
            logger.info(f"执行期限已到，跳过请求: {endpoint.url}")
            return None, True

        timeout = self._settings.request_timeout
        if token is not None:
            remaining = token.remaining()
            if remaining is not None:
                timeout = max(0.001, min(timeout, remaining))

        fetch_task = asyncio.ensure_future(
            self._client.fetch(
                endpoint.url,
                headers={"User-Agent": self._settings.user_agent},
                timeout=timeout,
            )
        )

        if token is not None:
            cancel_task = asyncio.ensure_future(token.wait())
            try:
                await asyncio.wait(
                    {fetch_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                cancel_task.cancel()

            if not fetch_task.done():
                fetch_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await fetch_task
                logger.warning(f"请求被取消（执行期限已到）: {endpoint.url}")
                return None, True

        try:
            result = await fetch_task
        except httpx.InvalidURL as e:
            logger.warning(f"端点地址无效: {endpoint.url} - {e}")
            return None, False

        if isinstance(result, Failure):
            error = result.failure()
            logger.warning(f"端点请求失败: {endpoint.url} - {error.message}")
            return None, False

        return result.unwrap(), False

    # ------------------------------------------------------------------
    # 用户操作（等待锁）
    # ------------------------------------------------------------------

    async def start(self, now: datetime | None = None) -> ScheduleState:
        """启用调度并规划首次触发；已有的未来计划保留。"""
        async with self._state.lock:
            now = now or self._clock.now()
            self._planner.enable()
            await self._roll_day(now)
            gate = self._current_gate(now)
            if gate is not None or self._planner.needs_plan():
                self._planner.plan(now, gate)
            await self._schedule_changed()
            logger.info("调度已启用")
            return self._state.schedule.model_copy()

    async def stop(self) -> ScheduleState:
        """停用调度，无条件清除计划。"""
        async with self._state.lock:
            self._planner.stop()
            await self._schedule_changed()
            logger.info("调度已停用")
            return self._state.schedule.model_copy()

    async def manual_search(
        self,
        query: str | None = None,
        now: datetime | None = None,
    ) -> ManualSearchResult:
        """手动搜索。

        不受时段和配额限制，不改变下次触发时间，只记录一条手动历史。

        Args:
            query: 搜索词，为 None 时按启用的主题随机生成
            now: 当前时间

        Returns:
            ManualSearchResult: 搜索词和供展示层打开的搜索地址
        """
        async with self._state.lock:
            now = now or self._clock.now()
            if not query or not query.strip():
                query = generate_query(
                    self._state.config.enabled_topic_categories,
                    year=self._clock.localize(now).year,
                    rng=self._rng,
                )
            query = query.strip()
            self._stats.record_manual(query, now)
            await self._persist(STATS_KEY)

            url = str(httpx.URL(self._settings.manual_search_url, params={"q": query}))
            logger.info(f"手动搜索: {query}")
            return ManualSearchResult(query=query, url=url, timestamp=now)

    async def update_config(
        self,
        config: RuntimeConfig,
        now: datetime | None = None,
    ) -> RuntimeConfig:
        """更新运行时配置，必要时重新规划。

        已有的未来触发时间在新配置仍允许执行时保留。
        """
        async with self._state.lock:
            now = now or self._clock.now()
            self._state.config = config
            await self._persist(CONFIG_KEY)

            if self._state.schedule.is_enabled:
                await self._roll_day(now)
                gate = self._current_gate(now)
                if gate is not None:
                    self._planner.plan(now, gate)
                    await self._schedule_changed()
                elif self._planner.needs_plan():
                    self._planner.plan(now)
                    await self._schedule_changed()

            logger.info("运行时配置已更新")
            return config.model_copy(deep=True)

    async def reset_stats(self) -> SearchStats:
        """清零统计。"""
        async with self._state.lock:
            self._stats.reset()
            await self._persist(STATS_KEY)
            return self._stats.snapshot()

    def stats_snapshot(self) -> SearchStats:
        return self._stats.snapshot()

    # ------------------------------------------------------------------
    # 内部辅助
    # ------------------------------------------------------------------

    def _current_gate(self, now: datetime) -> GateReason | None:
        config = self._state.config
        if not self._quota.has_quota(config.daily_limit):
            return GateReason.QUOTA_EXHAUSTED
        return self._policy.evaluate(config.active_window, now)

    async def _roll_day(self, now: datetime) -> None:
        quota_rolled = self._quota.check_and_roll_day(now)
        stats_rolled = self._stats.check_and_roll_day(now)
        if quota_rolled or stats_rolled:
            await self._persist(QUOTA_KEY, STATS_KEY)

    async def _apply_gate(self, now: datetime, gate: GateReason) -> None:
        """进入禁止状态；同一原因且重新检查时间未到时保持不变。"""
        schedule = self._state.schedule
        if (
            schedule.phase == PlannerPhase.GATED
            and schedule.gate_reason == gate
            and schedule.recheck_at is not None
            and now < schedule.recheck_at
        ):
            logger.debug(f"仍处于禁止状态: {gate.value}")
            return
        if schedule.phase == PlannerPhase.GATED:
            self._planner.recheck(now, gate)
        else:
            self._planner.plan(now, gate)
        await self._schedule_changed()

    async def _schedule_changed(self) -> None:
        await self._persist(SCHEDULE_KEY)
        for listener in self._listeners:
            try:
                listener(self._state.schedule)
            except Exception:
                logger.exception("调度状态回调执行失败")

    async def _persist(self, *keys: str) -> None:
        if self._store is None:
            return
        await self._store.save(self._state, *keys)
