"""触发宿主。

在 APScheduler ``AsyncIOScheduler`` 上模拟宿主的机会性唤醒：

- refresh：最早 15 分钟后触发，执行期限 30 秒
- processing：最早 60 分钟后触发，执行期限 300 秒（冗余触发）
- timer：前台计时器，在 next_fire_time 触发
- recheck：禁止状态的重新检查，在 recheck_at 触发

每个宿主任务在执行前先提交下一次请求。错过的任务延后执行（不丢弃）。
"""

import logging
from datetime import datetime, timedelta

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from chaff.config import Settings
from chaff.schedule.cancellation import CancellationToken
from chaff.schedule.coordinator import ExecutionCoordinator
from chaff.schedule.domain.models import CycleResult, ScheduleState, TriggerKind

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "chaff_refresh"
PROCESSING_JOB_ID = "chaff_processing"
TIMER_JOB_ID = "chaff_fire_timer"
RECHECK_JOB_ID = "chaff_recheck"

ALL_JOB_IDS = (REFRESH_JOB_ID, PROCESSING_JOB_ID, TIMER_JOB_ID, RECHECK_JOB_ID)


class TriggerHost:
    """触发宿主。

    持有 APScheduler 实例，把各类触发转成协调器调用。
    """

    def __init__(
        self,
        coordinator: ExecutionCoordinator,
        settings: Settings,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        """初始化触发宿主。

        Args:
            coordinator: 执行协调器
            settings: 启动配置（触发间隔和执行期限）
            scheduler: APScheduler 实例，为 None 时按配置时区创建
        """
        self._coordinator = coordinator
        self._settings = settings
        self._scheduler = scheduler or AsyncIOScheduler(timezone=settings.timezone)
        self._intervals = {
            TriggerKind.REFRESH: settings.refresh_interval_seconds,
            TriggerKind.PROCESSING: settings.processing_interval_seconds,
        }
        self._deadlines = {
            TriggerKind.REFRESH: settings.refresh_deadline_seconds,
            TriggerKind.PROCESSING: settings.processing_deadline_seconds,
        }

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """启动调度器，并按当前调度状态布置任务。"""
        if not self._scheduler.running:
            self._scheduler.start()
        self._coordinator.add_listener(self.sync_jobs)
        self.sync_jobs(self._coordinator.state.schedule)
        logger.info("触发宿主已启动")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("触发宿主已停止")

    def sync_jobs(self, schedule: ScheduleState) -> None:
        """按调度状态布置或撤销任务。

        未启用时撤销全部任务；启用时确保宿主任务存在，
        并在 next_fire_time / recheck_at 布置前台计时器。
        """
        if not schedule.is_enabled:
            self.cancel_all()
            return

        for kind, job_id in (
            (TriggerKind.REFRESH, REFRESH_JOB_ID),
            (TriggerKind.PROCESSING, PROCESSING_JOB_ID),
        ):
            if self._scheduler.get_job(job_id) is None:
                self.submit(kind)

        self._arm(TIMER_JOB_ID, self._on_timer, schedule.next_fire_time, "前台触发计时器")
        self._arm(RECHECK_JOB_ID, self._on_recheck, schedule.recheck_at, "禁止状态重新检查")

    def submit(self, kind: TriggerKind, now: datetime | None = None) -> None:
        """提交一次宿主任务请求（最早开始时间 = now + 间隔）。"""
        now = now or self._coordinator.clock.now()
        job_id = REFRESH_JOB_ID if kind == TriggerKind.REFRESH else PROCESSING_JOB_ID
        handler = self._on_refresh if kind == TriggerKind.REFRESH else self._on_processing
        run_date = now + timedelta(seconds=self._intervals[kind])
        self._scheduler.add_job(
            handler,
            "date",
            run_date=run_date,
            id=job_id,
            name=f"宿主 {kind.value} 触发",
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True,
        )
        logger.debug(f"已提交宿主任务: {kind.value} @ {run_date.isoformat()}")

    def cancel_all(self) -> None:
        """撤销所有已布置的任务。"""
        for job_id in ALL_JOB_IDS:
            self._remove(job_id)

    async def _on_refresh(self) -> CycleResult | None:
        return await self._handle_host_task(TriggerKind.REFRESH)

    async def _on_processing(self) -> CycleResult | None:
        return await self._handle_host_task(TriggerKind.PROCESSING)

    async def _on_timer(self) -> CycleResult | None:
        return await self._run(TriggerKind.TIMER, None)

    async def _on_recheck(self) -> CycleResult | None:
        return await self._run(TriggerKind.RECHECK, None)

    async def _handle_host_task(self, kind: TriggerKind) -> CycleResult | None:
        """宿主任务处理：先提交下一次请求，再在执行期限内运行一个周期。"""
        if self._coordinator.state.schedule.is_enabled:
            self.submit(kind)
        token = CancellationToken.after(self._deadlines[kind])
        return await self._run(kind, token)

    async def _run(
        self,
        kind: TriggerKind,
        token: CancellationToken | None,
    ) -> CycleResult | None:
        try:
            result = await self._coordinator.run_cycle(trigger=kind, token=token)
        except Exception:
            logger.exception(f"触发处理失败: {kind.value}")
            return None
        logger.debug(f"触发处理完成: {kind.value} -> {result.status.value}")
        return result

    def _arm(self, job_id: str, handler, run_date: datetime | None, name: str) -> None:
        if run_date is None:
            self._remove(job_id)
            return
        self._scheduler.add_job(
            handler,
            "date",
            run_date=run_date,
            id=job_id,
            name=name,
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True,
        )

    def _remove(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            pass
