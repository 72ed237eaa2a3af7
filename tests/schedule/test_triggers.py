"""TriggerHost 单元测试。

使用 Mock 的 APScheduler 实例验证任务布置、自我重新提交和撤销。
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from apscheduler.jobstores.base import JobLookupError

from chaff.schedule.domain.models import CycleResult, CycleStatus, TriggerKind
from chaff.schedule.triggers import (
    PROCESSING_JOB_ID,
    RECHECK_JOB_ID,
    REFRESH_JOB_ID,
    TIMER_JOB_ID,
    TriggerHost,
)


def _make_scheduler() -> MagicMock:
    """模拟 AsyncIOScheduler：记录 add_job / remove_job。"""
    scheduler = MagicMock()
    scheduler.running = False
    jobs: dict[str, dict] = {}

    def add_job(func, trigger, **kwargs):
        jobs[kwargs["id"]] = {"func": func, "trigger": trigger, **kwargs}

    def remove_job(job_id):
        if job_id not in jobs:
            raise JobLookupError(job_id)
        del jobs[job_id]

    scheduler.add_job.side_effect = add_job
    scheduler.remove_job.side_effect = remove_job
    scheduler.get_job.side_effect = lambda job_id: jobs.get(job_id)
    scheduler.jobs = jobs
    return scheduler


@pytest.fixture
def scheduler():
    return _make_scheduler()


@pytest.fixture
def host(coordinator, test_settings, scheduler):
    return TriggerHost(coordinator, test_settings, scheduler=scheduler)


class TestJobArming:
    """测试任务布置。"""

    @pytest.mark.asyncio
    async def test_disabled_schedule_arms_nothing(self, host, scheduler):
        host.start()

        scheduler.start.assert_called_once()
        assert scheduler.jobs == {}

    @pytest.mark.asyncio
    async def test_start_arms_host_tasks_and_timer(self, host, scheduler, coordinator, frozen_clock):
        host.start()
        await coordinator.start()

        jobs = scheduler.jobs
        assert set(jobs) == {REFRESH_JOB_ID, PROCESSING_JOB_ID, TIMER_JOB_ID}
        assert jobs[REFRESH_JOB_ID]["run_date"] == frozen_clock.now() + timedelta(minutes=15)
        assert jobs[PROCESSING_JOB_ID]["run_date"] == frozen_clock.now() + timedelta(minutes=60)
        assert jobs[TIMER_JOB_ID]["run_date"] == coordinator.state.schedule.next_fire_time
        assert all(job["misfire_grace_time"] is None for job in jobs.values())
        assert all(job["coalesce"] for job in jobs.values())

    @pytest.mark.asyncio
    async def test_gated_schedule_arms_recheck(self, host, scheduler, coordinator, frozen_clock):
        frozen_clock.set(frozen_clock.now().replace(hour=3))
        host.start()
        await coordinator.start()

        jobs = scheduler.jobs
        assert TIMER_JOB_ID not in jobs
        assert jobs[RECHECK_JOB_ID]["run_date"] == coordinator.state.schedule.recheck_at

    @pytest.mark.asyncio
    async def test_stop_cancels_all(self, host, scheduler, coordinator):
        host.start()
        await coordinator.start()
        await coordinator.stop()

        assert scheduler.jobs == {}


class TestHandlers:
    """测试触发处理。"""

    @pytest.mark.asyncio
    async def test_refresh_resubmits_before_running(self, host, scheduler, coordinator, frozen_clock):
        host.start()
        await coordinator.start()
        frozen_clock.advance(minutes=15)

        calls = []
        original = coordinator.run_cycle

        async def spy(**kwargs):
            calls.append(scheduler.jobs[REFRESH_JOB_ID]["run_date"])
            return await original(**kwargs)

        coordinator.run_cycle = spy
        result = await host._on_refresh()

        # 执行周期时下一次 refresh 已经提交
        assert calls == [frozen_clock.now() + timedelta(minutes=15)]
        assert result.trigger == TriggerKind.REFRESH

    @pytest.mark.asyncio
    async def test_host_task_runs_with_deadline(self, host, coordinator, test_settings):
        coordinator.run_cycle = AsyncMock(
            return_value=CycleResult(status=CycleStatus.DISABLED, trigger=TriggerKind.PROCESSING)
        )

        await host._on_processing()

        token = coordinator.run_cycle.await_args.kwargs["token"]
        assert 0 < token.remaining() <= test_settings.processing_deadline_seconds

    @pytest.mark.asyncio
    async def test_timer_runs_without_deadline(self, host, coordinator):
        coordinator.run_cycle = AsyncMock(
            return_value=CycleResult(status=CycleStatus.NOT_DUE, trigger=TriggerKind.TIMER)
        )

        await host._on_timer()

        kwargs = coordinator.run_cycle.await_args.kwargs
        assert kwargs["trigger"] == TriggerKind.TIMER
        assert kwargs["token"] is None

    @pytest.mark.asyncio
    async def test_handler_exception_is_logged(self, host, coordinator):
        coordinator.run_cycle = AsyncMock(side_effect=RuntimeError("boom"))

        assert await host._on_recheck() is None

    @pytest.mark.asyncio
    async def test_disabled_host_task_does_not_resubmit(self, host, scheduler):
        host.start()

        await host._on_refresh()

        assert REFRESH_JOB_ID not in scheduler.jobs

    def test_shutdown(self, host, scheduler):
        scheduler.running = True
        host.shutdown()
        scheduler.shutdown.assert_called_once_with(wait=False)
