"""ScheduleService - 调度门面服务。

为 API 层组合协调器状态与触发宿主信息，生成展示用的响应。
"""

import logging

from chaff.schedule.api.schemas import (
    CycleResultResponse,
    EndpointResponse,
    ManualSearchResponse,
    ScheduleStatusResponse,
    StatsResponse,
)
from chaff.schedule.coordinator import ExecutionCoordinator
from chaff.schedule.domain.models import GateReason, RuntimeConfig
from chaff.schedule.triggers import TriggerHost
from chaff.stats.domain.models import SearchStats

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    GateReason.QUOTA_EXHAUSTED: "Daily limit reached",
    GateReason.OUTSIDE_WINDOW: "Outside active hours",
    GateReason.DAY_DISABLED: "Day disabled in schedule",
}


class ScheduleService:
    """调度门面服务。"""

    def __init__(
        self,
        coordinator: ExecutionCoordinator,
        host: TriggerHost | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._host = host

    def get_status(self) -> ScheduleStatusResponse:
        """获取当前调度状态。

        状态文本按实时时段计算，配额状态以规划器记录为准。
        """
        state = self._coordinator.state
        schedule = state.schedule
        config = state.config
        now = self._coordinator.clock.now()

        if not schedule.is_enabled:
            status_text = "Stopped"
        elif schedule.gate_reason == GateReason.QUOTA_EXHAUSTED:
            status_text = STATUS_TEXT[GateReason.QUOTA_EXHAUSTED]
        else:
            gate = self._coordinator.policy.evaluate(config.active_window, now)
            status_text = STATUS_TEXT[gate] if gate is not None else "Active"

        return ScheduleStatusResponse(
            is_enabled=schedule.is_enabled,
            phase=schedule.phase,
            status_text=status_text,
            schedule_text=self._coordinator.policy.describe(config.active_window),
            next_fire_time=schedule.next_fire_time,
            gate_reason=schedule.gate_reason,
            recheck_at=schedule.recheck_at,
            daily_count=state.quota.daily_count,
            daily_limit=config.daily_limit,
            last_description=schedule.last_description,
            host_running=self._host is not None and self._host.running,
        )

    async def start(self) -> ScheduleStatusResponse:
        await self._coordinator.start()
        return self.get_status()

    async def stop(self) -> ScheduleStatusResponse:
        await self._coordinator.stop()
        return self.get_status()

    async def sync(self) -> CycleResultResponse:
        """立即执行一次恢复检查（到期则补执行）。"""
        result = await self._coordinator.check_resume()
        return CycleResultResponse(
            status=result.status,
            trigger=result.trigger,
            executed=result.executed,
            success=result.success,
            endpoint=result.endpoint.description if result.endpoint else None,
            next_fire_time=result.next_fire_time,
        )

    def get_config(self) -> RuntimeConfig:
        return self._coordinator.state.config.model_copy(deep=True)

    async def update_config(self, config: RuntimeConfig) -> RuntimeConfig:
        return await self._coordinator.update_config(config)

    def get_stats(self) -> StatsResponse:
        return self._to_stats_response(self._coordinator.stats_snapshot())

    async def reset_stats(self) -> StatsResponse:
        return self._to_stats_response(await self._coordinator.reset_stats())

    async def manual_search(self, query: str | None = None) -> ManualSearchResponse:
        result = await self._coordinator.manual_search(query)
        return ManualSearchResponse(
            query=result.query,
            url=result.url,
            timestamp=result.timestamp,
        )

    def list_endpoints(self) -> list[EndpointResponse]:
        """列出端点目录及其运行时状态。"""
        state = self._coordinator.state
        limiter = state.rate_limiter
        enabled = {
            e.url
            for e in limiter.filter_enabled(
                state.config.enabled_api_categories,
                state.config.enabled_api_languages,
            )
        }
        responses = []
        for endpoint in limiter.catalog:
            runtime = limiter.state_for(endpoint)
            responses.append(
                EndpointResponse(
                    url=endpoint.url,
                    category=endpoint.category,
                    category_label=endpoint.category.label,
                    language=endpoint.language,
                    description=endpoint.description,
                    enabled=endpoint.url in enabled,
                    consecutive_failures=runtime.consecutive_failures,
                    last_call_time=runtime.last_call_time,
                )
            )
        return responses

    @staticmethod
    def _to_stats_response(stats: SearchStats) -> StatsResponse:
        return StatsResponse(
            total_count=stats.total_count,
            today_count=stats.today_count,
            weekly_counts=stats.weekly_counts,
            success_count=stats.success_count,
            failure_count=stats.failure_count,
            success_rate=stats.success_rate,
            total_bytes=stats.total_bytes,
            data_usage=stats.formatted_data_usage(),
            history=stats.history,
        )
