"""调度 API 路由。

提供调度状态、启停、运行时配置、统计、手动搜索和端点目录的 RESTful 端点。
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from chaff.schedule.api.schemas import (
    CycleResultResponse,
    EndpointResponse,
    ManualSearchRequest,
    ManualSearchResponse,
    ScheduleStatusResponse,
    StatsResponse,
)
from chaff.schedule.domain.models import RuntimeConfig
from chaff.schedule.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["schedule"])


def get_schedule_service(request: Request) -> ScheduleService:
    """从应用状态获取 ScheduleService 实例。

    Raises:
        HTTPException: 服务未初始化（503）
    """
    service = getattr(request.app.state, "schedule_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="调度服务未初始化",
        )
    return service


@router.get("/schedule", response_model=ScheduleStatusResponse)
async def get_schedule(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleStatusResponse:
    """获取调度状态。"""
    return service.get_status()


@router.post("/schedule/start", response_model=ScheduleStatusResponse)
async def start_schedule(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleStatusResponse:
    """启用调度。

    启用后立即规划首次触发；当前不在活跃时段或配额已用尽时进入禁止状态。
    """
    try:
        return await service.start()
    except Exception as e:
        logger.error(f"启用调度失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="启用调度失败",
        ) from e


@router.post("/schedule/stop", response_model=ScheduleStatusResponse)
async def stop_schedule(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleStatusResponse:
    """停用调度并清除所有计划。"""
    try:
        return await service.stop()
    except Exception as e:
        logger.error(f"停用调度失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="停用调度失败",
        ) from e


@router.post("/schedule/sync", response_model=CycleResultResponse)
async def sync_schedule(
    service: ScheduleService = Depends(get_schedule_service),
) -> CycleResultResponse:
    """立即检查调度，已过期的触发时间会被补执行。"""
    try:
        return await service.sync()
    except Exception as e:
        logger.error(f"同步调度失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="同步调度失败",
        ) from e


@router.get("/config", response_model=RuntimeConfig)
async def get_config(
    service: ScheduleService = Depends(get_schedule_service),
) -> RuntimeConfig:
    """获取运行时配置。"""
    return service.get_config()


@router.put("/config", response_model=RuntimeConfig)
async def update_config(
    config: RuntimeConfig,
    service: ScheduleService = Depends(get_schedule_service),
) -> RuntimeConfig:
    """更新运行时配置。

    Args:
        config: 完整的运行时配置（非法值由 Pydantic 返回 422）
        service: 调度服务

    Returns:
        RuntimeConfig: 更新后的配置
    """
    try:
        return await service.update_config(config)
    except Exception as e:
        logger.error(f"更新运行时配置失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="更新运行时配置失败",
        ) from e


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    service: ScheduleService = Depends(get_schedule_service),
) -> StatsResponse:
    """获取请求统计和历史记录。"""
    return service.get_stats()


@router.delete("/stats", response_model=StatsResponse)
async def reset_stats(
    service: ScheduleService = Depends(get_schedule_service),
) -> StatsResponse:
    """清零请求统计。"""
    return await service.reset_stats()


@router.post(
    "/searches/manual",
    response_model=ManualSearchResponse,
    status_code=status.HTTP_201_CREATED,
)
async def manual_search(
    request: ManualSearchRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> ManualSearchResponse:
    """手动搜索。

    不受活跃时段和配额限制，不影响下次触发时间。
    """
    return await service.manual_search(request.query)


@router.get("/endpoints", response_model=list[EndpointResponse])
async def list_endpoints(
    service: ScheduleService = Depends(get_schedule_service),
) -> list[EndpointResponse]:
    """列出端点目录及其运行时状态。"""
    return service.list_endpoints()
