"""调度 API 数据模型。

定义请求和响应的 Pydantic 模型。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from chaff.endpoints.domain.models import ApiCategory, ApiLanguage
from chaff.schedule.domain.models import (
    CycleStatus,
    GateReason,
    PlannerPhase,
    TriggerKind,
)
from chaff.stats.domain.models import SearchRecord


class ScheduleStatusResponse(BaseModel):
    """调度状态响应。"""

    is_enabled: bool = Field(..., description="是否启用")
    phase: PlannerPhase = Field(..., description="规划器状态")
    status_text: str = Field(..., description="状态文本")
    schedule_text: str = Field(..., description="活跃时段文本")
    next_fire_time: datetime | None = Field(None, description="下次触发时间")
    gate_reason: GateReason | None = Field(None, description="禁止原因")
    recheck_at: datetime | None = Field(None, description="重新检查时间")
    daily_count: int = Field(..., description="今日已执行次数")
    daily_limit: int = Field(..., description="每日上限，0 表示不限制")
    last_description: str | None = Field(None, description="上次请求的端点")
    host_running: bool = Field(..., description="触发宿主是否运行中")


class CycleResultResponse(BaseModel):
    """同步触发的周期结果。"""

    status: CycleStatus = Field(..., description="周期结果状态")
    trigger: TriggerKind = Field(..., description="触发来源")
    executed: bool = Field(..., description="是否发起了请求")
    success: bool | None = Field(None, description="请求是否成功")
    endpoint: str | None = Field(None, description="请求的端点描述")
    next_fire_time: datetime | None = Field(None, description="下次触发时间")


class StatsResponse(BaseModel):
    """统计响应。"""

    total_count: int
    today_count: int
    weekly_counts: list[int]
    success_count: int
    failure_count: int
    success_rate: float = Field(..., description="成功率 (0-100)")
    total_bytes: int
    data_usage: str = Field(..., description="格式化后的数据量")
    history: list[SearchRecord]


class ManualSearchRequest(BaseModel):
    """手动搜索请求。"""

    query: str | None = Field(
        None, max_length=200, description="搜索词，为空时随机生成"
    )


class ManualSearchResponse(BaseModel):
    """手动搜索响应。"""

    query: str = Field(..., description="搜索词")
    url: str = Field(..., description="供客户端打开的搜索地址")
    timestamp: datetime = Field(..., description="记录时间")


class EndpointResponse(BaseModel):
    """端点目录条目。"""

    url: str
    category: ApiCategory
    category_label: str
    language: ApiLanguage | None = None
    description: str
    enabled: bool = Field(..., description="是否被当前配置启用")
    consecutive_failures: int
    last_call_time: datetime | None = None
