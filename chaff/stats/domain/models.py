"""统计领域模型。

定义请求历史记录与聚合统计。
"""

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SearchMode(str, Enum):
    """请求模式枚举。"""

    MANUAL = "manual"  # 用户手动发起
    SCHEDULED = "scheduled"  # 调度周期发起


class SearchRecord(BaseModel):
    """历史记录条目（只追加）。"""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, description="记录 ID")
    query: str = Field(..., description="搜索词或端点描述")
    timestamp: datetime = Field(..., description="发生时间")
    mode: SearchMode = Field(..., description="请求模式")
    success: bool = Field(..., description="是否成功")
    data_size: int | None = Field(default=None, ge=0, description="响应字节数")
    api_url: str | None = Field(default=None, description="端点地址")
    api_category: str | None = Field(default=None, description="端点分类")
    api_language: str | None = Field(default=None, description="端点语言")


def _empty_week() -> list[int]:
    return [0] * 7


class SearchStats(BaseModel):
    """聚合统计。

    首次运行时以零值创建，只通过 StatsRecorder 修改，
    除显式重置外不会删除。
    """

    total_count: int = Field(default=0, ge=0, description="总请求数")
    today_count: int = Field(default=0, ge=0, description="今日调度请求数")
    last_reset_day: date | None = Field(default=None, description="上次日切日期")
    weekly_counts: list[int] = Field(
        default_factory=_empty_week, min_length=7, max_length=7,
        description="最近 7 天请求数，最后一项为今天",
    )
    history: list[SearchRecord] = Field(default_factory=list, description="历史记录，最新在前")
    success_count: int = Field(default=0, ge=0, description="成功请求数")
    failure_count: int = Field(default=0, ge=0, description="失败请求数")
    total_bytes: int = Field(default=0, ge=0, description="累计数据量（字节）")

    @property
    def success_rate(self) -> float:
        """成功率（百分比），无请求时为 0。"""
        total = self.success_count + self.failure_count
        if total == 0:
            return 0.0
        return self.success_count / total * 100

    def formatted_data_usage(self) -> str:
        """格式化累计数据量。"""
        size = float(self.total_bytes)
        if size < 1024:
            return f"{size:.0f} B"
        if size < 1024 * 1024:
            return f"{size / 1024:.1f} KB"
        if size < 1024 * 1024 * 1024:
            return f"{size / (1024 * 1024):.2f} MB"
        return f"{size / (1024 * 1024 * 1024):.2f} GB"
