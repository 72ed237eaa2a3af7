"""调度领域模型。

定义活跃时段、运行时配置、持久化的调度/配额状态与执行结果。
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from chaff.endpoints.domain.models import ApiCategory, ApiLanguage, Endpoint
from chaff.search.query_generator import TopicCategory


class PlannerPhase(str, Enum):
    """触发时间规划器状态。"""

    IDLE = "idle"  # 无计划
    PLANNED = "planned"  # 存在未来的触发时间
    DUE = "due"  # 触发时间已到，等待执行
    GATED = "gated"  # 策略或配额禁止，等待重新检查


class GateReason(str, Enum):
    """禁止执行的原因。"""

    QUOTA_EXHAUSTED = "quota_exhausted"
    OUTSIDE_WINDOW = "outside_window"
    DAY_DISABLED = "day_disabled"


class TriggerKind(str, Enum):
    """触发来源。"""

    REFRESH = "refresh"  # 宿主短周期触发
    PROCESSING = "processing"  # 宿主长周期触发（冗余）
    TIMER = "timer"  # 前台计时器到点
    RECHECK = "recheck"  # 禁止状态的重新检查
    RESUME = "resume"  # 应用恢复/启动检查


class CycleStatus(str, Enum):
    """单次周期的结果状态。"""

    EXECUTED = "executed"
    CANCELLED = "cancelled"
    DISABLED = "disabled"
    ALREADY_RUNNING = "already_running"
    QUOTA_EXHAUSTED = "quota_exhausted"
    OUTSIDE_WINDOW = "outside_window"
    DAY_DISABLED = "day_disabled"
    NOT_DUE = "not_due"
    NO_ELIGIBLE_ENDPOINT = "no_eligible_endpoint"


class DaySchedule(BaseModel):
    """单日的活跃时段。"""

    day_of_week: int = Field(..., ge=1, le=7, description="ISO 星期：1=周一 ... 7=周日")
    is_enabled: bool = Field(default=True, description="当天是否启用")
    start_hour: int = Field(default=7, ge=0, le=23, description="开始小时")
    end_hour: int = Field(default=23, ge=0, le=24, description="结束小时（不含）")


def default_week(start_hour: int = 7, end_hour: int = 23) -> list[DaySchedule]:
    """七天全部启用、时段相同的周计划。"""
    return [
        DaySchedule(day_of_week=day, is_enabled=True, start_hour=start_hour, end_hour=end_hour)
        for day in range(1, 8)
    ]


class ActiveWindow(BaseModel):
    """活跃时段配置。

    固定模式下每天使用同一时段，``start_hour > end_hour`` 时跨越午夜；
    周计划模式下按星期查找当天的 DaySchedule。
    """

    use_weekly_schedule: bool = Field(default=False, description="是否使用周计划")
    start_hour: int = Field(default=7, ge=0, le=23, description="固定模式开始小时")
    end_hour: int = Field(default=23, ge=0, le=24, description="固定模式结束小时（不含）")
    weekly_schedule: list[DaySchedule] = Field(
        default_factory=default_week, description="周计划，每个星期一项"
    )

    @field_validator("weekly_schedule")
    @classmethod
    def validate_unique_days(cls, v: list[DaySchedule]) -> list[DaySchedule]:
        """每个星期最多出现一次。"""
        days = [d.day_of_week for d in v]
        if len(days) != len(set(days)):
            raise ValueError("周计划中存在重复的星期")
        return v


class RuntimeConfig(BaseModel):
    """用户可编辑的运行时配置（持久化）。"""

    active_window: ActiveWindow = Field(default_factory=ActiveWindow)
    daily_limit: int = Field(default=3, ge=0, description="每日上限，0 表示不限制")
    enabled_api_categories: set[ApiCategory] = Field(
        default_factory=lambda: set(ApiCategory)
    )
    enabled_api_languages: set[ApiLanguage] = Field(
        default_factory=lambda: set(ApiLanguage)
    )
    enabled_topic_categories: set[TopicCategory] = Field(
        default_factory=lambda: set(TopicCategory)
    )

    @classmethod
    def from_settings(cls, settings) -> "RuntimeConfig":
        """以启动配置中的默认值构造。"""
        return cls(
            active_window=ActiveWindow(
                start_hour=settings.start_hour,
                end_hour=settings.end_hour,
                weekly_schedule=default_week(settings.start_hour, settings.end_hour),
            ),
            daily_limit=settings.daily_limit,
        )


class ScheduleState(BaseModel):
    """调度状态（持久化，进程内唯一）。"""

    is_enabled: bool = Field(default=False, description="总开关")
    next_fire_time: datetime | None = Field(default=None, description="下次触发时间")
    phase: PlannerPhase = Field(default=PlannerPhase.IDLE, description="规划器状态")
    gate_reason: GateReason | None = Field(default=None, description="禁止原因")
    recheck_at: datetime | None = Field(default=None, description="禁止状态的重新检查时间")
    last_description: str | None = Field(default=None, description="上次请求的端点描述")


class QuotaState(BaseModel):
    """每日配额状态（持久化）。"""

    daily_count: int = Field(default=0, ge=0, description="今日已执行次数")
    last_reset_day: date | None = Field(default=None, description="上次重置的日期")


class ManualSearchResult(BaseModel):
    """手动搜索结果，由展示层打开 ``url``。"""

    query: str
    url: str
    timestamp: datetime


class CycleResult(BaseModel):
    """单次周期的执行结果。"""

    status: CycleStatus
    trigger: TriggerKind
    executed: bool = False
    success: bool | None = None
    cancelled: bool = False
    endpoint: Endpoint | None = None
    data_size: int | None = None
    next_fire_time: datetime | None = None
