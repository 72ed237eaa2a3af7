"""配置管理模块。

使用 Pydantic 加载和验证环境变量。
"""

from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 加载 .env 文件
load_dotenv()


class Settings(BaseSettings):
    """应用配置。

    从环境变量加载配置，使用 Pydantic 进行验证。
    启动时构造一次，之后注入到各组件中。
    """

    # 调度窗口与配额（用户偏好的默认值）
    daily_limit: int = Field(
        default=3, ge=0, description="每日请求上限，0 表示不限制"
    )
    start_hour: int = Field(
        default=7, ge=0, le=23, description="活跃时段开始小时"
    )
    end_hour: int = Field(
        default=23, ge=0, le=24, description="活跃时段结束小时（不含）"
    )
    timezone: str = Field(
        default="UTC", description="日历与活跃时段使用的时区"
    )

    # 触发时间规划
    min_fire_interval_seconds: int = Field(
        default=3600, ge=1, description="两次执行之间的最小随机间隔（秒）"
    )
    max_fire_interval_seconds: int = Field(
        default=21600, ge=1, description="两次执行之间的最大随机间隔（秒）"
    )
    window_recheck_seconds: int = Field(
        default=600, ge=1, description="活跃时段外的重新检查间隔（秒）"
    )
    quota_recheck_offset_seconds: int = Field(
        default=60, ge=0, description="配额耗尽后，午夜之后的重新检查偏移（秒）"
    )

    # 端点限流
    endpoint_cooldown_seconds: int = Field(
        default=300, ge=1, description="同一端点两次调用的最小间隔（秒）"
    )
    failure_threshold: int = Field(
        default=3, ge=1, description="触发线性退避的连续失败次数"
    )

    # 网络请求
    request_timeout: float = Field(
        default=15.0, gt=0, description="单次请求超时时间（秒）"
    )
    user_agent: str = Field(
        default="Chaff/1.0", description="请求使用的 User-Agent"
    )
    manual_search_url: str = Field(
        default="https://www.google.com/search",
        description="手动搜索使用的搜索引擎地址"
    )

    # 宿主触发源
    scheduler_enabled: bool = Field(
        default=True, description="是否启动宿主触发调度器"
    )
    refresh_interval_seconds: int = Field(
        default=900, ge=1, description="refresh 触发的最早间隔（秒）"
    )
    processing_interval_seconds: int = Field(
        default=3600, ge=1, description="processing 触发的最早间隔（秒）"
    )
    refresh_deadline_seconds: float = Field(
        default=30.0, gt=0, description="refresh 触发的执行期限（秒）"
    )
    processing_deadline_seconds: float = Field(
        default=300.0, gt=0, description="processing 触发的执行期限（秒）"
    )

    # 统计
    history_limit: int = Field(
        default=100, ge=1, le=1000, description="历史记录保留条数"
    )

    # 数据库配置
    database_url: str = Field(
        default="sqlite:///./chaff.db",
        description="数据库连接地址"
    )

    # 日志配置
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="日志级别",
        validate_default=True,  # 确保默认值也经过验证
    )

    # 监控配置
    prometheus_enabled: bool = Field(
        default=True, description="是否启用 Prometheus 监控"
    )

    # API 配置
    cors_origins: list[str] = Field(
        default=["*"], description="允许跨域访问的来源"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHAFF_",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证并标准化日志级别。"""
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def validate_fire_interval(self) -> "Settings":
        """最大间隔不得小于最小间隔。"""
        if self.max_fire_interval_seconds < self.min_fire_interval_seconds:
            raise ValueError(
                "max_fire_interval_seconds 不能小于 min_fire_interval_seconds"
            )
        return self


# 全局缓存，用于测试时清除
_settings_cache: Settings | None = None


def get_settings() -> Settings:
    """获取配置单例。

    使用全局缓存确保配置只加载一次。

    Returns:
        Settings: 配置实例
    """
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def clear_settings_cache() -> None:
    """清除配置缓存。

    主要用于测试场景。
    """
    global _settings_cache
    _settings_cache = None
