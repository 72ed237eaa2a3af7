"""调度器状态持有者。

进程内唯一的可变状态集合，由协调器持有并显式注入，
所有入口通过同一把 ``asyncio.Lock`` 串行化。
"""

import asyncio
from dataclasses import dataclass, field

from chaff.config import Settings
from chaff.endpoints.rate_limiter import EndpointRateLimiter
from chaff.schedule.domain.models import QuotaState, RuntimeConfig, ScheduleState
from chaff.stats.domain.models import SearchStats


@dataclass
class SchedulerState:
    """调度器的全部可变状态。"""

    schedule: ScheduleState = field(default_factory=ScheduleState)
    quota: QuotaState = field(default_factory=QuotaState)
    stats: SearchStats = field(default_factory=SearchStats)
    config: RuntimeConfig = field(default_factory=RuntimeConfig)
    rate_limiter: EndpointRateLimiter = field(default_factory=EndpointRateLimiter)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulerState":
        """以启动配置中的默认值构造初始状态。"""
        return cls(
            config=RuntimeConfig.from_settings(settings),
            rate_limiter=EndpointRateLimiter(
                cooldown_seconds=settings.endpoint_cooldown_seconds,
                failure_threshold=settings.failure_threshold,
            ),
        )
