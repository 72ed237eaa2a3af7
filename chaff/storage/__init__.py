"""状态持久化模块。"""

from chaff.storage.state_store import (
    CONFIG_KEY,
    QUOTA_KEY,
    SCHEDULE_KEY,
    STATS_KEY,
    StateStore,
)

__all__ = [
    "CONFIG_KEY",
    "QUOTA_KEY",
    "SCHEDULE_KEY",
    "STATS_KEY",
    "StateStore",
]
