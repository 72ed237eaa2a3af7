"""请求统计包。"""

from chaff.stats.domain.models import SearchMode, SearchRecord, SearchStats
from chaff.stats.recorder import StatsRecorder

__all__ = [
    "SearchMode",
    "SearchRecord",
    "SearchStats",
    "StatsRecorder",
]
