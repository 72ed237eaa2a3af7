"""调度服务模块。"""

from chaff.schedule.services.planner import FireTimePlanner
from chaff.schedule.services.policy import SchedulePolicy
from chaff.schedule.services.quota import QuotaTracker

__all__ = ["FireTimePlanner", "QuotaTracker", "SchedulePolicy"]
