"""调度包。

包含调度策略、每日配额、触发时间规划、执行协调器和触发宿主。
"""
