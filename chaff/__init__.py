"""Chaff - 随机化诱饵请求调度服务。"""

__version__ = "0.1.0"
