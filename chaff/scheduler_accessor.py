"""调度器访问模块。

提供从 API 层访问运行中的触发宿主的接口，避免循环导入。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chaff.schedule.triggers import TriggerHost

_host: TriggerHost | None = None


def register_host(host: TriggerHost) -> None:
    """注册触发宿主引用。在 main.py lifespan 启动时调用。"""
    global _host
    _host = host


def get_host() -> TriggerHost | None:
    """获取触发宿主引用。返回 None 表示调度器未运行。"""
    return _host


def unregister_host() -> None:
    """注销触发宿主引用。在 main.py lifespan 关闭时调用。"""
    global _host
    _host = None
