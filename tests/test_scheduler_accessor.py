"""scheduler_accessor 单元测试。

测试触发宿主引用的注册、获取、注销生命周期。
"""

from unittest.mock import MagicMock

from chaff.scheduler_accessor import get_host, register_host, unregister_host
from chaff.schedule.triggers import TriggerHost


class TestSchedulerAccessor:
    """测试触发宿主访问模块。"""

    def setup_method(self):
        unregister_host()

    def teardown_method(self):
        unregister_host()

    def test_get_host_returns_none_when_not_registered(self):
        assert get_host() is None

    def test_register_and_unregister(self, coordinator, test_settings):
        host = TriggerHost(coordinator, test_settings, scheduler=MagicMock())

        register_host(host)
        assert get_host() is host

        unregister_host()
        assert get_host() is None

    def test_register_replaces_previous(self):
        first, second = MagicMock(), MagicMock()

        register_host(first)
        register_host(second)

        assert get_host() is second
