"""StateStore 单元测试。

使用内存 aiosqlite 数据库测试键值读写、加载和写入失败吸收。
"""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from chaff.config import Settings
from chaff.endpoints.domain.models import ApiCategory
from chaff.schedule.domain.models import PlannerPhase
from chaff.schedule.state import SchedulerState
from chaff.storage.state_store import (
    CONFIG_KEY,
    QUOTA_KEY,
    SCHEDULE_KEY,
    StateStore,
)


def _fresh_state() -> SchedulerState:
    return SchedulerState.from_settings(Settings(_env_file=None))


class TestKeyValue:
    """测试单键读写。"""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, state_store):
        assert await state_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, state_store):
        assert await state_store.set("k", {"a": 1}) is True
        assert await state_store.get("k") == {"a": 1}

    @pytest.mark.asyncio
    async def test_set_overwrites(self, state_store):
        await state_store.set("k", {"a": 1})
        await state_store.set("k", {"a": 2})
        assert await state_store.get("k") == {"a": 2}


class TestLoadSave:
    """测试整体状态加载和保存。"""

    @pytest.mark.asyncio
    async def test_round_trip(self, state_store):
        state = _fresh_state()
        state.schedule.is_enabled = True
        state.schedule.phase = PlannerPhase.PLANNED
        state.schedule.next_fire_time = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
        state.quota.daily_count = 2
        state.quota.last_reset_day = date(2026, 3, 2)
        state.config.enabled_api_categories = {ApiCategory.WEATHER}

        assert await state_store.save(state) is True
        restored = await state_store.load_into(_fresh_state())

        assert restored.schedule == state.schedule
        assert restored.quota == state.quota
        assert restored.config.enabled_api_categories == {ApiCategory.WEATHER}

    @pytest.mark.asyncio
    async def test_save_selected_keys(self, state_store):
        state = _fresh_state()
        state.quota.daily_count = 1
        await state_store.save(state, QUOTA_KEY)

        assert await state_store.get(QUOTA_KEY) is not None
        assert await state_store.get(SCHEDULE_KEY) is None

    @pytest.mark.asyncio
    async def test_corrupt_entry_keeps_default(self, state_store):
        await state_store.set(CONFIG_KEY, {"daily_limit": -5})

        restored = await state_store.load_into(_fresh_state())

        assert restored.config.daily_limit == 3

    @pytest.mark.asyncio
    async def test_empty_store_keeps_defaults(self, state_store):
        restored = await state_store.load_into(_fresh_state())

        assert not restored.schedule.is_enabled
        assert restored.quota.daily_count == 0


class TestWriteFailure:
    """测试写入失败被吸收。"""

    @pytest.mark.asyncio
    async def test_write_failure_returns_false(self):
        def _broken_session():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        store = StateStore(MagicMock(side_effect=_broken_session))

        assert await store.set("k", {"a": 1}) is False
        assert await store.save(_fresh_state()) is False
