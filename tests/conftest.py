"""Pytest 配置文件。

提供测试 Fixtures 和配置。
"""

import os
import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from returns.result import Success
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chaff.clock import FrozenClock
from chaff.config import Settings, clear_settings_cache
from chaff.database.models import Base
from chaff.endpoints.client import FetchResponse
from chaff.schedule.coordinator import ExecutionCoordinator
from chaff.schedule.state import SchedulerState
from chaff.storage.state_store import StateStore

# 导入所有 ORM 模型以确保它们被注册到 Base.metadata
from chaff.storage.models import StateEntryOrm  # noqa: F401

# 2026-03-02 是周一
MONDAY_10AM = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_env_before_each_test():
    """在每个测试前后重置环境变量和配置缓存。"""
    original_env = os.environ.copy()
    clear_settings_cache()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    clear_settings_cache()


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    """测试配置 Fixture。

    提供测试用的配置值，不读取本地 .env。
    """
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        log_level="WARNING",
        prometheus_enabled=False,
    )


@pytest.fixture(scope="function")
def fixed_interval_settings() -> Settings:
    """触发间隔固定为 1 小时的配置，便于推算时间线。"""
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        log_level="WARNING",
        prometheus_enabled=False,
        min_fire_interval_seconds=3600,
        max_fire_interval_seconds=3600,
    )


@pytest.fixture(scope="function")
def frozen_clock() -> FrozenClock:
    """固定在周一 10:00 (UTC) 的时钟。"""
    return FrozenClock(MONDAY_10AM)


@pytest.fixture(scope="function")
def mock_client() -> MagicMock:
    """Mock 端点客户端，默认返回 200 和 512 字节。"""
    client = MagicMock()
    client.fetch = AsyncMock(return_value=Success(FetchResponse(status_code=200, byte_length=512)))
    client.close = AsyncMock()
    return client


@pytest.fixture(scope="function")
async def session_maker():
    """异步会话工厂 Fixture。

    每个测试函数使用独立的内存数据库。
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest.fixture(scope="function")
async def state_store(session_maker) -> StateStore:
    """基于内存数据库的状态存储。"""
    return StateStore(session_maker)


@pytest.fixture(scope="function")
def make_coordinator(frozen_clock, mock_client):
    """协调器工厂 Fixture。

    使用冻结时钟、Mock 客户端和固定随机种子构造协调器。
    """

    def _make(
        settings: Settings,
        store: StateStore | None = None,
        state: SchedulerState | None = None,
        seed: int = 42,
    ) -> ExecutionCoordinator:
        return ExecutionCoordinator(
            state or SchedulerState.from_settings(settings),
            settings,
            frozen_clock,
            mock_client,
            store=store,
            rng=random.Random(seed),
        )

    return _make


@pytest.fixture(scope="function")
def coordinator(make_coordinator, test_settings) -> ExecutionCoordinator:
    """不持久化的协调器。"""
    return make_coordinator(test_settings)
