"""异步数据库会话管理。

提供异步 SQLAlchemy 引擎和会话工厂。
"""

import logging
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chaff.database.models import Base

logger = logging.getLogger(__name__)

# 延迟初始化
_async_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def _get_async_database_url() -> str:
    """获取异步数据库 URL。

    将同步 URL 转换为异步 URL：
    - sqlite:///./chaff.db -> sqlite+aiosqlite:///./chaff.db
    """
    from chaff.config import get_settings

    settings = get_settings()
    return settings.database_url.replace("sqlite:///", "sqlite+aiosqlite:///")


def get_async_engine() -> AsyncEngine:
    """获取异步数据库引擎。

    Returns:
        AsyncEngine: SQLAlchemy 异步引擎
    """
    global _async_engine
    if _async_engine is None:
        from chaff.config import get_settings

        settings = get_settings()
        _async_engine = create_async_engine(
            _get_async_database_url(),
            echo=settings.log_level == "DEBUG",
            pool_pre_ping=True,
        )
    return _async_engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    """获取异步会话工厂。

    Returns:
        async_sessionmaker: 异步会话工厂
    """
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_maker


async def get_async_session() -> AsyncIterator[AsyncSession]:
    """获取异步数据库会话。

    Yields:
        AsyncSession: 异步数据库会话
    """
    async with get_async_session_maker()() as session:
        yield session


async def create_tables() -> None:
    """创建缺失的数据表。

    生产环境使用 Alembic 迁移；本函数保证首次启动时表存在。
    """
    # 注册 ORM 模型
    import chaff.storage.models  # noqa: F401

    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据库表已就绪")


async def dispose_engine() -> None:
    """释放异步引擎的连接池。"""
    global _async_engine, _async_session_maker
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_maker = None
