"""持久化状态存储。

按键读写调度器状态，每个键一次事务。写入失败只记录日志，
内存中的状态在下一次成功写入前保持权威。
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chaff.schedule.domain.models import QuotaState, RuntimeConfig, ScheduleState
from chaff.schedule.state import SchedulerState
from chaff.stats.domain.models import SearchStats
from chaff.storage.models import StateEntryOrm

logger = logging.getLogger(__name__)

SCHEDULE_KEY = "schedule_state"
QUOTA_KEY = "quota_state"
STATS_KEY = "search_stats"
CONFIG_KEY = "runtime_config"

# 键 -> (SchedulerState 属性名, 模型类型)
STATE_KEYS: dict[str, tuple[str, type[BaseModel]]] = {
    SCHEDULE_KEY: ("schedule", ScheduleState),
    QUOTA_KEY: ("quota", QuotaState),
    STATS_KEY: ("stats", SearchStats),
    CONFIG_KEY: ("config", RuntimeConfig),
}


class StateStore:
    """基于 state_entries 表的键值存储。"""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get(self, key: str) -> Any | None:
        """读取键对应的 JSON 值。

        Args:
            key: 状态键

        Returns:
            Any | None: 解码后的值，不存在时返回 None
        """
        async with self._session_maker() as session:
            stmt = select(StateEntryOrm).where(StateEntryOrm.key == key)
            result = await session.execute(stmt)
            orm = result.scalar_one_or_none()
            if orm is None:
                return None
            return json.loads(orm.value)

    async def set(self, key: str, value: Any) -> bool:
        """写入键值（插入或更新）。

        Args:
            key: 状态键
            value: 可 JSON 编码的值

        Returns:
            bool: 是否写入成功；失败时记录警告并返回 False
        """
        payload = json.dumps(value, ensure_ascii=False)
        try:
            async with self._session_maker() as session:
                stmt = select(StateEntryOrm).where(StateEntryOrm.key == key)
                result = await session.execute(stmt)
                existing = result.scalar_one_or_none()

                if existing is not None:
                    existing.value = payload
                else:
                    session.add(StateEntryOrm(key=key, value=payload))

                await session.commit()
            return True
        except SQLAlchemyError as e:
            logger.warning(f"状态写入失败: {key} - {e}")
            return False

    async def load_into(self, state: SchedulerState) -> SchedulerState:
        """将持久化的状态加载到 ``state`` 中。

        缺失或无法解析的键保留默认值。

        Args:
            state: 待填充的调度器状态

        Returns:
            SchedulerState: 同一个实例
        """
        for key, (attr, model) in STATE_KEYS.items():
            raw = await self.get(key)
            if raw is None:
                continue
            try:
                setattr(state, attr, model.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"持久化状态无法解析，使用默认值: {key} - {e}")
        logger.info(
            f"状态已加载: enabled={state.schedule.is_enabled}, "
            f"phase={state.schedule.phase.value}, "
            f"next_fire_time={state.schedule.next_fire_time}"
        )
        return state

    async def save(self, state: SchedulerState, *keys: str) -> bool:
        """保存指定键；未指定时保存全部。

        Returns:
            bool: 所有键是否都写入成功
        """
        ok = True
        for key in keys or tuple(STATE_KEYS):
            attr, _ = STATE_KEYS[key]
            model: BaseModel = getattr(state, attr)
            ok = await self.set(key, model.model_dump(mode="json")) and ok
        return ok
