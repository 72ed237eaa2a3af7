"""状态存储 ORM 模型。

定义 state_entries 表：每个键一行，值为 JSON 文本。
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from chaff.database.models import Base


class StateEntryOrm(Base):
    """状态条目 ORM 模型。"""

    __tablename__ = "state_entries"

    key: Mapped[str] = mapped_column(
        String(64), primary_key=True, comment="状态键"
    )
    value: Mapped[str] = mapped_column(
        Text, nullable=False, comment="JSON 编码的状态值"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        server_default=func.now(),
        comment="最后更新时间",
    )
