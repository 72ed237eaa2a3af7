"""add_state_entries_table

新增状态条目表，按键保存调度状态、配额、统计和运行时配置。

Revision ID: 3f9a6c1e2b7d
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "3f9a6c1e2b7d"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """创建 state_entries 表。"""
    op.create_table(
        "state_entries",
        sa.Column("key", sa.String(64), primary_key=True, comment="状态键"),
        sa.Column("value", sa.Text, nullable=False, comment="JSON 编码的状态值"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment="最后更新时间"),
        comment="调度器状态键值表",
    )


def downgrade() -> None:
    """删除 state_entries 表。"""
    op.drop_table("state_entries")
