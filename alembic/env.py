from logging.config import fileConfig

from alembic import context

# 导入项目配置和模型
from chaff.config import get_settings
from chaff.database.models import Base, get_engine

# 导入所有 ORM 模型以确保它们被注册到 Base.metadata
import chaff.storage.models  # noqa: F401 导入 StateEntryOrm

config = context.config

# 从项目配置获取数据库 URL
settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 添加模型的 MetaData 对象，用于 'autogenerate' 支持
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """离线模式：只生成 SQL，不连接数据库。"""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """在线模式：使用项目的同步引擎执行迁移。"""
    connectable = get_engine()

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,  # SQLite 需要 batch 模式来修改表结构
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
