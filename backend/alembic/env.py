"""
Idea Hub schema migrations.

    alembic upgrade head                 apply against DATABASE_URL
    alembic upgrade head --sql           print the SQL instead

DATABASE_URL is read through ideahub.config, so migrations and the API always
target the same database; alembic.ini carries no URL. SQLite databases get
batch mode because ALTER TABLE there cannot drop or retype columns.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from ideahub.config import settings
from ideahub.database import Base
import ideahub.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _configure(**options) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **options)


def _apply(connection) -> None:
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
    with context.begin_transaction():
        context.run_migrations()


async def _apply_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_apply)
    finally:
        await engine.dispose()


def _emit_sql() -> None:
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _emit_sql()
else:
    asyncio.run(_apply_online())
