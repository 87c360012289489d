"""Alembic environment — migrates the marketplace tables (profiles, produce, orders, auth_accounts).

Invariants:
    - target_metadata is Base.metadata after farmlink.models has registered every table
    - The migration URL is normalized by the same asyncpg_url() the app settings use

Design Decisions:
    - FARMLINK_DATABASE_URL, then DATABASE_URL, then sqlalchemy.url from alembic.ini
    - NullPool: a migration run opens one connection and exits
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

import farmlink.models  # noqa: F401
from farmlink.config import asyncpg_url
from farmlink.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    url = os.environ.get("FARMLINK_DATABASE_URL") or os.environ.get("DATABASE_URL")
    return asyncpg_url(url or config.get_main_option("sqlalchemy.url"))


def run_migrations_offline() -> None:
    """Emit the marketplace DDL as SQL without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _apply(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _database_url()
    engine = async_engine_from_config(
        configuration, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    async with engine.connect() as connection:
        await connection.run_sync(_apply)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
