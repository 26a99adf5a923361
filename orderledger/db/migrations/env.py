"""Alembic environment for the documents schema, driven by run_migrations.build_config()."""

from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from orderledger.db import models  # noqa: F401
from orderledger.db.base import Base
from orderledger.db.config import get_settings

target_metadata = Base.metadata

_COMPARE = {"compare_type": True, "compare_server_default": True}


def run_migrations_offline() -> None:
    """Emit SQL for the URL placed in the Alembic config, without connecting."""
    url = context.config.get_main_option("sqlalchemy.url") or get_settings().sync_database_url
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_COMPARE,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, **_COMPARE)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply migrations over a short-lived asyncpg engine."""
    settings = get_settings()
    engine = create_async_engine(
        settings.async_database_url,
        echo=settings.SQL_ECHO,
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
