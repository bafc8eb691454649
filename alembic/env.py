from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from sekai_sync.config import settings
from sekai_sync.db import ensure_ssl_mode, to_async_url
from sekai_sync.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> tuple[str, dict]:
    if not settings.POSTGRES_CONNECTION_STRING:
        raise RuntimeError("POSTGRES_CONNECTION_STRING is empty")
    return to_async_url(ensure_ssl_mode(settings.POSTGRES_CONNECTION_STRING, settings.PG_SSLMODE))


def run_migrations_offline() -> None:
    url, _ = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url, connect_args = get_url()
    engine = create_async_engine(url, connect_args=connect_args)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
