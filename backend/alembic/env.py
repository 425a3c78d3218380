"""
Alembic Migration Environment
==============================

What:  Runs BabyJournal migrations with the application's async engine
       configuration.
How:   The URL comes from babyjournal.config.settings (not alembic.ini), and
       migrations run inside connection.run_sync() on an async connection.
Who:   `alembic upgrade head` in deployments that set AUTO_CREATE_SCHEMA=false.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import event, pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from babyjournal.config import settings
from babyjournal.database import Base, _enable_sqlite_foreign_keys

# Registers every table on Base.metadata for --autogenerate
import babyjournal.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=settings.database_url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    if connectable.dialect.name == "sqlite":
        event.listen(connectable.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
