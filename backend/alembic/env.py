"""
Alembic environment for the workspace schema.

The URL comes from workspace_manager settings, so DATABASE_URL (or .env)
drives the app and its migrations alike; `alembic -x url=...` overrides it
for a single run. Online migrations go through an async engine. SQLite
runs in batch mode because it cannot ALTER constraints in place.
"""

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from workspace_manager.core.config import settings
from workspace_manager.core.database import Base

# Register every table on Base.metadata for autogenerate
import workspace_manager.models.billing  # noqa: F401
import workspace_manager.models.project  # noqa: F401
import workspace_manager.models.user  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url", settings.DATABASE_URL)


def _options(dialect: str) -> dict[str, Any]:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": dialect == "sqlite",
    }


def run_offline(url: str) -> None:
    """Write the migration SQL to stdout instead of connecting."""
    dialect = url.split(":", 1)[0].split("+", 1)[0]
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(dialect),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_options(connection.dialect.name))
    with context.begin_transaction():
        context.run_migrations()


async def run_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline(_database_url())
else:
    asyncio.run(run_online(_database_url()))
