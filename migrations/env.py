from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from engagement_service.core.config import settings
from engagement_service.models import Base

config = context.config

# Async drivers Alembic may use directly; anything postgres goes through psycopg v3
_PSYCOPG_PREFIXES = (
	"postgresql+asyncpg://",
	"postgresql+psycopg2://",
	"postgresql://",
	"postgres://",
)


def _get_database_url() -> str:
	url = settings.DATABASE_URL
	if not url:
		raise RuntimeError("DATABASE_URL is not configured; cannot run migrations.")
	for prefix in _PSYCOPG_PREFIXES:
		if url.startswith(prefix):
			return "postgresql+psycopg://" + url[len(prefix):]
	return url


def _is_sqlite(url: str) -> bool:
	return url.startswith("sqlite")


if config.config_file_name is not None:
	fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", _get_database_url())


def _configure_kwargs(url: str) -> Dict[str, Any]:
	# SQLite cannot ALTER constraints in place; batch mode recreates the table
	return {
		"target_metadata": target_metadata,
		"compare_type": True,
		"render_as_batch": _is_sqlite(url),
	}


def run_migrations_offline() -> None:
	url = config.get_main_option("sqlalchemy.url")
	context.configure(
		url=url,
		literal_binds=True,
		dialect_opts={"paramstyle": "named"},
		**_configure_kwargs(url),
	)

	with context.begin_transaction():
		context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
	context.configure(connection=connection, **_configure_kwargs(str(connection.engine.url)))

	with context.begin_transaction():
		context.run_migrations()


async def run_migrations_online() -> None:
	configuration: Dict[str, Any] = config.get_section(config.config_ini_section, {})
	configuration["sqlalchemy.url"] = config.get_main_option("sqlalchemy.url")

	connectable = async_engine_from_config(
		configuration,
		prefix="sqlalchemy.",
		poolclass=pool.NullPool,
	)

	async with connectable.connect() as connection:
		await connection.run_sync(do_run_migrations)

	await connectable.dispose()


if context.is_offline_mode():
	run_migrations_offline()
else:
	asyncio.run(run_migrations_online())
