from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from engagement_service.core.config import settings

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def _ensure_async_url(url: str) -> str:
	"""Ensure the SQLAlchemy URL uses the asyncpg driver.

	Handles common provider formats like:
	- postgresql://...
	- postgres://...
	- postgresql+psycopg://... (or +psycopg2)

	Returns the URL unchanged if it's already asyncpg or not PostgreSQL.
	"""
	if url.startswith("postgresql+asyncpg://"):
		return url

	if url.startswith("postgres://"):
		return url.replace("postgres://", "postgresql+asyncpg://", 1)

	if url.startswith("postgresql://"):
		return url.replace("postgresql://", "postgresql+asyncpg://", 1)

	if url.startswith("postgresql+psycopg2://"):
		return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
	if url.startswith("postgresql+psycopg://"):
		return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)

	return url


def _engine_options(url: str) -> dict[str, Any]:
	options: dict[str, Any] = {"pool_pre_ping": True, "future": True}
	# SQLite (local development) manages its own pool
	if url.startswith("sqlite"):
		return options
	options.update(
		pool_size=settings.DB_POOL_SIZE,
		pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
		pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
	)
	return options


def init_engine_and_session() -> None:
	global _engine, _SessionLocal
	if _engine is not None:
		return
	if not settings.DATABASE_URL:
		raise RuntimeError("DATABASE_URL is not configured. Set it in the environment or .env file.")
	database_url = _ensure_async_url(settings.DATABASE_URL)
	_engine = create_async_engine(database_url, **_engine_options(database_url))
	_SessionLocal = async_sessionmaker(bind=_engine, expire_on_commit=False)
	logger.info("Database engine initialised")


async def dispose_engine() -> None:
	global _engine, _SessionLocal
	if _engine is None:
		return
	await _engine.dispose()
	_engine = None
	_SessionLocal = None
	logger.info("Database engine disposed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
	if _SessionLocal is None:
		init_engine_and_session()
	assert _SessionLocal is not None
	async with _SessionLocal() as session:
		yield session
