"""
Pytest configuration and fixtures for engagement service tests
"""

import asyncio
import os
import sys
from datetime import datetime, timezone

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENABLE_APP_INSIGHTS"] = "false"
os.environ["API_PREFIX"] = "/api"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from engagement_service.api.deps import get_clock  # noqa: E402
from engagement_service.core.db import get_db  # noqa: E402
from engagement_service.main import app  # noqa: E402
from engagement_service.models import Base  # noqa: E402

FROZEN_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def frozen_now():
    return FROZEN_NOW


@pytest.fixture
def test_sessionmaker(tmp_path):
    """
    File-backed SQLite database with a fresh schema for each test.
    NullPool keeps connections from outliving the event loop that opened them.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'engagement.db'}", poolclass=NullPool)

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    asyncio.run(engine.dispose())


@pytest.fixture
def client(test_sessionmaker, frozen_now):
    """Test client with database and clock dependency overrides"""

    async def override_get_db():
        async with test_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: frozen_now)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"user-id": "123"}
