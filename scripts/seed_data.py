"""Seed database with the default application views."""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from engagement_service.core.config import settings
from engagement_service.core.db import _ensure_async_url
from engagement_service.models.models import View

DEFAULT_VIEWS = [
    "dashboard",
    "profile",
    "training",
    "training_plan",
    "activity_detail",
    "statistics",
    "settings",
]


async def seed_views(session: AsyncSession) -> None:
    """Create any default view that does not exist yet."""
    result = await session.execute(select(View.view_name))
    existing = set(result.scalars().all())

    for view_name in DEFAULT_VIEWS:
        if view_name in existing:
            print(f"✓ View already exists: {view_name}")
            continue
        session.add(View(view_name=view_name))
        print(f"✓ Created view: {view_name}")

    await session.commit()


async def main() -> None:
    """Run all seed operations."""
    print("🌱 Seeding database...")

    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured; cannot seed.")

    engine = create_async_engine(_ensure_async_url(settings.DATABASE_URL), echo=False)
    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        await seed_views(session)

    await engine.dispose()

    print("✅ Database seeding completed!")


if __name__ == "__main__":
    asyncio.run(main())
