"""Query layer for engagement logs - contains raw database queries."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from engagement_service.models.models import EngagementLog, View


class EngagementQueries:
    """Query layer for engagement log table operations."""

    @staticmethod
    async def create_engagement_log(
        db: AsyncSession,
        user_id: int,
        view_id: int,
        duration_seconds: int,
        viewed_at: datetime,
    ) -> EngagementLog:
        """Insert a new engagement log and return it with its view loaded."""
        log = EngagementLog(
            user_id=user_id,
            view_id=view_id,
            duration_seconds=duration_seconds,
            viewed_at=viewed_at,
        )
        db.add(log)
        await db.flush()
        await db.refresh(log, attribute_names=["view"])
        await db.commit()
        return log

    @staticmethod
    async def get_logs_by_user_id(
        db: AsyncSession, user_id: int, limit: int = 100, offset: int = 0
    ) -> list[EngagementLog]:
        """Get a user's logs, most recent first."""
        stmt = (
            select(EngagementLog)
            .options(joinedload(EngagementLog.view))
            .where(EngagementLog.user_id == user_id)
            .order_by(EngagementLog.viewed_at.desc(), EngagementLog.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_all_logs(db: AsyncSession, limit: int = 100, offset: int = 0) -> list[EngagementLog]:
        """Get logs of every user, most recent first."""
        stmt = (
            select(EngagementLog)
            .options(joinedload(EngagementLog.view))
            .order_by(EngagementLog.viewed_at.desc(), EngagementLog.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_user_stats(db: AsyncSession, user_id: int) -> dict[str, Any]:
        """Aggregate all of a user's logs in a single query."""
        stmt = select(
            func.count(EngagementLog.id).label("total_sessions"),
            func.sum(EngagementLog.duration_seconds).label("total_duration"),
            func.avg(EngagementLog.duration_seconds).label("avg_duration"),
            func.count(func.distinct(EngagementLog.view_id)).label("unique_views"),
            func.max(EngagementLog.viewed_at).label("last_activity"),
        ).where(EngagementLog.user_id == user_id)
        result = await db.execute(stmt)
        row = result.one()
        return dict(row._mapping)

    @staticmethod
    async def get_view_stats(db: AsyncSession) -> list[dict[str, Any]]:
        """Per-view session counts and average duration across all users."""
        stmt = (
            select(
                View.view_name,
                func.count(EngagementLog.id).label("total_views"),
                func.avg(EngagementLog.duration_seconds).label("avg_duration"),
            )
            .join(View, EngagementLog.view_id == View.id)
            .group_by(View.view_name)
            .order_by(func.count(EngagementLog.id).desc(), View.view_name)
        )
        result = await db.execute(stmt)
        return [dict(row._mapping) for row in result.all()]


class ViewQueries:
    """Query layer for the available views table."""

    @staticmethod
    async def get_all_views(db: AsyncSession) -> list[View]:
        result = await db.execute(select(View).order_by(View.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_view_by_id(db: AsyncSession, view_id: int) -> Optional[View]:
        result = await db.execute(select(View).where(View.id == view_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def count_views_by_name(db: AsyncSession, view_name: str) -> int:
        result = await db.execute(select(func.count(View.id)).where(View.view_name == view_name))
        return int(result.scalar_one())

    @staticmethod
    async def create_view(db: AsyncSession, view_name: str) -> View:
        """Create a new view in the database."""
        view = View(view_name=view_name)
        db.add(view)
        await db.flush()
        await db.refresh(view)
        await db.commit()
        return view
