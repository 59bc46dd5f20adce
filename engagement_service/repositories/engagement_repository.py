"""Repository layer for engagement logs and views - abstracts data access."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from engagement_service.models.models import EngagementLog, View
from engagement_service.queries.engagement_queries import EngagementQueries, ViewQueries
from engagement_service.utils.exceptions import ConflictException, DatabaseException

logger = logging.getLogger(__name__)


class EngagementRepository:
    """Repository layer for engagement data access operations."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    @asynccontextmanager
    async def _translate_errors(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Error %s: %s", action, exc)
            await self.db.rollback()
            raise DatabaseException(f"Error {action}") from exc

    async def create(
        self,
        user_id: int,
        view_id: int,
        duration_seconds: int,
        viewed_at: datetime,
    ) -> EngagementLog:
        """Create a new engagement log."""
        async with self._translate_errors("creating engagement log"):
            return await EngagementQueries.create_engagement_log(
                db=self.db,
                user_id=user_id,
                view_id=view_id,
                duration_seconds=duration_seconds,
                viewed_at=viewed_at,
            )

    async def find_by_user_id(self, user_id: int, limit: int = 100, offset: int = 0) -> list[EngagementLog]:
        """Get a page of a user's engagement logs, most recent first."""
        async with self._translate_errors("fetching engagement logs by user"):
            return await EngagementQueries.get_logs_by_user_id(
                db=self.db, user_id=user_id, limit=limit, offset=offset
            )

    async def find_all(self, limit: int = 100, offset: int = 0) -> list[EngagementLog]:
        """Get a page of all engagement logs."""
        async with self._translate_errors("fetching all engagement logs"):
            return await EngagementQueries.get_all_logs(db=self.db, limit=limit, offset=offset)

    async def get_user_stats(self, user_id: int) -> dict[str, Any]:
        async with self._translate_errors("fetching engagement stats"):
            return await EngagementQueries.get_user_stats(db=self.db, user_id=user_id)

    async def get_view_stats(self) -> list[dict[str, Any]]:
        async with self._translate_errors("fetching view engagement stats"):
            return await EngagementQueries.get_view_stats(db=self.db)

    async def get_available_views(self) -> list[View]:
        async with self._translate_errors("fetching available views"):
            return await ViewQueries.get_all_views(db=self.db)

    async def get_view_by_id(self, view_id: int) -> Optional[View]:
        async with self._translate_errors("fetching view"):
            return await ViewQueries.get_view_by_id(db=self.db, view_id=view_id)

    async def view_exists(self, view_name: str) -> bool:
        async with self._translate_errors("checking if view exists"):
            return await ViewQueries.count_views_by_name(db=self.db, view_name=view_name) > 0

    async def create_view(self, view_name: str) -> View:
        """Create a view. A concurrent insert of the same name is a conflict."""
        try:
            return await ViewQueries.create_view(db=self.db, view_name=view_name)
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictException(f'View "{view_name}" already exists') from exc
        except SQLAlchemyError as exc:
            logger.error("Error creating view: %s", exc)
            await self.db.rollback()
            raise DatabaseException("Error creating view") from exc
