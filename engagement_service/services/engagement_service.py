"""Service layer for engagement logs and views - contains business logic.

Architecture:
- Route: Handles HTTP requests/responses, calls service
- Service: Contains business logic, orchestrates repository calls
- Repository: Contains database queries only
"""

import logging
import re
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from engagement_service.core.clock import Clock, as_utc, utc_now
from engagement_service.core.config import settings
from engagement_service.models.models import EngagementLog
from engagement_service.repositories.engagement_repository import EngagementRepository
from engagement_service.schemas.analytics import EngagementAnalytics
from engagement_service.schemas.engagement import (
    EngagementLogCreateRequest,
    EngagementLogResponse,
    UserEngagementStats,
    ViewEngagementStats,
)
from engagement_service.schemas.views import ViewExistsResponse, ViewResponse
from engagement_service.services.analytics_service import (
    MAX_ANALYTICS_DAYS,
    ViewSession,
    compute_engagement_analytics,
)
from engagement_service.utils.exceptions import (
    ConflictException,
    InvalidUserIdException,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)

_USER_ID_PATTERN = re.compile(r"\+?[0-9]+")


def parse_user_id(raw: Any, message: str = "Invalid user ID") -> int:
    """Coerce a user id to a positive int or raise InvalidUserIdException."""
    if isinstance(raw, bool):
        raise InvalidUserIdException(message)
    if isinstance(raw, int):
        user_id = raw
    else:
        text = str(raw).strip()
        # ASCII digits only; int() would also take "1_000" and non-Latin digits
        if not _USER_ID_PATTERN.fullmatch(text):
            raise InvalidUserIdException(message)
        user_id = int(text)
    if user_id <= 0:
        raise InvalidUserIdException(message)
    return user_id


def to_log_response(log: EngagementLog) -> EngagementLogResponse:
    return EngagementLogResponse(
        id=log.id,
        user_id=log.user_id,
        view_id=log.view_id,
        view_name=log.view.view_name if log.view is not None else None,
        duration_seconds=log.duration_seconds,
        viewed_at=as_utc(log.viewed_at),
    )


class EngagementService:
    """Service layer for engagement business logic."""

    def __init__(
        self,
        db: Optional[AsyncSession],
        clock: Clock = utc_now,
        repository: Optional[EngagementRepository] = None,
    ):
        """Initialize service with database session and time source."""
        self.repository = repository if repository is not None else EngagementRepository(db)
        self.clock = clock

    async def create_engagement_log(
        self, payload: EngagementLogCreateRequest, user_id: int
    ) -> EngagementLogResponse:
        """Record a view session for the user identified by the request headers."""
        user_id = parse_user_id(user_id, "Invalid user ID from headers")

        view = await self.repository.get_view_by_id(payload.view_id)
        if view is None:
            raise NotFoundException(f"View {payload.view_id} does not exist")

        viewed_at = as_utc(payload.viewed_at) if payload.viewed_at is not None else self.clock()

        log = await self.repository.create(
            user_id=user_id,
            view_id=payload.view_id,
            duration_seconds=payload.duration_seconds,
            viewed_at=viewed_at,
        )
        logger.info(
            "Engagement log created",
            extra={"user_id": user_id, "view_id": payload.view_id, "log_id": log.id},
        )
        return to_log_response(log)

    async def get_engagement_logs_by_user(
        self, user_id: Any, limit: int = 100, offset: int = 0
    ) -> list[EngagementLogResponse]:
        user_id = parse_user_id(user_id)
        logs = await self.repository.find_by_user_id(user_id, limit, offset)
        return [to_log_response(log) for log in logs]

    async def get_all_engagement_logs(self, limit: int = 100, offset: int = 0) -> list[EngagementLogResponse]:
        logs = await self.repository.find_all(limit, offset)
        return [to_log_response(log) for log in logs]

    async def get_engagement_stats(self, user_id: Any) -> UserEngagementStats:
        """All-time SQL aggregates for a user; zeros when the user has no logs."""
        user_id = parse_user_id(user_id)
        row = await self.repository.get_user_stats(user_id)
        last_activity = row.get("last_activity")
        return UserEngagementStats(
            total_sessions=int(row.get("total_sessions") or 0),
            total_duration=int(row.get("total_duration") or 0),
            avg_duration=float(row.get("avg_duration") or 0),
            unique_views=int(row.get("unique_views") or 0),
            last_activity=as_utc(last_activity) if last_activity is not None else None,
        )

    async def get_view_engagement_stats(self) -> list[ViewEngagementStats]:
        rows = await self.repository.get_view_stats()
        return [
            ViewEngagementStats(
                view_name=row["view_name"],
                total_views=int(row["total_views"] or 0),
                avg_duration=float(row["avg_duration"] or 0),
            )
            for row in rows
        ]

    async def get_available_views(self) -> list[ViewResponse]:
        views = await self.repository.get_available_views()
        return [ViewResponse.model_validate(view) for view in views]

    async def create_view(self, view_name: Optional[str]) -> ViewResponse:
        """Register a new view name after trimming and uniqueness checks."""
        if not isinstance(view_name, str) or not view_name.strip():
            raise ValidationException("View name is required and must be a non-empty string")

        view_name = view_name.strip()
        if await self.repository.view_exists(view_name):
            raise ConflictException(f'View "{view_name}" already exists')

        view = await self.repository.create_view(view_name)
        logger.info("View created", extra={"view_id": view.id, "view_name": view_name})
        return ViewResponse.model_validate(view)

    async def view_exists(self, view_name: str) -> ViewExistsResponse:
        exists = await self.repository.view_exists(view_name)
        return ViewExistsResponse(exists=exists, view_name=view_name)

    async def get_engagement_analytics(
        self, user_id: Any, days: int = settings.DEFAULT_ANALYTICS_DAYS
    ) -> EngagementAnalytics:
        """Analytics over the user's most recent logs for the trailing ``days``."""
        user_id = parse_user_id(user_id)
        if not 1 <= days <= MAX_ANALYTICS_DAYS:
            raise ValidationException(f"days must be between 1 and {MAX_ANALYTICS_DAYS}")

        logs = await self.repository.find_by_user_id(user_id, settings.ANALYTICS_FETCH_LIMIT, 0)
        sessions = [
            ViewSession(
                view_label=log.view.view_name if log.view is not None else str(log.view_id),
                duration_seconds=log.duration_seconds,
                viewed_at=log.viewed_at,
            )
            for log in logs
        ]
        return compute_engagement_analytics(sessions, days, now=self.clock())
