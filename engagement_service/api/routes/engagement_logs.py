"""Engagement log, view catalogue and analytics routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from engagement_service.api.deps import EngagementServiceDep, HeaderUserId, get_clock
from engagement_service.core.clock import Clock
from engagement_service.core.config import settings
from engagement_service.schemas.engagement import EngagementLogCreateRequest
from engagement_service.schemas.views import ViewCreateRequest
from engagement_service.services.analytics_service import MAX_ANALYTICS_DAYS
from engagement_service.utils.envelopes import api_success, pagination_meta

router = APIRouter(prefix="/engagement-logs", tags=["engagement-logs"])

Limit = Annotated[int, Query(ge=1, le=1000, description="Maximum number of logs to return")]
Offset = Annotated[int, Query(ge=0, description="Number of logs to skip")]


@router.get("/health", response_model=dict)
async def engagement_health(clock: Clock = Depends(get_clock)):
    """Service health without touching the database."""
    return api_success(
        {
            "status": "healthy",
            "service": "engagement-logs",
            "timestamp": clock().isoformat(),
        },
        message="Engagement Log Service is healthy",
    )


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_engagement_log(
    payload: EngagementLogCreateRequest,
    user_id: HeaderUserId,
    service: EngagementServiceDep,
):
    """Record time spent on a view by the caller in the ``user-id`` header."""
    log = await service.create_engagement_log(payload, user_id)
    return api_success(log.model_dump(), message="Engagement log created successfully")


@router.get("", response_model=dict)
async def list_engagement_logs(
    service: EngagementServiceDep,
    limit: Limit = 100,
    offset: Offset = 0,
):
    """All engagement logs, most recent first."""
    logs = await service.get_all_engagement_logs(limit, offset)
    return api_success(
        [log.model_dump() for log in logs],
        message=f"Retrieved {len(logs)} engagement logs",
        pagination=pagination_meta(limit, offset, len(logs)),
    )


@router.get("/user/{user_id}", response_model=dict)
async def list_user_engagement_logs(
    user_id: str,
    service: EngagementServiceDep,
    limit: Limit = 100,
    offset: Offset = 0,
):
    """Engagement logs for one user, most recent first."""
    logs = await service.get_engagement_logs_by_user(user_id, limit, offset)
    return api_success(
        [log.model_dump() for log in logs],
        message=f"Retrieved {len(logs)} engagement logs for user {user_id}",
        pagination=pagination_meta(limit, offset, len(logs)),
    )


@router.get("/stats/user/{user_id}", response_model=dict)
async def get_user_engagement_stats(user_id: str, service: EngagementServiceDep):
    stats = await service.get_engagement_stats(user_id)
    return api_success(stats.model_dump(), message=f"Retrieved engagement stats for user {user_id}")


@router.get("/stats/views", response_model=dict)
async def get_view_engagement_stats(service: EngagementServiceDep):
    stats = await service.get_view_engagement_stats()
    return api_success(
        [item.model_dump() for item in stats],
        message="Retrieved view engagement statistics",
    )


@router.get("/analytics/user/{user_id}", response_model=dict)
async def get_user_engagement_analytics(
    user_id: str,
    service: EngagementServiceDep,
    days: int = Query(
        settings.DEFAULT_ANALYTICS_DAYS, ge=1, le=MAX_ANALYTICS_DAYS, description="Days to analyse"
    ),
):
    """Totals, daily breakdown and weekly trend over the last ``days`` days."""
    analytics = await service.get_engagement_analytics(user_id, days)
    return api_success(
        analytics.model_dump(),
        message=f"Retrieved engagement analytics for user {user_id} (last {days} days)",
    )


@router.get("/views", response_model=dict)
async def list_available_views(service: EngagementServiceDep):
    views = await service.get_available_views()
    return api_success([view.model_dump() for view in views], message="Retrieved available views")


@router.post("/views", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_view(payload: ViewCreateRequest, service: EngagementServiceDep):
    view = await service.create_view(payload.view_name)
    return api_success(view.model_dump(), message=f'View "{view.view_name}" created successfully')


@router.get("/views/{view_name}", response_model=dict)
async def check_view_exists(view_name: str, service: EngagementServiceDep):
    result = await service.view_exists(view_name)
    verb = "exists" if result.exists else "does not exist"
    return api_success(result.model_dump(), message=f'View "{view_name}" {verb}')
