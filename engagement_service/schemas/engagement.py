"""Engagement log schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from engagement_service.core.config import settings


class EngagementLogCreateRequest(BaseModel):
    """Request to record time spent on a view. The user comes from headers."""

    view_id: int = Field(..., ge=1, description="ID of the viewed section")
    duration_seconds: int = Field(
        ..., ge=0, le=settings.MAX_DURATION_SECONDS, description="Time spent on the view in seconds"
    )
    viewed_at: Optional[datetime] = Field(None, description="When the view happened, defaults to now")


class EngagementLogResponse(BaseModel):
    """Engagement log response model."""

    id: int
    user_id: int
    view_id: int
    view_name: Optional[str] = None
    duration_seconds: int
    viewed_at: datetime

    class Config:
        from_attributes = True


class UserEngagementStats(BaseModel):
    """All-time engagement aggregates for one user."""

    total_sessions: int = 0
    total_duration: int = 0
    avg_duration: float = 0
    unique_views: int = 0
    last_activity: Optional[datetime] = None


class ViewEngagementStats(BaseModel):
    """Engagement aggregates for one view across all users."""

    view_name: str
    total_views: int
    avg_duration: float
