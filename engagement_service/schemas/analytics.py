"""Engagement analytics schemas."""

import enum
from datetime import date

from pydantic import BaseModel, Field


class EngagementTrend(str, enum.Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class DailyEngagement(BaseModel):
    """Engagement for a single UTC calendar day."""

    date: date
    sessions: int = Field(..., ge=0)
    duration: int = Field(..., ge=0)
    unique_views: int = Field(..., ge=0)
    avg_duration: float = Field(..., ge=0)


class EngagementAnalytics(BaseModel):
    """Aggregates over a user's lookback window."""

    total_sessions: int = Field(..., ge=0)
    total_duration: int = Field(..., ge=0)
    avg_duration: float = Field(..., ge=0)
    unique_views: int = Field(..., ge=0)
    daily_engagement: list[DailyEngagement]
    engagement_trend: EngagementTrend

    class Config:
        use_enum_values = True
