"""Engagement analytics calculator.

Turns a user's raw view sessions into window aggregates, a zero-filled
per-day breakdown and a week-over-week trend. Everything here is a pure
function of its arguments; the current time is always passed in.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple, Optional, Sequence

from engagement_service.core.clock import as_utc
from engagement_service.schemas.analytics import DailyEngagement, EngagementAnalytics, EngagementTrend

DEFAULT_ANALYTICS_DAYS = 30
# Ten years of daily buckets
MAX_ANALYTICS_DAYS = 3650
TREND_THRESHOLD_PERCENT = 10.0


class ViewSession(NamedTuple):
    """One observation of a user on a view."""

    view_label: str
    duration_seconds: int
    viewed_at: datetime


@dataclass
class WeeklyAggregate:
    week_start: date
    sessions: int = 0
    duration: int = 0


def _utc_date(value: datetime) -> date:
    return as_utc(value).date()


def week_start(value: datetime) -> date:
    """Sunday that starts the week containing ``value`` (UTC)."""
    day = _utc_date(value)
    # date.weekday() is Monday=0; shift so Sunday=0
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


def filter_recent_sessions(sessions: Iterable[ViewSession], days: int, now: datetime) -> list[ViewSession]:
    """Sessions viewed at or after ``now - days``."""
    cutoff = as_utc(now) - timedelta(days=days)
    return [session for session in sessions if as_utc(session.viewed_at) >= cutoff]


def calculate_daily_engagement(
    sessions: Sequence[ViewSession], days: int, today: date
) -> list[DailyEngagement]:
    """One bucket per day from ``today`` back ``days - 1`` days, today first."""
    bucket_dates = [today - timedelta(days=offset) for offset in range(days)]

    daily: list[DailyEngagement] = []
    for bucket_date in bucket_dates:
        day_sessions = [s for s in sessions if _utc_date(s.viewed_at) == bucket_date]
        count = len(day_sessions)
        duration = sum(s.duration_seconds for s in day_sessions)
        daily.append(
            DailyEngagement(
                date=bucket_date,
                sessions=count,
                duration=duration,
                unique_views=len({s.view_label for s in day_sessions}),
                avg_duration=duration / count if count > 0 else 0,
            )
        )
    return daily


def group_by_week(sessions: Iterable[ViewSession]) -> list[WeeklyAggregate]:
    """Weekly totals ordered by week start, oldest first."""
    weeks: dict[date, WeeklyAggregate] = {}
    for session in sessions:
        key = week_start(session.viewed_at)
        week = weeks.setdefault(key, WeeklyAggregate(week_start=key))
        week.sessions += 1
        week.duration += session.duration_seconds
    return [weeks[key] for key in sorted(weeks)]


def _percent_change(current: int, previous: int) -> Optional[float]:
    if previous == 0:
        return None
    return (current - previous) * 100 / previous


def _direction(change: float) -> int:
    if change > TREND_THRESHOLD_PERCENT:
        return 1
    if change < -TREND_THRESHOLD_PERCENT:
        return -1
    return 0


def calculate_engagement_trend(sessions: Sequence[ViewSession]) -> EngagementTrend:
    """Compare the two latest weeks present in ``sessions``.

    Each metric (session count, total duration) is classified as rising,
    falling or flat against a 10% threshold. The trend is increasing when
    neither metric falls and at least one rises, decreasing in the mirrored
    case, and stable otherwise. A previous week with zero total duration has
    no defined percentage change and yields stable.
    """
    if len(sessions) < 2:
        return EngagementTrend.INSUFFICIENT_DATA

    weeks = group_by_week(sessions)
    if len(weeks) < 2:
        return EngagementTrend.INSUFFICIENT_DATA

    previous_week, recent_week = weeks[-2], weeks[-1]
    session_change = _percent_change(recent_week.sessions, previous_week.sessions)
    duration_change = _percent_change(recent_week.duration, previous_week.duration)
    if session_change is None or duration_change is None:
        return EngagementTrend.STABLE

    directions = {_direction(session_change), _direction(duration_change)}
    if 1 in directions and -1 not in directions:
        return EngagementTrend.INCREASING
    if -1 in directions and 1 not in directions:
        return EngagementTrend.DECREASING
    return EngagementTrend.STABLE


def compute_engagement_analytics(
    sessions: Iterable[ViewSession],
    days: int = DEFAULT_ANALYTICS_DAYS,
    *,
    now: datetime,
) -> EngagementAnalytics:
    """Aggregate a user's sessions over the trailing ``days`` window.

    Args:
        sessions: All sessions fetched for the user, in any order
        days: Lookback window in days, between 1 and MAX_ANALYTICS_DAYS
        now: Current time; naive values are treated as UTC

    Returns:
        EngagementAnalytics with ``days`` daily buckets and the weekly trend
    """
    if not 1 <= days <= MAX_ANALYTICS_DAYS:
        raise ValueError(f"days must be between 1 and {MAX_ANALYTICS_DAYS}")

    recent = filter_recent_sessions(sessions, days, now)
    total_sessions = len(recent)
    total_duration = sum(s.duration_seconds for s in recent)

    return EngagementAnalytics(
        total_sessions=total_sessions,
        total_duration=total_duration,
        avg_duration=total_duration / total_sessions if total_sessions > 0 else 0,
        unique_views=len({s.view_label for s in recent}),
        daily_engagement=calculate_daily_engagement(recent, days, as_utc(now).date()),
        engagement_trend=calculate_engagement_trend(recent),
    )
