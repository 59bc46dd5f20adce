"""
Tests for the engagement analytics calculator

Covers window filtering, daily bucketing and week-over-week trend classification.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from engagement_service.schemas.analytics import EngagementTrend
from engagement_service.services.analytics_service import (
    MAX_ANALYTICS_DAYS,
    ViewSession,
    calculate_daily_engagement,
    calculate_engagement_trend,
    compute_engagement_analytics,
    group_by_week,
    week_start,
)

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def session(viewed_at, duration=100, label="dashboard"):
    return ViewSession(view_label=label, duration_seconds=duration, viewed_at=viewed_at)


def two_week_sessions(first_week_duration, second_week_duration):
    return [
        session(utc(2024, 1, 1), first_week_duration),
        session(utc(2024, 1, 2), first_week_duration),
        session(utc(2024, 1, 8), second_week_duration),
        session(utc(2024, 1, 9), second_week_duration),
    ]


class TestComputeEngagementAnalytics:
    """Test window aggregates"""

    def test_empty_sessions_return_zeroes(self):
        result = compute_engagement_analytics([], 30, now=NOW)

        assert result.total_sessions == 0
        assert result.total_duration == 0
        assert result.avg_duration == 0
        assert result.unique_views == 0
        assert result.engagement_trend == EngagementTrend.INSUFFICIENT_DATA
        assert len(result.daily_engagement) == 30
        assert all(day.sessions == 0 and day.duration == 0 for day in result.daily_engagement)
        assert all(day.unique_views == 0 and day.avg_duration == 0 for day in result.daily_engagement)

    def test_aggregates_over_recent_sessions(self):
        sessions = [
            session(utc(2024, 1, 15, 9), 300, "dashboard"),
            session(utc(2024, 1, 14, 9), 150, "profile"),
            session(utc(2024, 1, 10, 9), 60, "dashboard"),
        ]

        result = compute_engagement_analytics(sessions, 30, now=NOW)

        assert result.total_sessions == 3
        assert result.total_duration == 510
        assert result.avg_duration == pytest.approx(170)
        assert result.unique_views == 2

    def test_sessions_outside_window_are_excluded(self):
        sessions = [
            session(utc(2024, 1, 14), 100, "dashboard"),
            session(utc(2023, 11, 1), 500, "statistics"),
        ]

        result = compute_engagement_analytics(sessions, 30, now=NOW)

        assert result.total_sessions == 1
        assert result.total_duration == 100
        assert result.unique_views == 1

    def test_session_exactly_at_cutoff_is_included(self):
        cutoff = NOW - timedelta(days=7)
        sessions = [session(cutoff, 40), session(cutoff - timedelta(seconds=1), 80)]

        result = compute_engagement_analytics(sessions, 7, now=NOW)

        assert result.total_sessions == 1
        assert result.total_duration == 40

    def test_single_session_has_insufficient_data(self):
        for days in (1, 7, 365):
            result = compute_engagement_analytics([session(NOW - timedelta(hours=1))], days, now=NOW)
            assert result.engagement_trend == EngagementTrend.INSUFFICIENT_DATA

    def test_naive_timestamps_are_treated_as_utc(self):
        sessions = [session(datetime(2024, 1, 15, 1, 0), 120)]

        result = compute_engagement_analytics(sessions, 1, now=datetime(2024, 1, 15, 23, 0))

        assert result.total_sessions == 1
        assert result.daily_engagement[0].date == date(2024, 1, 15)
        assert result.daily_engagement[0].sessions == 1

    def test_same_inputs_give_identical_results(self):
        sessions = two_week_sessions(100, 200)

        first = compute_engagement_analytics(sessions, 30, now=NOW)
        second = compute_engagement_analytics(sessions, 30, now=NOW)

        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_rejects_non_positive_days(self):
        with pytest.raises(ValueError):
            compute_engagement_analytics([], 0, now=NOW)

    def test_maximum_window_is_accepted(self):
        result = compute_engagement_analytics([session(utc(2024, 1, 14))], MAX_ANALYTICS_DAYS, now=NOW)

        assert len(result.daily_engagement) == MAX_ANALYTICS_DAYS
        assert result.total_sessions == 1

    @pytest.mark.parametrize("days", [MAX_ANALYTICS_DAYS + 1, 800000])
    def test_rejects_window_beyond_maximum(self, days):
        with pytest.raises(ValueError):
            compute_engagement_analytics([], days, now=NOW)


class TestDailyEngagement:
    """Test per-day buckets"""

    @pytest.mark.parametrize("days", [1, 7, 30, 400])
    def test_buckets_cover_consecutive_days_ending_today(self, days):
        result = compute_engagement_analytics([], days, now=NOW)

        dates = [bucket.date for bucket in result.daily_engagement]
        assert len(dates) == days
        assert dates[0] == date(2024, 1, 15)
        assert dates == [date(2024, 1, 15) - timedelta(days=i) for i in range(days)]
        assert len(set(dates)) == days

    def test_two_sessions_on_same_day(self):
        sessions = [
            session(utc(2024, 1, 15, 10), 300, "dashboard"),
            session(utc(2024, 1, 15, 14), 150, "profile"),
        ]

        result = calculate_daily_engagement(sessions, 7, date(2024, 1, 15))

        assert len(result) == 7
        day = next(bucket for bucket in result if bucket.date == date(2024, 1, 15))
        assert day.sessions == 2
        assert day.duration == 450
        assert day.unique_views == 2
        assert day.avg_duration == 225

    def test_repeated_label_counts_once_per_day(self):
        sessions = [
            session(utc(2024, 1, 14, 8), 100, "dashboard"),
            session(utc(2024, 1, 14, 9), 100, "dashboard"),
        ]

        result = calculate_daily_engagement(sessions, 3, date(2024, 1, 15))

        assert [bucket.sessions for bucket in result] == [0, 2, 0]
        assert result[1].unique_views == 1

    def test_sessions_outside_buckets_are_ignored(self):
        sessions = [session(utc(2024, 1, 1), 100), session(utc(2024, 1, 20), 100)]

        result = calculate_daily_engagement(sessions, 7, date(2024, 1, 15))

        assert sum(bucket.sessions for bucket in result) == 0


class TestEngagementTrend:
    """Test week-over-week trend classification"""

    def test_increasing_when_duration_grows(self):
        result = compute_engagement_analytics(two_week_sessions(100, 200), 30, now=NOW)
        assert result.engagement_trend == EngagementTrend.INCREASING

    def test_decreasing_when_duration_drops(self):
        result = compute_engagement_analytics(two_week_sessions(200, 100), 30, now=NOW)
        assert result.engagement_trend == EngagementTrend.DECREASING

    def test_stable_when_consistent(self):
        result = compute_engagement_analytics(two_week_sessions(100, 100), 30, now=NOW)
        assert result.engagement_trend == EngagementTrend.STABLE

    def test_increasing_when_both_metrics_grow(self):
        sessions = [
            session(utc(2024, 1, 1), 100),
            session(utc(2024, 1, 8), 100),
            session(utc(2024, 1, 9), 100),
        ]
        assert calculate_engagement_trend(sessions) == EngagementTrend.INCREASING

    def test_stable_when_metrics_move_in_opposite_directions(self):
        sessions = [
            session(utc(2024, 1, 1), 200),
            session(utc(2024, 1, 2), 200),
            session(utc(2024, 1, 8), 100),
            session(utc(2024, 1, 9), 50),
            session(utc(2024, 1, 10), 50),
        ]
        assert calculate_engagement_trend(sessions) == EngagementTrend.STABLE

    def test_change_of_exactly_ten_percent_is_flat(self):
        previous = [session(utc(2024, 1, 1, hour), 100) for hour in range(10)]
        recent = [session(utc(2024, 1, 8, hour), 100) for hour in range(11)]
        assert calculate_engagement_trend(previous + recent) == EngagementTrend.STABLE

    def test_single_week_has_insufficient_data(self):
        sessions = [session(utc(2024, 1, 8)), session(utc(2024, 1, 9)), session(utc(2024, 1, 13))]
        assert calculate_engagement_trend(sessions) == EngagementTrend.INSUFFICIENT_DATA

    def test_only_latest_two_weeks_are_compared(self):
        sessions = [session(utc(2023, 12, 25, hour), 1000) for hour in range(10)]
        sessions += [session(utc(2024, 1, 1), 100)]
        sessions += [session(utc(2024, 1, 8), 200), session(utc(2024, 1, 9), 200)]
        assert calculate_engagement_trend(sessions) == EngagementTrend.INCREASING

    def test_input_order_does_not_matter(self):
        sessions = list(reversed(two_week_sessions(100, 200)))
        assert calculate_engagement_trend(sessions) == EngagementTrend.INCREASING

    def test_zero_duration_previous_week_is_stable(self):
        sessions = [
            session(utc(2024, 1, 1), 0),
            session(utc(2024, 1, 8), 300),
            session(utc(2024, 1, 9), 300),
        ]
        assert calculate_engagement_trend(sessions) == EngagementTrend.STABLE

    def test_sessions_before_window_do_not_count_towards_trend(self):
        sessions = [session(utc(2023, 12, 1), 100), session(utc(2024, 1, 14), 100)]

        result = compute_engagement_analytics(sessions, 7, now=NOW)

        assert result.engagement_trend == EngagementTrend.INSUFFICIENT_DATA


class TestWeekGrouping:
    """Test Sunday-start week keys"""

    @pytest.mark.parametrize(
        "viewed_at, expected",
        [
            (utc(2024, 1, 7, 15), date(2024, 1, 7)),
            (utc(2024, 1, 8, 0), date(2024, 1, 7)),
            (utc(2024, 1, 13, 23, 59), date(2024, 1, 7)),
            (utc(2024, 1, 1), date(2023, 12, 31)),
        ],
    )
    def test_week_starts_on_sunday(self, viewed_at, expected):
        assert week_start(viewed_at) == expected

    def test_week_start_uses_utc_date(self):
        tz = timezone(timedelta(hours=-5))
        # Saturday evening locally is already Sunday in UTC
        assert week_start(datetime(2024, 1, 13, 21, 0, tzinfo=tz)) == date(2024, 1, 14)

    def test_group_by_week_sums_and_orders(self):
        weeks = group_by_week(list(reversed(two_week_sessions(100, 250))))

        assert [week.week_start for week in weeks] == [date(2023, 12, 31), date(2024, 1, 7)]
        assert [week.sessions for week in weeks] == [2, 2]
        assert [week.duration for week in weeks] == [200, 500]
