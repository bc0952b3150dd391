"""Tests for AnalyticsReporter and its helpers."""

from datetime import date

import pytest

from src.modules.analytics.interface import LearningAnalytics, UserLearningProfile
from src.modules.analytics.reporter import (
    AnalyticsReporter,
    count_mastered_concepts,
    count_sessions,
    current_streak,
)

ONE_DAY = 24 * 60


class TestCountSessions:
    """Sessions split on gaps of more than an hour."""

    def test_single_session(self, make_event):
        events = [make_event(minutes_ago=m) for m in (120, 90, 40, 0)]

        assert count_sessions(events) == 1

    def test_exactly_one_hour_is_same_session(self, make_event):
        events = [make_event(minutes_ago=60), make_event(minutes_ago=0)]

        assert count_sessions(events) == 1

    def test_gap_starts_new_session(self, make_event):
        events = [make_event(minutes_ago=300), make_event(minutes_ago=200), make_event(minutes_ago=190)]

        assert count_sessions(events) == 2

    def test_empty(self):
        assert count_sessions([]) == 0


class TestCountMasteredConcepts:
    """Mastery is judged on each concept's latest observation."""

    def test_latest_observation_decides(self, make_event):
        events = [
            make_event(minutes_ago=30, concept_id="a", comprehension=0.9),
            make_event(minutes_ago=10, concept_id="a", comprehension=0.5),
            make_event(minutes_ago=30, concept_id="b", comprehension=0.4),
            make_event(minutes_ago=10, concept_id="b", comprehension=0.8),
        ]

        assert count_mastered_concepts(events) == 1

    def test_same_timestamp_later_insert_wins(self, make_event):
        events = [
            make_event(minutes_ago=10, concept_id="a", comprehension=0.3),
            make_event(minutes_ago=10, concept_id="a", comprehension=0.95),
        ]

        assert count_mastered_concepts(events) == 1


class TestCurrentStreak:
    """Tests for current_streak."""

    def test_today_and_yesterday(self):
        today = date(2025, 1, 15)

        assert current_streak({today, date(2025, 1, 14)}, today) == 2

    def test_no_activity_today_counts_from_yesterday(self):
        today = date(2025, 1, 15)
        active = {date(2025, 1, 14), date(2025, 1, 13), date(2025, 1, 11)}

        assert current_streak(active, today) == 2

    def test_gap_before_yesterday_ends_streak(self):
        today = date(2025, 1, 15)

        assert current_streak({date(2025, 1, 13)}, today) == 0

    def test_streak_capped_by_lookback(self):
        today = date(2025, 3, 1)
        active = {date.fromordinal(today.toordinal() - i) for i in range(45)}

        assert current_streak(active, today) == 30


class TestAnalyticsReporter:
    """Tests for AnalyticsReporter.summarize."""

    @pytest.fixture
    def reporter(self) -> AnalyticsReporter:
        return AnalyticsReporter()

    def test_no_events(self, reporter, fixed_now):
        assert reporter.summarize([], None, fixed_now) == LearningAnalytics()

    def test_rollup(self, reporter, make_event, fixed_now, sample_user_id):
        events = [
            make_event(minutes_ago=ONE_DAY + 30, time_spent_ms=20 * 60 * 1000, concept_id="a", comprehension=0.9),
            make_event(minutes_ago=30, time_spent_ms=10 * 60 * 1000, concept_id="b", comprehension=0.5),
            make_event(minutes_ago=0, time_spent_ms=30 * 60 * 1000, concept_id="b", comprehension=0.85),
        ]
        profile = UserLearningProfile(user_id=sample_user_id, overall_progress=0.75)

        analytics = reporter.summarize(events, profile, fixed_now)

        assert analytics.total_sessions == 2
        assert analytics.total_time_ms == 60 * 60 * 1000
        assert analytics.average_session_length_ms == 30 * 60 * 1000
        assert analytics.concepts_mastered == 2
        assert analytics.current_streak == 2
        assert analytics.overall_progress == 0.75

    def test_without_profile(self, reporter, make_event, fixed_now):
        analytics = reporter.summarize([make_event()], None, fixed_now)

        assert analytics.overall_progress == 0.0
        assert analytics.total_sessions == 1
        assert analytics.current_streak == 1
