"""Analytics Reporter - read-only display rollups over a learner's history."""

from datetime import date, datetime, timedelta
import logging

from src.modules.analytics.aggregation import latest_by_concept
from src.modules.analytics.interface import LearningAnalytics, UserLearningProfile
from src.modules.analytics.schemas import LearningEvent
from src.shared.constants import MASTERY_THRESHOLD, SESSION_GAP_SECONDS, STREAK_LOOKBACK_DAYS
from src.shared.datetime_utils import utc_date

logger = logging.getLogger(__name__)


class AnalyticsReporter:
    """Computes ``LearningAnalytics`` from the bounded history."""

    def summarize(
        self,
        events: list[LearningEvent],
        profile: UserLearningProfile | None,
        now: datetime,
    ) -> LearningAnalytics:
        """Build the rollup.

        Args:
            events: Full bounded history, insertion order
            profile: Current profile (source of ``overall_progress``), if any
            now: Evaluation time ("today" for the streak)

        Returns:
            The rollup; all zeros when there are no events
        """
        if not events:
            return LearningAnalytics()

        total_sessions = count_sessions(events)
        total_time_ms = sum(e.time_spent_ms for e in events)

        return LearningAnalytics(
            total_sessions=total_sessions,
            total_time_ms=total_time_ms,
            average_session_length_ms=total_time_ms / total_sessions if total_sessions else 0.0,
            concepts_mastered=count_mastered_concepts(events),
            current_streak=current_streak({utc_date(e.timestamp) for e in events}, utc_date(now)),
            overall_progress=profile.overall_progress if profile is not None else 0.0,
        )


def count_sessions(events: list[LearningEvent]) -> int:
    """Count sessions; a gap of more than an hour between consecutive events starts a new one."""
    if not events:
        return 0

    sessions = 1
    for previous, event in zip(events, events[1:]):
        if (event.timestamp - previous.timestamp).total_seconds() > SESSION_GAP_SECONDS:
            sessions += 1
    return sessions


def count_mastered_concepts(events: list[LearningEvent]) -> int:
    return sum(
        1 for event in latest_by_concept(events).values()
        if event.comprehension >= MASTERY_THRESHOLD
    )


def current_streak(active_days: set[date], today: date) -> int:
    """Consecutive active days ending today.

    No activity yet today does not break the streak; the count then runs
    from yesterday.
    """
    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        if today - timedelta(days=offset) in active_days:
            streak += 1
        elif offset > 0:
            break
    return streak
