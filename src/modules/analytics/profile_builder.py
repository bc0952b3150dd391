"""Profile Builder - derives a learner's statistical profile from recent events.

Every statistic is computed from the supplied window only; buckets and
concepts below their minimum sample size are skipped rather than guessed.
"""

from dataclasses import replace
from datetime import datetime
import logging
from statistics import fmean

from src.modules.analytics.aggregation import group_by, latest_by_concept, round_half_up
from src.modules.analytics.interface import (
    ImprovementArea,
    LearningPattern,
    StrongArea,
    UserLearningProfile,
)
from src.modules.analytics.schemas import LearningEvent
from src.shared.constants import (
    DEFAULT_OPTIMAL_DIFFICULTY,
    DEFAULT_PREFERRED_SESSION_MINUTES,
    IMPROVEMENT_AREA_MAX_ATTEMPTS,
    IMPROVEMENT_AREA_MAX_PERFORMANCE,
    IMPROVEMENT_AREA_MIN_SAMPLES,
    MASTERY_THRESHOLD,
    MAX_BEST_HOURS,
    MAX_RANKED_AREAS,
    STRONG_AREA_MIN_CONFIDENCE,
    STRONG_AREA_MIN_PROFICIENCY,
    STRONG_AREA_MIN_SAMPLES,
)
from src.shared.models import LearningStyle, SuggestedApproach

logger = logging.getLogger(__name__)

# Weights of the blended performance score (sum to 1)
PERFORMANCE_WEIGHTS = {
    "success_rate": 0.4,
    "comprehension": 0.3,
    "confidence_level": 0.2,
    "satisfaction": 0.1,
}

# (upper bound in minutes, representative session length)
SESSION_LENGTH_BUCKETS = (
    (15, 15),
    (30, 25),
    (60, 45),
)
LONG_SESSION_MINUTES = 60

MIN_DIFFICULTY_BUCKET_SAMPLES = 3
MIN_SESSION_BUCKET_SAMPLES = 3
MIN_HOUR_SAMPLES = 2


class ProfileBuilder:
    """Builds ``UserLearningProfile`` objects from a window of events."""

    def build(
        self,
        user_id: str,
        events: list[LearningEvent],
        previous: UserLearningProfile | None,
        patterns: list[LearningPattern],
        now: datetime,
    ) -> UserLearningProfile | None:
        """Rebuild the profile of a user.

        Args:
            user_id: Learner the events belong to
            events: Recent window of events, insertion order
            previous: Current profile, if any
            patterns: Current gated pattern set to embed
            now: Build time

        Returns:
            The rebuilt profile, or ``previous`` unchanged when the window
            is empty
        """
        if not events:
            return previous

        if previous is None:
            profile = UserLearningProfile(user_id=user_id, created_at=now, last_updated=now)
        else:
            profile = replace(previous)

        profile.overall_progress = self._calculate_overall_progress(events)
        profile.average_performance = self._calculate_average_performance(events)
        profile.learning_velocity = self._calculate_learning_velocity(events)
        profile.retention_rate = self._calculate_retention_rate(events)

        profile.optimal_difficulty = self._find_optimal_difficulty(events)
        profile.preferred_session_length = self._calculate_preferred_session_length(events)
        profile.best_learning_times = self._find_best_learning_times(events)
        profile.learning_style = self._determine_learning_style(events)

        profile.strong_areas = self._identify_strong_areas(events)
        profile.improvement_areas = self._identify_improvement_areas(events)

        profile.patterns = list(patterns)
        profile.last_updated = now
        return profile

    # --- Core metrics ---

    def _calculate_overall_progress(self, events: list[LearningEvent]) -> float:
        """Share of concepts in the window whose latest observation is mastered."""
        latest = latest_by_concept(events)
        if not latest:
            return 0.0
        mastered = sum(1 for e in latest.values() if e.comprehension >= MASTERY_THRESHOLD)
        return mastered / len(latest)

    def _calculate_average_performance(self, events: list[LearningEvent]) -> float:
        if not events:
            return 0.0
        return fmean(_blended_performance(e) for e in events)

    def _calculate_learning_velocity(self, events: list[LearningEvent]) -> float:
        """Mastered concepts per hour of study time."""
        mastered = {
            e.concept_id
            for e in events
            if e.comprehension >= MASTERY_THRESHOLD and e.success_rate >= MASTERY_THRESHOLD
        }
        total_hours = sum(e.time_spent_hours for e in events)
        if total_hours <= 0:
            return 0.0
        return len(mastered) / total_hours

    def _calculate_retention_rate(self, events: list[LearningEvent]) -> float:
        """Last vs first comprehension per concept, capped at 1 and averaged."""
        ratios = []
        for points in group_by(events, lambda e: e.concept_id).values():
            if len(points) < 2:
                continue
            ordered = sorted(points, key=lambda e: e.timestamp)
            first, last = ordered[0], ordered[-1]
            if first.comprehension <= 0:
                continue
            ratios.append(min(1.0, last.comprehension / first.comprehension))
        return fmean(ratios) if ratios else 0.0

    # --- Learned preferences ---

    def _find_optimal_difficulty(self, events: list[LearningEvent]) -> int:
        buckets = group_by(events, lambda e: round_half_up(e.difficulty_rating))
        best_difficulty = DEFAULT_OPTIMAL_DIFFICULTY
        best_score = 0.0
        for difficulty, points in buckets.items():
            if len(points) < MIN_DIFFICULTY_BUCKET_SAMPLES:
                continue
            score = fmean(e.success_rate * e.comprehension * e.satisfaction for e in points)
            if score > best_score:
                best_score = score
                best_difficulty = difficulty
        return best_difficulty

    def _calculate_preferred_session_length(self, events: list[LearningEvent]) -> int:
        buckets = group_by(events, lambda e: _session_length_bucket(e.time_spent_minutes))
        best_minutes = DEFAULT_PREFERRED_SESSION_MINUTES
        best_score = 0.0
        for minutes, points in buckets.items():
            if len(points) < MIN_SESSION_BUCKET_SAMPLES:
                continue
            score = fmean(e.success_rate * e.satisfaction for e in points)
            if score > best_score:
                best_score = score
                best_minutes = minutes
        return best_minutes

    def _find_best_learning_times(self, events: list[LearningEvent]) -> list[int]:
        hour_scores = [
            (hour, fmean(e.success_rate * e.comprehension for e in points))
            for hour, points in group_by(events, lambda e: e.hour_of_day).items()
            if len(points) >= MIN_HOUR_SAMPLES
        ]
        hour_scores.sort(key=lambda item: item[1], reverse=True)
        return [hour for hour, _ in hour_scores[:MAX_BEST_HOURS]]

    def _determine_learning_style(self, events: list[LearningEvent]) -> LearningStyle:
        # Events carry no modality signal, so no single style can be inferred.
        return LearningStyle.MIXED

    # --- Strengths and weaknesses ---

    def _identify_strong_areas(self, events: list[LearningEvent]) -> list[StrongArea]:
        areas = []
        for concept, points in group_by(events, lambda e: e.concept_id).items():
            if len(points) < STRONG_AREA_MIN_SAMPLES:
                continue
            proficiency = fmean(e.comprehension for e in points)
            confidence = fmean(e.confidence_level for e in points)
            if proficiency >= STRONG_AREA_MIN_PROFICIENCY and confidence >= STRONG_AREA_MIN_CONFIDENCE:
                areas.append(StrongArea(concept=concept, proficiency=proficiency, confidence=confidence))

        areas.sort(key=lambda a: a.proficiency, reverse=True)
        return areas[:MAX_RANKED_AREAS]

    def _identify_improvement_areas(self, events: list[LearningEvent]) -> list[ImprovementArea]:
        areas = []
        for concept, points in group_by(events, lambda e: e.concept_id).items():
            if len(points) < IMPROVEMENT_AREA_MIN_SAMPLES:
                continue
            performance = fmean(e.comprehension * e.success_rate for e in points)
            attempts = fmean(e.attempts for e in points)
            if performance >= IMPROVEMENT_AREA_MAX_PERFORMANCE and attempts <= IMPROVEMENT_AREA_MAX_ATTEMPTS:
                continue

            difficulty = 1 - performance
            areas.append(
                ImprovementArea(
                    concept=concept,
                    difficulty=difficulty,
                    priority=difficulty * min(1.0, attempts / 5),
                    suggested_approach=_suggest_approach(performance, attempts),
                )
            )

        areas.sort(key=lambda a: a.priority, reverse=True)
        return areas[:MAX_RANKED_AREAS]


def _blended_performance(event: LearningEvent) -> float:
    return sum(getattr(event, name) * weight for name, weight in PERFORMANCE_WEIGHTS.items())


def _session_length_bucket(minutes: float) -> int:
    """Map a time spent to its bucket's representative session length."""
    rounded = round_half_up(minutes)
    for upper, representative in SESSION_LENGTH_BUCKETS:
        if rounded <= upper:
            return representative
    return LONG_SESSION_MINUTES


def _suggest_approach(performance: float, attempts: float) -> SuggestedApproach:
    if attempts > 5:
        return SuggestedApproach.SIMPLIFY
    if performance < 0.4:
        return SuggestedApproach.FOUNDATIONAL
    if performance < 0.6:
        return SuggestedApproach.PRACTICE
    return SuggestedApproach.REVIEW
