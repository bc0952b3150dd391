"""Pattern Detector - confidence-scored behavioral regularities.

Each detector returns a candidate pattern or None; ``detect`` keeps only
candidates whose confidence clears the configured threshold. The pattern
set is recomputed wholesale on every refresh.
"""

from datetime import datetime
import logging
from statistics import fmean, pvariance

from src.modules.analytics.aggregation import group_by, round_half_up
from src.modules.analytics.interface import LearningPattern, PatternMetadata
from src.modules.analytics.schemas import LearningEvent
from src.shared.constants import (
    AFFINITY_MIN_CONCEPT_SAMPLES,
    AFFINITY_STRONG_THRESHOLD,
    AFFINITY_WEAK_THRESHOLD,
    DEFAULT_MIN_DATA_POINTS_FOR_PATTERN,
    DEFAULT_OPTIMAL_DIFFICULTY,
    DEFAULT_PATTERN_CONFIDENCE_THRESHOLD,
    DIFFICULTY_PATTERN_FULL_CONFIDENCE_SAMPLES,
    DIFFICULTY_PATTERN_MIN_BUCKET_SAMPLES,
    TIME_PATTERN_FULL_CONFIDENCE_BUCKETS,
    TIME_PATTERN_MIN_BUCKET_SAMPLES,
    TIME_PATTERN_MIN_BUCKETS,
)
from src.shared.models import PatternType

logger = logging.getLogger(__name__)


class PatternDetector:
    """Runs the statistical tests over one learner's history."""

    def __init__(
        self,
        min_data_points: int = DEFAULT_MIN_DATA_POINTS_FOR_PATTERN,
        confidence_threshold: float = DEFAULT_PATTERN_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._min_data_points = min_data_points
        self._confidence_threshold = confidence_threshold

    def detect(self, events: list[LearningEvent], now: datetime) -> list[LearningPattern] | None:
        """Detect every pattern that clears the confidence threshold.

        Args:
            events: Learner history, insertion order
            now: Detection time, stamped on each pattern

        Returns:
            Gated pattern list, or None when there is too little data to
            run the tests (callers keep their current set)
        """
        if len(events) < self._min_data_points:
            return None

        candidates = [
            self._detect_time_pattern(events, now),
            self._detect_difficulty_pattern(events, now),
            self._detect_concept_affinity_pattern(events, now),
        ]
        patterns = [
            p for p in candidates
            if p is not None and p.confidence >= self._confidence_threshold
        ]
        logger.debug(
            f"Detected {len(patterns)} patterns from {len(events)} events "
            f"({sum(1 for p in candidates if p is not None)} candidates)"
        )
        return patterns

    def _detect_time_pattern(self, events: list[LearningEvent], now: datetime) -> LearningPattern | None:
        """Hours whose mean score stands out from the rest."""
        hour_means = {
            hour: fmean(e.success_rate * e.comprehension * e.satisfaction for e in points)
            for hour, points in group_by(events, lambda e: e.hour_of_day).items()
            if len(points) >= TIME_PATTERN_MIN_BUCKET_SAMPLES
        }
        if len(hour_means) < TIME_PATTERN_MIN_BUCKETS:
            return None

        means = list(hour_means.values())
        overall = fmean(means)
        variance = pvariance(means, mu=overall)
        confidence = max(0.0, 1 - variance) * min(1.0, len(hour_means) / TIME_PATTERN_FULL_CONFIDENCE_BUCKETS)
        optimal_times = sorted(hour for hour, mean in hour_means.items() if mean > overall + variance)

        return LearningPattern(
            pattern_type=PatternType.OPTIMAL_TIME,
            confidence=confidence,
            metadata=PatternMetadata(optimal_times=optimal_times),
            data_points_count=len(events),
            last_updated=now,
        )

    def _detect_difficulty_pattern(self, events: list[LearningEvent], now: datetime) -> LearningPattern | None:
        """Difficulty level with the best success x satisfaction."""
        best_difficulty = DEFAULT_OPTIMAL_DIFFICULTY
        best_score = 0.0
        confidence = 0.0

        for difficulty, points in group_by(events, lambda e: round_half_up(e.difficulty_rating)).items():
            if len(points) < DIFFICULTY_PATTERN_MIN_BUCKET_SAMPLES:
                continue
            score = fmean(e.success_rate * e.satisfaction for e in points)
            if score > best_score:
                best_score = score
                best_difficulty = difficulty
                confidence = min(1.0, len(points) / DIFFICULTY_PATTERN_FULL_CONFIDENCE_SAMPLES) * score

        if confidence <= 0:
            return None

        return LearningPattern(
            pattern_type=PatternType.DIFFICULTY_PREFERENCE,
            confidence=confidence,
            metadata=PatternMetadata(preferred_difficulty=best_difficulty),
            data_points_count=len(events),
            last_updated=now,
        )

    def _detect_concept_affinity_pattern(self, events: list[LearningEvent], now: datetime) -> LearningPattern | None:
        """Share of concepts that are clearly strong or clearly weak."""
        concepts = group_by(events, lambda e: e.concept_id)
        if not concepts:
            return None

        strong: list[str] = []
        weak: list[str] = []
        for concept, points in concepts.items():
            if len(points) < AFFINITY_MIN_CONCEPT_SAMPLES:
                continue
            score = fmean(e.comprehension * e.success_rate for e in points)
            if score >= AFFINITY_STRONG_THRESHOLD:
                strong.append(concept)
            elif score <= AFFINITY_WEAK_THRESHOLD:
                weak.append(concept)

        return LearningPattern(
            pattern_type=PatternType.CONCEPT_AFFINITY,
            confidence=(len(strong) + len(weak)) / len(concepts),
            metadata=PatternMetadata(strong_concepts=strong, weak_concepts=weak),
            data_points_count=len(events),
            last_updated=now,
        )
