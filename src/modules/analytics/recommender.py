"""Recommendation Generator - ranked, explained next-step suggestions.

Four independent generators (schedule, difficulty, content, review) each
return at most one candidate. Candidates are ranked by priority, then by
confidence, and truncated to the configured cap.
"""

from datetime import datetime
import logging
import random
from statistics import fmean
from typing import Protocol

from src.modules.analytics.interface import (
    AdaptiveRecommendation,
    ExpectedOutcome,
    LearningPattern,
    RecommendationAction,
    UserLearningProfile,
)
from src.modules.analytics.schemas import LearningEvent
from src.modules.content.interface import IConceptRetriever
from src.shared.constants import (
    DEFAULT_IMPROVEMENT_FOCUS_PROBABILITY,
    DEFAULT_MAX_RECOMMENDATIONS,
    MAX_RELATED_CONCEPTS,
    REVIEW_MAX_CONCEPTS,
    REVIEW_STALE_DAYS,
    REVIEW_SUGGESTED_MINUTES,
)
from src.shared.datetime_utils import days_between, ensure_utc
from src.shared.models import PatternType, RecommendationPriority, RecommendationType

logger = logging.getLogger(__name__)

# Difficulty recommendations need this many recent events and look at the last few
DIFFICULTY_MIN_EVENTS = 3
DIFFICULTY_LOOKBACK_EVENTS = 5

HIGH_PRIORITY_IMPROVEMENT = 0.7


class ContentFocusStrategy(Protocol):
    """Decides whether a content recommendation targets a weakness or a strength."""

    def focus_on_improvement(self, profile: UserLearningProfile) -> bool:
        """Called only when the profile has at least one improvement area."""
        ...


class ImprovementFirstStrategy:
    """Always address the top improvement area when there is one."""

    def focus_on_improvement(self, profile: UserLearningProfile) -> bool:
        return True


class WeightedFocusStrategy:
    """Address the top improvement area with a fixed probability.

    Pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(
        self,
        probability: float = DEFAULT_IMPROVEMENT_FOCUS_PROBABILITY,
        rng: random.Random | None = None,
    ) -> None:
        self._probability = probability
        self._rng = rng or random.Random()

    def focus_on_improvement(self, profile: UserLearningProfile) -> bool:
        return self._rng.random() < self._probability


class RecommendationGenerator:
    """Builds the ranked recommendation list for one learner."""

    def __init__(
        self,
        max_recommendations: int = DEFAULT_MAX_RECOMMENDATIONS,
        focus_strategy: ContentFocusStrategy | None = None,
        retriever: IConceptRetriever | None = None,
    ) -> None:
        self._max_recommendations = max_recommendations
        self._focus_strategy = focus_strategy or ImprovementFirstStrategy()
        self._retriever = retriever

    async def generate(
        self,
        profile: UserLearningProfile,
        patterns: list[LearningPattern],
        recent_events: list[LearningEvent],
        now: datetime,
    ) -> list[AdaptiveRecommendation]:
        """Generate ranked recommendations.

        Args:
            profile: Current learner profile
            patterns: Current gated pattern set
            recent_events: Most recent events, insertion order
            now: Evaluation time (drives the current hour and staleness)

        Returns:
            At most ``max_recommendations`` recommendations, best first
        """
        if not recent_events:
            return []

        candidates = [
            self._time_recommendation(profile, patterns, now),
            self._difficulty_recommendation(recent_events),
            await self._content_recommendation(profile),
            self._review_recommendation(recent_events, now),
        ]
        recommendations = [r for r in candidates if r is not None]
        recommendations.sort(key=lambda r: (-r.priority.rank, -r.confidence))

        logger.debug(
            f"Generated {len(recommendations)} recommendations for user {profile.user_id} "
            f"(cap {self._max_recommendations})"
        )
        return recommendations[: self._max_recommendations]

    def _time_recommendation(
        self,
        profile: UserLearningProfile,
        patterns: list[LearningPattern],
        now: datetime,
    ) -> AdaptiveRecommendation | None:
        pattern = next((p for p in patterns if p.pattern_type == PatternType.OPTIMAL_TIME), None)
        if pattern is None or not pattern.metadata.optimal_times:
            return None

        optimal_times = sorted(pattern.metadata.optimal_times)
        current_hour = ensure_utc(now).hour
        if current_hour in optimal_times:
            return None

        next_hour = next((hour for hour in optimal_times if hour > current_hour), optimal_times[0])
        confidence = pattern.confidence
        return AdaptiveRecommendation(
            type=RecommendationType.PACING,
            priority=RecommendationPriority.MEDIUM,
            confidence=confidence,
            title="Optimize your learning schedule",
            description=f"Your peak learning time is at {next_hour}:00. Consider scheduling your next session then.",
            reasoning=(
                f"Based on your performance data, you learn {round(confidence * 100)}% "
                "better during your optimal hours."
            ),
            action=RecommendationAction(suggested_duration=profile.preferred_session_length),
            expected_outcome=ExpectedOutcome(
                comprehension_improvement=confidence * 0.3,
                retention_improvement=confidence * 0.2,
                satisfaction_improvement=confidence * 0.25,
                time_efficiency=confidence * 0.4,
            ),
        )

    def _difficulty_recommendation(self, recent_events: list[LearningEvent]) -> AdaptiveRecommendation | None:
        if len(recent_events) < DIFFICULTY_MIN_EVENTS:
            return None

        window = recent_events[-DIFFICULTY_LOOKBACK_EVENTS:]
        avg_success = fmean(e.success_rate for e in window)
        avg_confidence = fmean(e.confidence_level for e in window)

        if avg_success < 0.4 and avg_confidence < 0.5:
            adjustment = -2
            priority = RecommendationPriority.HIGH
            title = "Simplify the content"
            description = "Recent struggles suggest the material may be too challenging. Let's dial it back a bit."
        elif avg_success > 0.9 and avg_confidence > 0.8:
            adjustment = 1
            priority = RecommendationPriority.MEDIUM
            title = "Ready for more challenge"
            description = "You're mastering this level! Time to step up the difficulty."
        elif avg_success < 0.6:
            adjustment = -1
            priority = RecommendationPriority.MEDIUM
            title = "Slight difficulty adjustment"
            description = "A small reduction in difficulty could improve your learning flow."
        else:
            return None

        magnitude = abs(adjustment)
        return AdaptiveRecommendation(
            type=RecommendationType.DIFFICULTY,
            priority=priority,
            confidence=min(1.0, len(window) / DIFFICULTY_LOOKBACK_EVENTS),
            title=title,
            description=description,
            reasoning=(
                f"Your recent success rate is {round(avg_success * 100)}% "
                f"and confidence is {round(avg_confidence * 100)}%."
            ),
            action=RecommendationAction(difficulty_adjustment=adjustment),
            expected_outcome=ExpectedOutcome(
                comprehension_improvement=magnitude * 0.2,
                retention_improvement=magnitude * 0.15,
                satisfaction_improvement=magnitude * 0.3,
                time_efficiency=magnitude * 0.1,
            ),
        )

    async def _content_recommendation(self, profile: UserLearningProfile) -> AdaptiveRecommendation | None:
        if profile.improvement_areas and self._focus_strategy.focus_on_improvement(profile):
            area = profile.improvement_areas[0]
            recommendation = AdaptiveRecommendation(
                type=RecommendationType.CONTENT,
                priority=(
                    RecommendationPriority.HIGH
                    if area.priority > HIGH_PRIORITY_IMPROVEMENT
                    else RecommendationPriority.MEDIUM
                ),
                confidence=area.priority,
                title=f"Focus on {area.concept}",
                description=f"This concept needs attention. Let's use a {area.suggested_approach.value} approach.",
                reasoning=(
                    f"You've had difficulty with this concept, with a "
                    f"{round(area.difficulty * 100)}% difficulty rating."
                ),
                action=RecommendationAction(content_id=area.concept),
                expected_outcome=ExpectedOutcome(
                    comprehension_improvement=0.4,
                    retention_improvement=0.3,
                    satisfaction_improvement=0.2,
                    time_efficiency=0.25,
                ),
            )
        elif profile.strong_areas:
            area = profile.strong_areas[0]
            recommendation = AdaptiveRecommendation(
                type=RecommendationType.CONTENT,
                priority=RecommendationPriority.MEDIUM,
                confidence=area.confidence,
                title=f"Build on your {area.concept} strength",
                description="You excel at this concept! Let's explore advanced applications.",
                reasoning=f"You have {round(area.proficiency * 100)}% proficiency in this area.",
                action=RecommendationAction(content_id=area.concept, difficulty_adjustment=1),
                expected_outcome=ExpectedOutcome(
                    comprehension_improvement=0.3,
                    retention_improvement=0.4,
                    satisfaction_improvement=0.4,
                    time_efficiency=0.3,
                ),
            )
        else:
            return None

        await self._enrich_with_related(recommendation)
        return recommendation

    async def _enrich_with_related(self, recommendation: AdaptiveRecommendation) -> None:
        """Attach related concepts from the retriever, if one is configured."""
        if self._retriever is None or recommendation.action.content_id is None:
            return

        try:
            related = await self._retriever.related_concepts(
                recommendation.action.content_id, limit=MAX_RELATED_CONCEPTS
            )
        except Exception as e:
            logger.warning(
                f"Concept retrieval failed for '{recommendation.action.content_id}', "
                f"continuing without related concepts: {e}"
            )
            return

        if related:
            recommendation.action.related_concepts = related
            recommendation.reasoning += f" Related concepts: {', '.join(related)}."

    def _review_recommendation(
        self,
        recent_events: list[LearningEvent],
        now: datetime,
    ) -> AdaptiveRecommendation | None:
        last_seen: dict[str, datetime] = {}
        for event in recent_events:
            seen = last_seen.get(event.concept_id)
            if seen is None or event.timestamp > seen:
                last_seen[event.concept_id] = event.timestamp

        stale = [
            concept
            for concept, seen in last_seen.items()
            if days_between(seen, now) >= REVIEW_STALE_DAYS
        ]
        if not stale:
            return None

        return AdaptiveRecommendation(
            type=RecommendationType.REVIEW,
            priority=RecommendationPriority.MEDIUM,
            confidence=min(1.0, len(stale) / REVIEW_MAX_CONCEPTS),
            title="Time for a review session",
            description=f"You haven't practiced {len(stale)} concept(s) recently. Let's refresh your memory.",
            reasoning="Spaced repetition helps improve long-term retention.",
            action=RecommendationAction(
                review_concepts=stale[:REVIEW_MAX_CONCEPTS],
                suggested_duration=REVIEW_SUGGESTED_MINUTES,
            ),
            expected_outcome=ExpectedOutcome(
                comprehension_improvement=0.1,
                retention_improvement=0.5,
                satisfaction_improvement=0.2,
                time_efficiency=0.3,
            ),
        )
