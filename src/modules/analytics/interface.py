"""Analytics Module - learner profiles, patterns and adaptive recommendations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from src.modules.analytics.schemas import LearningEvent
from src.shared.config import Settings
from src.shared.constants import (
    DEFAULT_IMPROVEMENT_FOCUS_PROBABILITY,
    DEFAULT_MAX_EVENTS_PER_USER,
    DEFAULT_MAX_RECOMMENDATIONS,
    DEFAULT_MIN_DATA_POINTS_FOR_PATTERN,
    DEFAULT_OPTIMAL_DIFFICULTY,
    DEFAULT_PATTERN_CONFIDENCE_THRESHOLD,
    DEFAULT_PREFERRED_SESSION_MINUTES,
    DEFAULT_RECENT_WINDOW_DAYS,
)
from src.shared.datetime_utils import utc_now
from src.shared.exceptions import InvalidEngineConfigError
from src.shared.models import (
    LearningStyle,
    PatternType,
    RecommendationPriority,
    RecommendationType,
    RefreshMode,
    SuggestedApproach,
)


@dataclass
class EngineConfig:
    """Tunable knobs of the analytics engine."""

    max_events_per_user: int = DEFAULT_MAX_EVENTS_PER_USER
    recent_window_days: int = DEFAULT_RECENT_WINDOW_DAYS
    min_data_points_for_pattern: int = DEFAULT_MIN_DATA_POINTS_FOR_PATTERN
    pattern_confidence_threshold: float = DEFAULT_PATTERN_CONFIDENCE_THRESHOLD
    max_recommendations: int = DEFAULT_MAX_RECOMMENDATIONS
    refresh_mode: RefreshMode = RefreshMode.EAGER
    weighted_content_focus: bool = False
    improvement_focus_probability: float = DEFAULT_IMPROVEMENT_FOCUS_PROBABILITY
    random_seed: int | None = None

    def __post_init__(self) -> None:
        self.refresh_mode = RefreshMode(self.refresh_mode)
        if self.max_events_per_user < 1:
            raise InvalidEngineConfigError("max_events_per_user", self.max_events_per_user)
        if self.recent_window_days < 1:
            raise InvalidEngineConfigError("recent_window_days", self.recent_window_days)
        if self.min_data_points_for_pattern < 1:
            raise InvalidEngineConfigError("min_data_points_for_pattern", self.min_data_points_for_pattern)
        if not 0.0 <= self.pattern_confidence_threshold <= 1.0:
            raise InvalidEngineConfigError("pattern_confidence_threshold", self.pattern_confidence_threshold)
        if self.max_recommendations < 0:
            raise InvalidEngineConfigError("max_recommendations", self.max_recommendations)
        if not 0.0 <= self.improvement_focus_probability <= 1.0:
            raise InvalidEngineConfigError("improvement_focus_probability", self.improvement_focus_probability)

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineConfig":
        """Build the engine config from application settings."""
        return cls(
            max_events_per_user=settings.analytics_max_events_per_user,
            recent_window_days=settings.analytics_recent_window_days,
            min_data_points_for_pattern=settings.analytics_min_data_points_for_pattern,
            pattern_confidence_threshold=settings.analytics_pattern_confidence_threshold,
            max_recommendations=settings.analytics_max_recommendations,
            refresh_mode=RefreshMode(settings.analytics_refresh_mode),
            weighted_content_focus=settings.analytics_content_focus == "weighted",
            improvement_focus_probability=settings.analytics_improvement_focus_probability,
            random_seed=settings.analytics_random_seed,
        )


@dataclass
class PatternMetadata:
    """Pattern-specific payload; only the fields of the pattern's type are set."""

    optimal_times: list[int] | None = None
    preferred_difficulty: int | None = None
    learning_style: LearningStyle | None = None
    strong_concepts: list[str] | None = None
    weak_concepts: list[str] | None = None


@dataclass
class LearningPattern:
    """A statistically supported regularity in a learner's behavior."""

    pattern_type: PatternType
    confidence: float  # 0-1
    metadata: PatternMetadata
    data_points_count: int
    last_updated: datetime = field(default_factory=utc_now)


@dataclass
class StrongArea:
    """A concept the learner handles well."""

    concept: str
    proficiency: float  # 0-1
    confidence: float  # 0-1


@dataclass
class ImprovementArea:
    """A concept the learner struggles with."""

    concept: str
    difficulty: float  # 0-1
    priority: float  # 0-1
    suggested_approach: SuggestedApproach


@dataclass
class UserLearningProfile:
    """Statistical profile of one learner, rebuilt from the recent window."""

    user_id: str
    overall_progress: float = 0.0
    average_performance: float = 0.0
    learning_velocity: float = 0.0  # mastered concepts per hour
    retention_rate: float = 0.0
    optimal_difficulty: int = DEFAULT_OPTIMAL_DIFFICULTY
    preferred_session_length: int = DEFAULT_PREFERRED_SESSION_MINUTES
    best_learning_times: list[int] = field(default_factory=list)
    learning_style: LearningStyle = LearningStyle.MIXED
    strong_areas: list[StrongArea] = field(default_factory=list)
    improvement_areas: list[ImprovementArea] = field(default_factory=list)
    patterns: list[LearningPattern] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)


@dataclass
class ProfileSnapshot:
    """Profile and pattern set of one learner, always written together."""

    profile: UserLearningProfile | None = None
    patterns: list[LearningPattern] = field(default_factory=list)


@dataclass
class RecommendationAction:
    """Structured payload a client can act on."""

    content_id: str | None = None
    difficulty_adjustment: int | None = None  # -3 to +3
    suggested_duration: int | None = None  # minutes
    review_concepts: list[str] | None = None
    break_duration: int | None = None  # minutes
    related_concepts: list[str] | None = None


@dataclass
class ExpectedOutcome:
    """Projected improvement if the recommendation is followed."""

    comprehension_improvement: float = 0.0
    retention_improvement: float = 0.0
    satisfaction_improvement: float = 0.0
    time_efficiency: float = 0.0


@dataclass
class AdaptiveRecommendation:
    """A ranked, explained suggestion for the next learning action."""

    type: RecommendationType
    priority: RecommendationPriority
    confidence: float  # 0-1
    title: str
    description: str
    reasoning: str
    action: RecommendationAction = field(default_factory=RecommendationAction)
    expected_outcome: ExpectedOutcome = field(default_factory=ExpectedOutcome)


@dataclass
class LearningAnalytics:
    """Display rollup for one learner."""

    total_sessions: int = 0
    total_time_ms: float = 0.0
    average_session_length_ms: float = 0.0
    concepts_mastered: int = 0
    current_streak: int = 0
    overall_progress: float = 0.0


@dataclass
class SystemStats:
    """Operational introspection of the engine."""

    total_users: int
    total_data_points: int
    total_patterns: int


class IAnalyticsStore(Protocol):
    """Key-value storage behind the engine, keyed by user id.

    Implementations must make each ``set_*`` call a single atomic write.
    """

    async def get_events(self, user_id: str) -> list[LearningEvent]:
        """Get the bounded event history of a user, oldest first."""
        ...

    async def set_events(self, user_id: str, events: list[LearningEvent]) -> None:
        """Replace the event history of a user."""
        ...

    async def get_snapshot(self, user_id: str) -> ProfileSnapshot | None:
        """Get the stored profile/pattern pair of a user."""
        ...

    async def set_snapshot(self, user_id: str, snapshot: ProfileSnapshot) -> None:
        """Replace the profile/pattern pair of a user."""
        ...

    async def user_ids(self) -> list[str]:
        """List every user with recorded events."""
        ...


class IAnalyticsEngine(Protocol):
    """Interface for the adaptive learning analytics engine."""

    async def record_event(self, event: LearningEvent) -> None:
        """Record one learning interaction.

        Appends to the user's bounded history and refreshes the user's
        profile and patterns (immediately, or on the next
        ``refresh_pending`` call in deferred mode). Never raises for
        out-of-range values; those are clamped by the event schema.
        """
        ...

    async def get_profile(self, user_id: str) -> UserLearningProfile | None:
        """Get the learner profile, or None if none exists yet."""
        ...

    async def generate_recommendations(self, user_id: str) -> list[AdaptiveRecommendation]:
        """Generate ranked recommendations.

        Returns:
            At most ``max_recommendations`` items; empty without a profile
            or recent events.
        """
        ...

    async def get_analytics(self, user_id: str) -> LearningAnalytics:
        """Get the display rollup; all zeros for unknown users."""
        ...

    async def get_system_stats(self) -> SystemStats:
        """Get user/event/pattern counts across the engine."""
        ...

    async def refresh_pending(self) -> int:
        """Refresh every user with unprocessed events.

        Returns:
            Number of users refreshed
        """
        ...
