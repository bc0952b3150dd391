"""Analytics API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.shared.models import (
    BaseSchema,
    LearningStyle,
    PatternType,
    RecommendationPriority,
    RecommendationType,
    SuccessResponse,
    SuggestedApproach,
)


class RecordEventRequest(BaseModel):
    """Learning event submitted by a client.

    Numeric fields are not range-checked here; the event schema clamps them.
    Omitted fields take the event defaults.
    """

    user_id: str | None = Field(
        default=None,
        description="Must match the path user id when given",
    )
    session_id: str = Field(..., min_length=1, description="Learning session id")
    lesson_id: str = Field(..., min_length=1, description="Lesson id")
    concept_id: str = Field(..., min_length=1, description="Concept id")
    timestamp: datetime | None = Field(
        default=None,
        description="Interaction time (defaults to now)",
    )

    time_spent_ms: float | None = Field(default=None, description="Time spent in milliseconds")
    attempts: int | None = Field(default=None, description="Number of attempts")
    success_rate: float | None = Field(default=None, description="Success rate (0-1)")
    confidence_level: float | None = Field(default=None, description="Self-reported confidence (0-1)")
    difficulty_rating: float | None = Field(default=None, description="Perceived difficulty (1-10)")

    mood: str | None = Field(default=None, description="Free mood label")
    energy_level: float | None = Field(default=None, description="Energy (0-1)")
    focus_level: float | None = Field(default=None, description="Focus (0-1)")
    stress_level: float | None = Field(default=None, description="Stress (0-1)")

    hour_of_day: int | None = Field(default=None, description="Hour of day (0-23)")
    day_of_week: int | None = Field(default=None, description="Day of week, Sunday = 0")
    device_type: str | None = Field(default=None, description="mobile, tablet or desktop")

    completed: bool | None = Field(default=None, description="Whether the lesson was completed")
    comprehension: float | None = Field(default=None, description="Comprehension (0-1)")
    retention: float | None = Field(default=None, description="Retention (0-1)")
    satisfaction: float | None = Field(default=None, description="Satisfaction (0-1)")


class EventRecordedResponse(SuccessResponse):
    """Acknowledgement of a recorded event."""

    user_id: str
    concept_id: str
    refresh_pending: bool = Field(
        default=False,
        description="True when the profile refresh is deferred",
    )


class StrongAreaResponse(BaseSchema):
    concept: str
    proficiency: float
    confidence: float


class ImprovementAreaResponse(BaseSchema):
    concept: str
    difficulty: float
    priority: float
    suggested_approach: SuggestedApproach


class PatternMetadataResponse(BaseSchema):
    optimal_times: list[int] | None = None
    preferred_difficulty: int | None = None
    learning_style: LearningStyle | None = None
    strong_concepts: list[str] | None = None
    weak_concepts: list[str] | None = None


class LearningPatternResponse(BaseSchema):
    pattern_type: PatternType
    confidence: float
    metadata: PatternMetadataResponse
    data_points_count: int
    last_updated: datetime


class UserProfileResponse(BaseSchema):
    """Learner profile."""

    user_id: str
    overall_progress: float
    average_performance: float
    learning_velocity: float = Field(..., description="Mastered concepts per hour")
    retention_rate: float
    optimal_difficulty: int
    preferred_session_length: int = Field(..., description="Minutes")
    best_learning_times: list[int] = Field(..., description="Hours of day, best first")
    learning_style: LearningStyle
    strong_areas: list[StrongAreaResponse]
    improvement_areas: list[ImprovementAreaResponse]
    patterns: list[LearningPatternResponse]
    created_at: datetime
    last_updated: datetime


class RecommendationActionResponse(BaseSchema):
    content_id: str | None = None
    difficulty_adjustment: int | None = None
    suggested_duration: int | None = None
    review_concepts: list[str] | None = None
    break_duration: int | None = None
    related_concepts: list[str] | None = None


class ExpectedOutcomeResponse(BaseSchema):
    comprehension_improvement: float
    retention_improvement: float
    satisfaction_improvement: float
    time_efficiency: float


class RecommendationResponse(BaseSchema):
    """One adaptive recommendation."""

    type: RecommendationType
    priority: RecommendationPriority
    confidence: float
    title: str
    description: str
    reasoning: str
    action: RecommendationActionResponse
    expected_outcome: ExpectedOutcomeResponse


class RecommendationListResponse(BaseModel):
    """Ranked recommendations for a learner."""

    user_id: str
    recommendations: list[RecommendationResponse]
    count: int


class AnalyticsSummaryResponse(BaseSchema):
    """Display rollup for a learner."""

    total_sessions: int
    total_time_ms: float
    average_session_length_ms: float
    concepts_mastered: int
    current_streak: int = Field(..., description="Consecutive active days")
    overall_progress: float


class SystemStatsResponse(BaseSchema):
    """Engine-wide counts."""

    total_users: int
    total_data_points: int
    total_patterns: int


class RefreshResponse(BaseModel):
    """Result of a batch refresh."""

    refreshed_users: int


class RelatedConceptsResponse(BaseModel):
    """Concepts related to a queried concept."""

    concept: str
    related: list[str]
