"""Base models and common types used across modules."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


# Common response types


class SuccessResponse(BaseSchema):
    """Generic success response."""

    success: bool = True
    message: str = "Operation completed successfully"


# Common enums and types


class DeviceType(str, Enum):
    """Device class an interaction happened on."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class LearningStyle(str, Enum):
    """Learner modality preference."""

    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    READING = "reading"
    MIXED = "mixed"


class PatternType(str, Enum):
    """Kinds of detected behavioral patterns."""

    OPTIMAL_TIME = "optimal_time"
    DIFFICULTY_PREFERENCE = "difficulty_preference"
    LEARNING_STYLE = "learning_style"
    CONCEPT_AFFINITY = "concept_affinity"


class RecommendationType(str, Enum):
    """Kinds of adaptive recommendations."""

    CONTENT = "content"
    DIFFICULTY = "difficulty"
    PACING = "pacing"
    REVIEW = "review"
    BREAK = "break"
    STYLE = "style"


class RecommendationPriority(str, Enum):
    """Recommendation urgency."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more urgent."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    RecommendationPriority.LOW: 1,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.HIGH: 3,
    RecommendationPriority.CRITICAL: 4,
}


class SuggestedApproach(str, Enum):
    """How to tackle an improvement area."""

    SIMPLIFY = "simplify"
    FOUNDATIONAL = "foundational"
    PRACTICE = "practice"
    REVIEW = "review"


class RefreshMode(str, Enum):
    """When profile/pattern refresh runs after an event is recorded."""

    EAGER = "eager"
    DEFERRED = "deferred"
