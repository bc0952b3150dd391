"""API schemas package."""

from src.api.schemas.analytics import (
    AnalyticsSummaryResponse,
    EventRecordedResponse,
    LearningPatternResponse,
    RecommendationListResponse,
    RecommendationResponse,
    RecordEventRequest,
    RefreshResponse,
    RelatedConceptsResponse,
    SystemStatsResponse,
    UserProfileResponse,
)

__all__ = [
    "AnalyticsSummaryResponse",
    "EventRecordedResponse",
    "LearningPatternResponse",
    "RecommendationListResponse",
    "RecommendationResponse",
    "RecordEventRequest",
    "RefreshResponse",
    "RelatedConceptsResponse",
    "SystemStatsResponse",
    "UserProfileResponse",
]
