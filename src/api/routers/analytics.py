"""Analytics API routes.

Thin pass-through to the analytics engine; no analytics logic lives here.
"""

import logging

from fastapi import APIRouter, status
from pydantic import ValidationError as PydanticValidationError

from src.api.dependencies import AnalyticsEngineDep, ConceptRetrieverDep
from src.api.schemas.analytics import (
    AnalyticsSummaryResponse,
    EventRecordedResponse,
    RecommendationListResponse,
    RecommendationResponse,
    RecordEventRequest,
    RefreshResponse,
    RelatedConceptsResponse,
    SystemStatsResponse,
    UserProfileResponse,
)
from src.modules.analytics.schemas import LearningEvent
from src.shared.constants import MAX_RELATED_CONCEPTS
from src.shared.exceptions import FeatureDisabledError, ProfileNotFoundError, ValidationError
from src.shared.feature_flags import FeatureFlags
from src.shared.models import RefreshMode

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/stats",
    response_model=SystemStatsResponse,
    summary="System statistics",
    description="User, event and pattern counts across the engine.",
)
async def get_system_stats(engine: AnalyticsEngineDep) -> SystemStatsResponse:
    stats = await engine.get_system_stats()
    return SystemStatsResponse.model_validate(stats)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Refresh pending profiles",
    description="Process deferred profile and pattern refreshes.",
)
async def refresh_pending(engine: AnalyticsEngineDep) -> RefreshResponse:
    refreshed = await engine.refresh_pending()
    return RefreshResponse(refreshed_users=refreshed)


@router.get(
    "/concepts/{concept}/related",
    response_model=RelatedConceptsResponse,
    summary="Related concepts",
    description="Concepts related to the given one (requires concept enrichment).",
)
async def get_related_concepts(
    concept: str,
    retriever: ConceptRetrieverDep,
) -> RelatedConceptsResponse:
    """Look up related concepts.

    Raises:
        FeatureDisabledError: If concept enrichment is disabled
    """
    if retriever is None:
        raise FeatureDisabledError(FeatureFlags.ENABLE_CONCEPT_ENRICHMENT.value)

    related = await retriever.related_concepts(concept, limit=MAX_RELATED_CONCEPTS)
    return RelatedConceptsResponse(concept=concept, related=related)


@router.post(
    "/{user_id}/events",
    response_model=EventRecordedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record learning event",
    description="Record one learning interaction and refresh the learner profile.",
)
async def record_event(
    user_id: str,
    request: RecordEventRequest,
    engine: AnalyticsEngineDep,
) -> EventRecordedResponse:
    """Record a learning event.

    Args:
        user_id: Learner id
        request: Event payload
        engine: Analytics engine instance

    Returns:
        Acknowledgement

    Raises:
        ValidationError: If the body names another user or the event is unusable
    """
    if request.user_id is not None and request.user_id != user_id:
        raise ValidationError("user_id", "does not match the user in the path")

    payload = request.model_dump(exclude_none=True, exclude={"user_id"})
    try:
        event = LearningEvent(user_id=user_id, **payload)
    except PydanticValidationError as e:
        raise ValidationError("event", str(e)) from e

    await engine.record_event(event)

    return EventRecordedResponse(
        message="Event recorded",
        user_id=event.user_id,
        concept_id=event.concept_id,
        refresh_pending=engine.config.refresh_mode == RefreshMode.DEFERRED,
    )


@router.get(
    "/{user_id}/profile",
    response_model=UserProfileResponse,
    summary="Get learner profile",
    description="Get the statistical profile of a learner.",
)
async def get_profile(user_id: str, engine: AnalyticsEngineDep) -> UserProfileResponse:
    profile = await engine.get_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return UserProfileResponse.model_validate(profile)


@router.get(
    "/{user_id}/recommendations",
    response_model=RecommendationListResponse,
    summary="Get recommendations",
    description="Ranked adaptive recommendations for a learner.",
)
async def get_recommendations(user_id: str, engine: AnalyticsEngineDep) -> RecommendationListResponse:
    recommendations = await engine.generate_recommendations(user_id)
    return RecommendationListResponse(
        user_id=user_id,
        recommendations=[RecommendationResponse.model_validate(r) for r in recommendations],
        count=len(recommendations),
    )


@router.get(
    "/{user_id}/summary",
    response_model=AnalyticsSummaryResponse,
    summary="Get analytics summary",
    description="Sessions, time, mastery and streak rollup for a learner.",
)
async def get_summary(user_id: str, engine: AnalyticsEngineDep) -> AnalyticsSummaryResponse:
    analytics = await engine.get_analytics(user_id)
    return AnalyticsSummaryResponse.model_validate(analytics)
