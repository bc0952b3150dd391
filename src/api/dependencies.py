"""FastAPI dependency injection for services.

Services come from the service registry, so feature flags decide which
store backs the engine. Tests swap them through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from src.modules.analytics.service import AdaptiveLearningEngine
from src.modules.content.interface import IConceptRetriever
from src.shared.service_registry import get_service_registry


# ===================
# Service Dependencies
# ===================

async def get_analytics_engine() -> AdaptiveLearningEngine:
    """Get analytics engine instance."""
    return get_service_registry().get_analytics_engine()


async def get_concept_retriever() -> IConceptRetriever | None:
    """Get the concept retriever, or None when enrichment is disabled."""
    return get_service_registry().get_concept_retriever()


# ===================
# Type Aliases for Dependencies
# ===================

AnalyticsEngineDep = Annotated[AdaptiveLearningEngine, Depends(get_analytics_engine)]
ConceptRetrieverDep = Annotated[IConceptRetriever | None, Depends(get_concept_retriever)]
