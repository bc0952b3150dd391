"""Unified service registry for dependency injection.

This module provides a centralized service factory that switches between
in-memory and Redis-backed analytics storage based on feature flags.

Usage:
    from src.shared.service_registry import get_service_registry

    registry = get_service_registry()
    engine = registry.get_analytics_engine()
    retriever = registry.get_concept_retriever()

The registry automatically:
- Backs the engine with Redis when FF_USE_REDIS_ANALYTICS_STORE=true
- Falls back to the in-memory store when Redis cannot be set up
- Wires the concept index when FF_ENABLE_CONCEPT_ENRICHMENT=true
- Caches service instances for consistent singleton behavior
"""

from functools import lru_cache
from typing import TYPE_CHECKING
import logging

from src.shared.config import get_settings
from src.shared.feature_flags import FeatureFlags, get_feature_flags

if TYPE_CHECKING:
    from src.modules.analytics.interface import IAnalyticsStore
    from src.modules.analytics.service import AdaptiveLearningEngine
    from src.modules.content.interface import IConceptRetriever

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Unified service factory with feature flag support.

    Features:
    - Lazy service instantiation
    - Feature flag-based store selection
    - Automatic fallback when Redis is unavailable
    - Service instance caching
    """

    _instance: "ServiceRegistry | None" = None

    def __new__(cls) -> "ServiceRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._flags = get_feature_flags()
        self._analytics_engine: "AdaptiveLearningEngine | None" = None
        self._concept_retriever: "IConceptRetriever | None" = None
        self._initialized = True
        logger.info("ServiceRegistry initialized")

    def get_analytics_engine(self) -> "AdaptiveLearningEngine":
        """Get the analytics engine instance.

        The engine is backed by Redis if FF_USE_REDIS_ANALYTICS_STORE is
        enabled, otherwise by the in-memory store.

        Returns:
            AdaptiveLearningEngine configured from settings
        """
        if self._analytics_engine is None:
            self._analytics_engine = self._create_analytics_engine()
        return self._analytics_engine

    def get_concept_retriever(self) -> "IConceptRetriever | None":
        """Get the concept retriever, or None when enrichment is disabled."""
        if not self._flags.is_enabled(FeatureFlags.ENABLE_CONCEPT_ENRICHMENT):
            return None
        if self._concept_retriever is None:
            from src.modules.content.concept_index import ConceptIndex

            logger.info("Creating ConceptIndex")
            self._concept_retriever = ConceptIndex()
        return self._concept_retriever

    def _create_analytics_engine(self) -> "AdaptiveLearningEngine":
        """Create the analytics engine from settings and feature flags."""
        from src.modules.analytics.interface import EngineConfig
        from src.modules.analytics.service import AdaptiveLearningEngine

        config = EngineConfig.from_settings(get_settings())
        return AdaptiveLearningEngine(
            store=self._create_store(),
            config=config,
            retriever=self.get_concept_retriever(),
        )

    def _create_store(self) -> "IAnalyticsStore":
        """Create the analytics store based on feature flags."""
        if self._flags.is_enabled(FeatureFlags.USE_REDIS_ANALYTICS_STORE):
            try:
                from src.modules.analytics.redis_store import RedisAnalyticsStore

                logger.info("Creating RedisAnalyticsStore")
                return RedisAnalyticsStore(key_prefix=get_settings().redis_key_prefix)
            except Exception as e:
                logger.warning(
                    f"Failed to create RedisAnalyticsStore, falling back: {e}"
                )

        from src.modules.analytics.store import InMemoryAnalyticsStore

        logger.info("Creating InMemoryAnalyticsStore")
        return InMemoryAnalyticsStore()

    def clear_cache(self) -> None:
        """Clear all cached service instances.

        Use this when feature flags change at runtime to force
        recreation of services with new settings.
        """
        self._analytics_engine = None
        self._concept_retriever = None
        logger.info("ServiceRegistry cache cleared")

    def get_service_info(self) -> dict[str, str]:
        """Get information about currently instantiated services.

        Returns:
            Dictionary of service names to their implementation types
        """
        info = {}
        if self._analytics_engine:
            info["analytics"] = type(self._analytics_engine).__name__
            info["analytics_store"] = type(self._analytics_engine.store).__name__
        if self._concept_retriever:
            info["concept_retriever"] = type(self._concept_retriever).__name__
        return info

    def __repr__(self) -> str:
        redis_enabled = self._flags.is_enabled(FeatureFlags.USE_REDIS_ANALYTICS_STORE)
        return f"ServiceRegistry(redis_enabled={redis_enabled}, services={self.get_service_info()})"


@lru_cache
def get_service_registry() -> ServiceRegistry:
    """Get the singleton ServiceRegistry instance.

    Returns:
        The shared ServiceRegistry instance
    """
    return ServiceRegistry()


def get_analytics_engine() -> "AdaptiveLearningEngine":
    """Get the analytics engine from the registry.

    This is the recommended way to get an engine instance,
    as it respects feature flags and provides fallback behavior.
    """
    return get_service_registry().get_analytics_engine()
