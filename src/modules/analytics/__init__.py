"""Analytics Module - learner profiles, patterns and adaptive recommendations.

Usage:
    # Recommended: Use service registry (respects feature flags)
    from src.shared.service_registry import get_analytics_engine
    engine = get_analytics_engine()

    # Direct construction (every collaborator injectable)
    from src.modules.analytics import AdaptiveLearningEngine, EngineConfig
    engine = AdaptiveLearningEngine(config=EngineConfig(max_recommendations=5))
"""

from src.modules.analytics.interface import (
    AdaptiveRecommendation,
    EngineConfig,
    ExpectedOutcome,
    IAnalyticsEngine,
    IAnalyticsStore,
    ImprovementArea,
    LearningAnalytics,
    LearningPattern,
    PatternMetadata,
    ProfileSnapshot,
    RecommendationAction,
    StrongArea,
    SystemStats,
    UserLearningProfile,
)
from src.modules.analytics.schemas import LearningEvent
from src.modules.analytics.service import AdaptiveLearningEngine
from src.modules.analytics.store import InMemoryAnalyticsStore
from src.modules.analytics.redis_store import RedisAnalyticsStore
from src.modules.analytics.recommender import (
    ContentFocusStrategy,
    ImprovementFirstStrategy,
    WeightedFocusStrategy,
)

__all__ = [
    # Interface types
    "AdaptiveRecommendation",
    "EngineConfig",
    "ExpectedOutcome",
    "IAnalyticsEngine",
    "IAnalyticsStore",
    "ImprovementArea",
    "LearningAnalytics",
    "LearningEvent",
    "LearningPattern",
    "PatternMetadata",
    "ProfileSnapshot",
    "RecommendationAction",
    "StrongArea",
    "SystemStats",
    "UserLearningProfile",
    # Implementations
    "AdaptiveLearningEngine",
    "InMemoryAnalyticsStore",
    "RedisAnalyticsStore",
    # Content focus strategies
    "ContentFocusStrategy",
    "ImprovementFirstStrategy",
    "WeightedFocusStrategy",
]
