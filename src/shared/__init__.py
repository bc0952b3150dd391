"""Shared utilities and common code."""

from src.shared.config import Settings, get_settings
from src.shared.database import (
    close_redis,
    get_redis,
    shutdown,
    startup,
)
from src.shared.models import (
    BaseSchema,
    DeviceType,
    LearningStyle,
    PatternType,
    RecommendationPriority,
    RecommendationType,
    RefreshMode,
    SuccessResponse,
    SuggestedApproach,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Redis
    "get_redis",
    "close_redis",
    "startup",
    "shutdown",
    # Models
    "BaseSchema",
    "SuccessResponse",
    # Enums
    "DeviceType",
    "LearningStyle",
    "PatternType",
    "RecommendationPriority",
    "RecommendationType",
    "RefreshMode",
    "SuggestedApproach",
]
