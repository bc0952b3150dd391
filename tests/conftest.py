"""Test configuration and fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Load environment variables before any imports that need them
from dotenv import load_dotenv
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Ensure src is in path
sys.path.insert(0, str(project_root))

import pytest

from src.modules.analytics.schemas import LearningEvent


# Fixed "now" used by clock-driven tests: Wednesday 2025-01-15 12:00 UTC
FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings, feature flag overrides and the service registry."""
    yield
    from src.shared.config import get_settings
    from src.shared.feature_flags import FeatureFlagManager, get_feature_flags
    from src.shared.service_registry import ServiceRegistry, get_service_registry

    if FeatureFlagManager._instance is not None:
        FeatureFlagManager._instance.clear_all_overrides()
    get_feature_flags.cache_clear()
    FeatureFlagManager._instance = None

    get_service_registry.cache_clear()
    ServiceRegistry._instance = None

    get_settings.cache_clear()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def sample_user_id() -> str:
    return "user-123"


@pytest.fixture
def make_event(sample_user_id):
    """Factory for LearningEvents with sensible defaults.

    ``minutes_ago`` places the event relative to FIXED_NOW; any other
    keyword overrides the event field of the same name.
    """

    def _make_event(minutes_ago: float = 0, **overrides) -> LearningEvent:
        fields = {
            "user_id": sample_user_id,
            "session_id": "session-1",
            "lesson_id": "lesson-1",
            "concept_id": "recursion",
            "timestamp": FIXED_NOW - timedelta(minutes=minutes_ago),
            "time_spent_ms": 10 * 60 * 1000,
            "attempts": 1,
            "success_rate": 0.7,
            "confidence_level": 0.6,
            "difficulty_rating": 5,
            "comprehension": 0.7,
            "satisfaction": 0.7,
        }
        fields.update(overrides)
        return LearningEvent(**fields)

    return _make_event
