"""Adaptive Learning Engine - the facade over the analytics pipeline.

This service provides:
- Event ingestion into a bounded per-user history
- Profile and pattern refresh (eager, or deferred and batched)
- Ranked adaptive recommendations
- Display rollups and system statistics

Writes for one user are serialized with a per-user lock, dropped once no
caller holds it. The profile and pattern set are stored together as one
snapshot so readers never observe a half-finished refresh.
"""

import asyncio
from datetime import timedelta
import logging
import random
import weakref

from src.modules.analytics.event_store import EventStore, select_recent
from src.modules.analytics.interface import (
    AdaptiveRecommendation,
    EngineConfig,
    IAnalyticsEngine,
    IAnalyticsStore,
    LearningAnalytics,
    ProfileSnapshot,
    SystemStats,
    UserLearningProfile,
)
from src.modules.analytics.pattern_detector import PatternDetector
from src.modules.analytics.profile_builder import ProfileBuilder
from src.modules.analytics.recommender import (
    ContentFocusStrategy,
    RecommendationGenerator,
    WeightedFocusStrategy,
)
from src.modules.analytics.reporter import AnalyticsReporter
from src.modules.analytics.schemas import LearningEvent
from src.modules.analytics.store import InMemoryAnalyticsStore
from src.modules.content.interface import IConceptRetriever
from src.shared.constants import RECOMMENDATION_RECENT_EVENTS
from src.shared.datetime_utils import Clock, utc_now
from src.shared.models import RefreshMode

logger = logging.getLogger(__name__)


class AdaptiveLearningEngine(IAnalyticsEngine):
    """Engine that turns learning telemetry into profiles and recommendations.

    Every collaborator is injected; nothing here depends on a process-wide
    singleton. With the defaults the engine keeps all state in memory.
    """

    def __init__(
        self,
        store: IAnalyticsStore | None = None,
        config: EngineConfig | None = None,
        clock: Clock = utc_now,
        retriever: IConceptRetriever | None = None,
        focus_strategy: ContentFocusStrategy | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._store = store or InMemoryAnalyticsStore()
        self._clock = clock

        if focus_strategy is None and self._config.weighted_content_focus:
            focus_strategy = WeightedFocusStrategy(
                probability=self._config.improvement_focus_probability,
                rng=random.Random(self._config.random_seed),
            )

        self._events = EventStore(self._store, self._config.max_events_per_user)
        self._profile_builder = ProfileBuilder()
        self._pattern_detector = PatternDetector(
            min_data_points=self._config.min_data_points_for_pattern,
            confidence_threshold=self._config.pattern_confidence_threshold,
        )
        self._recommender = RecommendationGenerator(
            max_recommendations=self._config.max_recommendations,
            focus_strategy=focus_strategy,
            retriever=retriever,
        )
        self._reporter = AnalyticsReporter()

        # Locks live only while a caller holds or awaits them
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._dirty: set[str] = set()

        logger.info(
            f"AdaptiveLearningEngine initialized "
            f"(store={type(self._store).__name__}, refresh={self._config.refresh_mode.value})"
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def store(self) -> IAnalyticsStore:
        return self._store

    @property
    def pending_users(self) -> set[str]:
        """Users with events recorded since their last refresh."""
        return set(self._dirty)

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    # --- Writes ---

    async def record_event(self, event: LearningEvent) -> None:
        async with self._lock_for(event.user_id):
            history_size = await self._events.record(event)
            logger.debug(
                f"Recorded event for user {event.user_id} on concept {event.concept_id} "
                f"(history size {history_size})"
            )

            if self._config.refresh_mode == RefreshMode.DEFERRED:
                self._dirty.add(event.user_id)
            else:
                await self._refresh_locked(event.user_id)

    async def refresh_user(self, user_id: str) -> None:
        """Rebuild the profile and pattern set of one user."""
        async with self._lock_for(user_id):
            await self._refresh_locked(user_id)

    async def refresh_pending(self) -> int:
        pending = sorted(self._dirty)
        for user_id in pending:
            await self.refresh_user(user_id)

        if pending:
            logger.info(f"Refreshed {len(pending)} pending users")
        return len(pending)

    async def _refresh_locked(self, user_id: str) -> None:
        """Refresh one user; the caller holds that user's lock."""
        now = self._clock()
        history = await self._events.history(user_id)

        foreign = [e for e in history if e.user_id != user_id]
        if foreign:
            logger.warning(
                f"History of user {user_id} holds {len(foreign)} events of other users, ignoring them"
            )
            history = [e for e in history if e.user_id == user_id]

        snapshot = await self._store.get_snapshot(user_id) or ProfileSnapshot()

        detected = self._pattern_detector.detect(history, now)
        patterns = snapshot.patterns if detected is None else detected

        recent = select_recent(history, timedelta(days=self._config.recent_window_days), now)
        profile = self._profile_builder.build(user_id, recent, snapshot.profile, patterns, now)
        if profile is not None:
            # An empty window returns the stored profile as is
            profile.patterns = list(patterns)

        await self._store.set_snapshot(user_id, ProfileSnapshot(profile=profile, patterns=patterns))
        self._dirty.discard(user_id)

        logger.debug(
            f"Refreshed user {user_id}: {len(recent)} recent events, {len(patterns)} patterns"
        )

    # --- Reads ---

    async def get_profile(self, user_id: str) -> UserLearningProfile | None:
        async with self._lock_for(user_id):
            snapshot = await self._store.get_snapshot(user_id)
        return snapshot.profile if snapshot is not None else None

    async def generate_recommendations(self, user_id: str) -> list[AdaptiveRecommendation]:
        async with self._lock_for(user_id):
            snapshot = await self._store.get_snapshot(user_id)
            if snapshot is None or snapshot.profile is None:
                return []

            history = await self._events.history(user_id)
            recent = history[-RECOMMENDATION_RECENT_EVENTS:]
            return await self._recommender.generate(
                snapshot.profile, snapshot.patterns, recent, self._clock()
            )

    async def get_analytics(self, user_id: str) -> LearningAnalytics:
        async with self._lock_for(user_id):
            history = await self._events.history(user_id)
            snapshot = await self._store.get_snapshot(user_id)

        profile = snapshot.profile if snapshot is not None else None
        return self._reporter.summarize(history, profile, self._clock())

    async def get_system_stats(self) -> SystemStats:
        total_users = 0
        total_data_points = 0
        total_patterns = 0

        for user_id in await self._events.user_ids():
            total_data_points += len(await self._events.history(user_id))
            snapshot = await self._store.get_snapshot(user_id)
            if snapshot is None:
                continue
            total_patterns += len(snapshot.patterns)
            if snapshot.profile is not None:
                total_users += 1

        return SystemStats(
            total_users=total_users,
            total_data_points=total_data_points,
            total_patterns=total_patterns,
        )
