"""Tests for AdaptiveLearningEngine."""

import asyncio
import logging

import pytest

from src.modules.analytics import AdaptiveLearningEngine, EngineConfig
from src.modules.analytics.interface import LearningAnalytics
from src.modules.analytics.store import InMemoryAnalyticsStore
from src.modules.content import ConceptIndex
from src.shared.exceptions import InvalidEngineConfigError
from src.shared.models import (
    PatternType,
    RecommendationType,
    RefreshMode,
    SuggestedApproach,
)

FOUR_DAYS = 4 * 24 * 60


@pytest.fixture
def engine(clock) -> AdaptiveLearningEngine:
    return AdaptiveLearningEngine(clock=clock)


async def _record_all(engine: AdaptiveLearningEngine, events) -> None:
    for event in events:
        await engine.record_event(event)


def _struggling_events(make_event, concept="X", count=4, minutes_ago=FOUR_DAYS):
    return [
        make_event(
            minutes_ago=minutes_ago,
            concept_id=concept,
            success_rate=0.3,
            confidence_level=0.4,
            comprehension=0.3,
            attempts=6,
        )
        for _ in range(count)
    ]


class TestEngineScenarios:
    """End-to-end behavior of the public operations."""

    @pytest.mark.asyncio
    async def test_unknown_user(self, engine, sample_user_id):
        assert await engine.get_profile(sample_user_id) is None
        assert await engine.generate_recommendations(sample_user_id) == []
        assert await engine.get_analytics(sample_user_id) == LearningAnalytics()

    @pytest.mark.asyncio
    async def test_strong_area_and_best_hour(self, engine, make_event, sample_user_id):
        await _record_all(engine, [
            make_event(
                concept_id="closures",
                success_rate=0.9,
                comprehension=0.85,
                confidence_level=0.8,
                difficulty_rating=5,
                hour_of_day=hour,
            )
            for hour in (9, 9, 9, 14, 14)
        ])

        profile = await engine.get_profile(sample_user_id)

        assert "closures" in [a.concept for a in profile.strong_areas]
        assert profile.best_learning_times[0] == 9

    @pytest.mark.asyncio
    async def test_struggling_concept(self, engine, make_event, sample_user_id):
        await _record_all(engine, _struggling_events(make_event, minutes_ago=10))

        profile = await engine.get_profile(sample_user_id)

        area = next(a for a in profile.improvement_areas if a.concept == "X")
        assert area.suggested_approach == SuggestedApproach.SIMPLIFY

    @pytest.mark.asyncio
    async def test_out_of_range_success_is_clamped(self, engine, make_event, sample_user_id):
        await engine.record_event(make_event(success_rate=1.4))

        profile = await engine.get_profile(sample_user_id)

        # 0.4 * 1.0 + 0.3 * 0.7 + 0.2 * 0.6 + 0.1 * 0.7
        assert profile.average_performance == pytest.approx(0.8)

    @pytest.mark.asyncio
    async def test_streak_today_and_yesterday(self, engine, make_event, sample_user_id):
        await _record_all(engine, [
            make_event(minutes_ago=24 * 60),
            make_event(minutes_ago=5),
        ])

        analytics = await engine.get_analytics(sample_user_id)

        assert analytics.current_streak == 2

    @pytest.mark.asyncio
    async def test_old_events_do_not_build_a_profile(self, engine, make_event, sample_user_id):
        await engine.record_event(make_event(minutes_ago=40 * 24 * 60))

        assert await engine.get_profile(sample_user_id) is None
        assert (await engine.get_analytics(sample_user_id)).total_sessions == 1


class TestEngineProperties:
    """Invariants that hold across operations."""

    @pytest.mark.asyncio
    async def test_recommendations_are_idempotent(self, engine, make_event, sample_user_id):
        await _record_all(engine, _struggling_events(make_event))

        first = await engine.generate_recommendations(sample_user_id)
        second = await engine.generate_recommendations(sample_user_id)

        assert first
        assert first == second

    @pytest.mark.asyncio
    async def test_recommendations_are_bounded(self, clock, make_event, sample_user_id):
        events = _struggling_events(make_event)
        default = AdaptiveLearningEngine(clock=clock)
        single = AdaptiveLearningEngine(config=EngineConfig(max_recommendations=1), clock=clock)
        await _record_all(default, events)
        await _record_all(single, events)

        recommendations = await default.generate_recommendations(sample_user_id)

        assert len(recommendations) == 3
        assert {r.type for r in recommendations} == {
            RecommendationType.DIFFICULTY,
            RecommendationType.CONTENT,
            RecommendationType.REVIEW,
        }
        assert await single.generate_recommendations(sample_user_id) == recommendations[:1]

    @pytest.mark.asyncio
    async def test_eviction_keeps_newest(self, clock, make_event, sample_user_id):
        engine = AdaptiveLearningEngine(
            config=EngineConfig(max_events_per_user=1000, refresh_mode=RefreshMode.DEFERRED),
            clock=clock,
        )
        await _record_all(engine, [make_event(lesson_id=f"l{i}") for i in range(1001)])

        history = await engine.store.get_events(sample_user_id)

        assert len(history) == 1000
        assert history[0].lesson_id == "l1"
        assert "l0" not in {e.lesson_id for e in history}

    @pytest.mark.asyncio
    async def test_low_confidence_patterns_hidden(self, clock, make_event, sample_user_id):
        events = [make_event() for _ in range(12)]
        strict = AdaptiveLearningEngine(clock=clock)
        lenient = AdaptiveLearningEngine(config=EngineConfig(pattern_confidence_threshold=0.0), clock=clock)
        await _record_all(strict, events)
        await _record_all(lenient, events)

        lenient_patterns = (await lenient.get_profile(sample_user_id)).patterns

        assert (await strict.get_profile(sample_user_id)).patterns == []
        assert any(p.confidence < 0.7 for p in lenient_patterns)

    @pytest.mark.asyncio
    async def test_confident_pattern_exposed(self, engine, make_event, sample_user_id):
        await _record_all(engine, [make_event(success_rate=1.0, satisfaction=1.0) for _ in range(12)])

        patterns = (await engine.get_profile(sample_user_id)).patterns

        assert [p.pattern_type for p in patterns] == [PatternType.DIFFICULTY_PREFERENCE]
        assert patterns[0].metadata.preferred_difficulty == 5
        assert (await engine.get_system_stats()).total_patterns == 1

    @pytest.mark.asyncio
    async def test_mastery_is_monotonic(self, engine, make_event, sample_user_id):
        await engine.record_event(make_event(minutes_ago=10, concept_id="a", comprehension=0.9))
        counts = [(await engine.get_analytics(sample_user_id)).concepts_mastered]

        for event in (
            make_event(minutes_ago=8, concept_id="b", comprehension=0.2),
            make_event(minutes_ago=60, concept_id="a", comprehension=0.1),
            make_event(minutes_ago=5, concept_id="b", comprehension=0.95),
        ):
            await engine.record_event(event)
            counts.append((await engine.get_analytics(sample_user_id)).concepts_mastered)

        assert counts == [1, 1, 1, 2]


class TestEngineRefresh:
    """Eager and deferred refresh."""

    @pytest.mark.asyncio
    async def test_deferred_refresh(self, clock, make_event, sample_user_id):
        engine = AdaptiveLearningEngine(config=EngineConfig(refresh_mode="deferred"), clock=clock)

        await engine.record_event(make_event())

        assert await engine.get_profile(sample_user_id) is None
        assert engine.pending_users == {sample_user_id}

        assert await engine.refresh_pending() == 1
        assert await engine.get_profile(sample_user_id) is not None
        assert engine.pending_users == set()
        assert await engine.refresh_pending() == 0

    @pytest.mark.asyncio
    async def test_refresh_user(self, clock, make_event, sample_user_id):
        engine = AdaptiveLearningEngine(config=EngineConfig(refresh_mode=RefreshMode.DEFERRED), clock=clock)
        await engine.record_event(make_event())

        await engine.refresh_user(sample_user_id)

        assert await engine.get_profile(sample_user_id) is not None
        assert engine.pending_users == set()

    @pytest.mark.asyncio
    async def test_concurrent_writers(self, engine, make_event):
        users = ["u1", "u2", "u3"]
        events = [make_event(user_id=u, lesson_id=f"l{i}") for u in users for i in range(20)]

        await asyncio.gather(*(engine.record_event(e) for e in events))
        await asyncio.gather(*(engine.generate_recommendations(u) for u in users))

        for user_id in users:
            assert len(await engine.store.get_events(user_id)) == 20
            assert (await engine.get_profile(user_id)).user_id == user_id

    @pytest.mark.asyncio
    async def test_reads_for_unknown_users_hold_no_locks(self, engine):
        for i in range(1000):
            assert await engine.get_profile(f"ghost-{i}") is None
            assert (await engine.get_analytics(f"ghost-{i}")).total_sessions == 0
            assert await engine.generate_recommendations(f"ghost-{i}") == []

        assert len(engine._locks) == 0

    @pytest.mark.asyncio
    async def test_locks_released_after_writes(self, engine, make_event, sample_user_id):
        await asyncio.gather(*(engine.record_event(make_event(lesson_id=f"l{i}")) for i in range(5)))

        assert len(engine._locks) == 0
        assert len(await engine.store.get_events(sample_user_id)) == 5

    @pytest.mark.asyncio
    async def test_foreign_events_ignored(self, engine, make_event, sample_user_id, caplog):
        await engine.store.set_events(sample_user_id, [
            make_event(user_id="intruder", success_rate=0.0, comprehension=0.0),
            make_event(success_rate=1.0),
        ])

        with caplog.at_level(logging.WARNING):
            await engine.refresh_user(sample_user_id)

        profile = await engine.get_profile(sample_user_id)
        assert profile.average_performance == pytest.approx(0.8)
        assert "other users" in caplog.text


class TestEngineStats:
    """Tests for get_system_stats."""

    @pytest.mark.asyncio
    async def test_counts(self, clock, make_event):
        engine = AdaptiveLearningEngine(config=EngineConfig(refresh_mode="deferred"), clock=clock)
        await _record_all(engine, [make_event(user_id="a") for _ in range(3)])
        await engine.refresh_pending()
        await _record_all(engine, [make_event(user_id="b") for _ in range(2)])

        stats = await engine.get_system_stats()

        assert stats.total_users == 1
        assert stats.total_data_points == 5
        assert stats.total_patterns == 0

    @pytest.mark.asyncio
    async def test_empty_engine(self, engine):
        stats = await engine.get_system_stats()

        assert (stats.total_users, stats.total_data_points, stats.total_patterns) == (0, 0, 0)


class TestEngineWiring:
    """Configuration and collaborators."""

    def test_defaults(self):
        engine = AdaptiveLearningEngine()

        assert isinstance(engine.store, InMemoryAnalyticsStore)
        assert engine.config.max_recommendations == 3
        assert engine.config.refresh_mode == RefreshMode.EAGER

    @pytest.mark.parametrize("overrides", [
        {"max_events_per_user": 0},
        {"pattern_confidence_threshold": 1.5},
        {"max_recommendations": -1},
        {"improvement_focus_probability": -0.1},
    ])
    def test_invalid_config(self, overrides):
        with pytest.raises(InvalidEngineConfigError):
            EngineConfig(**overrides)

    @pytest.mark.asyncio
    async def test_weighted_content_focus_from_config(self, clock, make_event, sample_user_id):
        config = EngineConfig(weighted_content_focus=True, improvement_focus_probability=0.0, random_seed=7)
        engine = AdaptiveLearningEngine(config=config, clock=clock)
        await _record_all(engine, _struggling_events(make_event))

        recommendations = await engine.generate_recommendations(sample_user_id)

        # No strong areas to fall back on, so no content recommendation
        assert recommendations
        assert all(r.type != RecommendationType.CONTENT for r in recommendations)

    @pytest.mark.asyncio
    async def test_related_concepts_from_index(self, clock, make_event, sample_user_id):
        engine = AdaptiveLearningEngine(clock=clock, retriever=ConceptIndex())
        await _record_all(engine, _struggling_events(make_event, concept="html"))

        recommendations = await engine.generate_recommendations(sample_user_id)

        content = next(r for r in recommendations if r.type == RecommendationType.CONTENT)
        assert content.action.content_id == "html"
        assert "css" in content.action.related_concepts
