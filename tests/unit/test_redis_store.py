"""Tests for RedisAnalyticsStore against a mocked async client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.modules.analytics.interface import (
    LearningPattern,
    PatternMetadata,
    ProfileSnapshot,
    StrongArea,
    UserLearningProfile,
)
from src.modules.analytics.redis_store import RedisAnalyticsStore
from src.shared.exceptions import StoreUnavailableError
from src.shared.models import PatternType


@pytest.fixture
def pipeline():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, 1, 1])
    return pipe


@pytest.fixture
def redis_client(pipeline):
    client = MagicMock()
    client.pipeline.return_value = pipeline
    client.lrange = AsyncMock(return_value=[])
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.smembers = AsyncMock(return_value=set())
    return client


@pytest.fixture
def store(redis_client) -> RedisAnalyticsStore:
    return RedisAnalyticsStore(redis_client=redis_client, key_prefix="test:")


class TestRedisEvents:
    """Event history storage."""

    @pytest.mark.asyncio
    async def test_set_events_replaces_list_in_transaction(self, store, redis_client, pipeline, make_event):
        events = [make_event(lesson_id="l0"), make_event(lesson_id="l1")]

        await store.set_events("u1", events)

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipeline.delete.assert_called_once_with("test:events:u1")
        key, *payloads = pipeline.rpush.call_args.args
        assert key == "test:events:u1"
        assert payloads == [e.model_dump_json() for e in events]
        pipeline.sadd.assert_called_once_with("test:users", "u1")
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_events_decodes_payloads(self, store, redis_client, make_event):
        events = [make_event(lesson_id="l0"), make_event(lesson_id="l1", success_rate=0.9)]
        redis_client.lrange.return_value = [e.model_dump_json() for e in events]

        loaded = await store.get_events("u1")

        redis_client.lrange.assert_awaited_once_with("test:events:u1", 0, -1)
        assert loaded == events

    @pytest.mark.asyncio
    async def test_empty_history_skips_rpush(self, store, pipeline):
        await store.set_events("u1", [])

        pipeline.rpush.assert_not_called()
        pipeline.delete.assert_called_once_with("test:events:u1")

    @pytest.mark.asyncio
    async def test_user_ids_sorted(self, store, redis_client):
        redis_client.smembers.return_value = {"b", "a"}

        assert await store.user_ids() == ["a", "b"]


class TestRedisSnapshots:
    """Profile snapshot storage."""

    @pytest.mark.asyncio
    async def test_snapshot_round_trip(self, store, redis_client, fixed_now):
        pattern = LearningPattern(
            pattern_type=PatternType.OPTIMAL_TIME,
            confidence=0.8,
            metadata=PatternMetadata(optimal_times=[9, 15]),
            data_points_count=30,
            last_updated=fixed_now,
        )
        snapshot = ProfileSnapshot(
            profile=UserLearningProfile(
                user_id="u1",
                overall_progress=0.5,
                strong_areas=[StrongArea(concept="loops", proficiency=0.9, confidence=0.8)],
                patterns=[pattern],
                created_at=fixed_now,
                last_updated=fixed_now,
            ),
            patterns=[pattern],
        )

        await store.set_snapshot("u1", snapshot)
        key, payload = redis_client.set.call_args.args
        redis_client.get.return_value = payload

        assert key == "test:snapshot:u1"
        assert await store.get_snapshot("u1") == snapshot

    @pytest.mark.asyncio
    async def test_missing_snapshot(self, store):
        assert await store.get_snapshot("u1") is None


class TestRedisFailures:
    """Redis errors surface as StoreUnavailableError."""

    @pytest.mark.asyncio
    async def test_read_failure(self, store, redis_client):
        redis_client.lrange.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.get_events("u1")

        assert exc_info.value.details["service"] == "AnalyticsStore:redis"

    @pytest.mark.asyncio
    async def test_write_failure(self, store, pipeline, make_event):
        pipeline.execute.side_effect = RedisConnectionError("connection reset")

        with pytest.raises(StoreUnavailableError):
            await store.set_events("u1", [make_event()])

    @pytest.mark.asyncio
    async def test_snapshot_write_failure(self, store, redis_client):
        redis_client.set.side_effect = RedisConnectionError("timeout")

        with pytest.raises(StoreUnavailableError):
            await store.set_snapshot("u1", ProfileSnapshot())
