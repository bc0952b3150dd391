"""Tests for the bounded event store and the in-memory analytics store."""

from datetime import timedelta

import pytest

from src.modules.analytics.event_store import EventStore, select_recent
from src.modules.analytics.interface import ProfileSnapshot, UserLearningProfile
from src.modules.analytics.store import InMemoryAnalyticsStore


class TestEventStore:
    """Tests for EventStore."""

    @pytest.fixture
    def store(self) -> InMemoryAnalyticsStore:
        return InMemoryAnalyticsStore()

    @pytest.fixture
    def events(self, store: InMemoryAnalyticsStore) -> EventStore:
        return EventStore(store, max_events=5)

    @pytest.mark.asyncio
    async def test_record_appends_in_order(self, events: EventStore, make_event, sample_user_id):
        for i in range(3):
            await events.record(make_event(minutes_ago=10 - i, lesson_id=f"l{i}"))

        history = await events.history(sample_user_id)

        assert [e.lesson_id for e in history] == ["l0", "l1", "l2"]

    @pytest.mark.asyncio
    async def test_record_returns_history_size(self, events: EventStore, make_event):
        assert await events.record(make_event()) == 1
        assert await events.record(make_event()) == 2

    @pytest.mark.asyncio
    async def test_fifo_eviction_at_cap(self, events: EventStore, make_event, sample_user_id):
        for i in range(7):
            size = await events.record(make_event(lesson_id=f"l{i}"))
            assert size <= 5

        history = await events.history(sample_user_id)

        assert len(history) == 5
        assert [e.lesson_id for e in history] == ["l2", "l3", "l4", "l5", "l6"]

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, events: EventStore, make_event):
        await events.record(make_event(user_id="a"))
        await events.record(make_event(user_id="b"))
        await events.record(make_event(user_id="b"))

        assert len(await events.history("a")) == 1
        assert len(await events.history("b")) == 2
        assert sorted(await events.user_ids()) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_unknown_user_has_empty_history(self, events: EventStore):
        assert await events.history("nobody") == []

    @pytest.mark.asyncio
    async def test_recent_filters_by_window(self, events: EventStore, make_event, fixed_now, sample_user_id):
        await events.record(make_event(minutes_ago=60 * 24 * 40, lesson_id="old"))
        await events.record(make_event(minutes_ago=60, lesson_id="new"))

        recent = await events.recent(sample_user_id, timedelta(days=30), fixed_now)

        assert [e.lesson_id for e in recent] == ["new"]


class TestSelectRecent:
    """Tests for select_recent."""

    def test_keeps_insertion_order(self, make_event, fixed_now):
        late = make_event(minutes_ago=5, lesson_id="late")
        early = make_event(minutes_ago=50, lesson_id="early")

        recent = select_recent([late, early], timedelta(days=1), fixed_now)

        assert [e.lesson_id for e in recent] == ["late", "early"]

    def test_boundary_is_inclusive(self, make_event, fixed_now):
        edge = make_event(minutes_ago=60 * 24)

        assert select_recent([edge], timedelta(days=1), fixed_now) == [edge]


class TestInMemoryAnalyticsStore:
    """Tests for InMemoryAnalyticsStore."""

    @pytest.mark.asyncio
    async def test_snapshot_round_trip_is_a_copy(self, fixed_now):
        store = InMemoryAnalyticsStore()
        snapshot = ProfileSnapshot(profile=UserLearningProfile(user_id="u1", created_at=fixed_now))

        await store.set_snapshot("u1", snapshot)
        snapshot.profile.overall_progress = 0.9
        loaded = await store.get_snapshot("u1")

        assert loaded.profile.overall_progress == 0.0
        loaded.profile.overall_progress = 0.5
        assert (await store.get_snapshot("u1")).profile.overall_progress == 0.0

    @pytest.mark.asyncio
    async def test_missing_snapshot(self):
        assert await InMemoryAnalyticsStore().get_snapshot("u1") is None

    @pytest.mark.asyncio
    async def test_event_lists_are_copied(self, make_event):
        store = InMemoryAnalyticsStore()
        events = [make_event()]

        await store.set_events("u1", events)
        events.append(make_event())
        loaded = await store.get_events("u1")
        loaded.append(make_event())

        assert len(await store.get_events("u1")) == 1
