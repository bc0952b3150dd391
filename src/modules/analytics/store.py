"""In-memory analytics store."""

import copy

from src.modules.analytics.interface import IAnalyticsStore, ProfileSnapshot
from src.modules.analytics.schemas import LearningEvent


class InMemoryAnalyticsStore(IAnalyticsStore):
    """Process-local store backed by dicts.

    Lists and snapshots are copied on the way in and out so callers never
    share mutable state with the store.
    """

    def __init__(self) -> None:
        self._events: dict[str, list[LearningEvent]] = {}
        self._snapshots: dict[str, ProfileSnapshot] = {}

    async def get_events(self, user_id: str) -> list[LearningEvent]:
        return list(self._events.get(user_id, []))

    async def set_events(self, user_id: str, events: list[LearningEvent]) -> None:
        self._events[user_id] = list(events)

    async def get_snapshot(self, user_id: str) -> ProfileSnapshot | None:
        snapshot = self._snapshots.get(user_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    async def set_snapshot(self, user_id: str, snapshot: ProfileSnapshot) -> None:
        self._snapshots[user_id] = copy.deepcopy(snapshot)

    async def user_ids(self) -> list[str]:
        return list(self._events)
