"""Event Store - bounded per-user history of learning events."""

from datetime import datetime, timedelta
import logging

from src.modules.analytics.interface import IAnalyticsStore
from src.modules.analytics.schemas import LearningEvent
from src.shared.constants import DEFAULT_MAX_EVENTS_PER_USER

logger = logging.getLogger(__name__)


class EventStore:
    """Append-only event history with FIFO eviction.

    The history of a user never exceeds ``max_events``: eviction happens in
    the same store write as the append. Callers serialize writes per user.
    """

    def __init__(
        self,
        store: IAnalyticsStore,
        max_events: int = DEFAULT_MAX_EVENTS_PER_USER,
    ) -> None:
        self._store = store
        self._max_events = max_events

    @property
    def max_events(self) -> int:
        return self._max_events

    async def record(self, event: LearningEvent) -> int:
        """Append an event to its user's history.

        Args:
            event: Validated (already clamped) event

        Returns:
            History length after the append
        """
        history = await self._store.get_events(event.user_id)
        history.append(event)

        overflow = len(history) - self._max_events
        if overflow > 0:
            history = history[overflow:]
            logger.debug(f"Evicted {overflow} oldest events for user {event.user_id}")

        await self._store.set_events(event.user_id, history)
        return len(history)

    async def history(self, user_id: str) -> list[LearningEvent]:
        """Get the full bounded history, in insertion order."""
        return await self._store.get_events(user_id)

    async def recent(self, user_id: str, window: timedelta, now: datetime) -> list[LearningEvent]:
        """Get events with ``timestamp >= now - window``, in insertion order."""
        return select_recent(await self.history(user_id), window, now)

    async def user_ids(self) -> list[str]:
        return await self._store.user_ids()


def select_recent(events: list[LearningEvent], window: timedelta, now: datetime) -> list[LearningEvent]:
    """Filter events to the window ending at ``now``, keeping insertion order."""
    cutoff = now - window
    return [event for event in events if event.timestamp >= cutoff]
