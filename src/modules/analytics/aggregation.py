"""Small aggregation helpers shared by the profile builder, detector and reporter."""

from collections import defaultdict
import math
from typing import Callable, Hashable, Iterable, TypeVar

from src.modules.analytics.schemas import LearningEvent

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Group items by key, keeping first-seen key order and item order."""
    groups: dict[K, list[T]] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3)."""
    return math.floor(value + 0.5)


def latest_by_concept(events: Iterable[LearningEvent]) -> dict[str, LearningEvent]:
    """Most recent observation per concept.

    Ties on timestamp go to the later-inserted event.
    """
    latest: dict[str, LearningEvent] = {}
    for event in events:
        current = latest.get(event.concept_id)
        if current is None or event.timestamp >= current.timestamp:
            latest[event.concept_id] = event
    return latest
