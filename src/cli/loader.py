"""Event file loading for offline replays."""

from datetime import datetime
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from src.modules.analytics.schemas import LearningEvent
from src.shared.exceptions import ValidationError

logger = logging.getLogger(__name__)


def load_events(path: Path) -> list[LearningEvent]:
    """Read a JSON Lines file with one learning event per line.

    Blank lines are skipped. Out-of-range values are clamped by the event
    schema; only lines missing identifiers or not being JSON objects fail.

    Args:
        path: File to read

    Returns:
        Events in file order

    Raises:
        ValidationError: If a line cannot be parsed into an event
    """
    events: list[LearningEvent] = []
    with path.open(encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                events.append(LearningEvent.model_validate_json(line))
            except PydanticValidationError as e:
                raise ValidationError(f"line {line_no}", str(e)) from e

    logger.info(f"Loaded {len(events)} events from {path}")
    return events


def latest_timestamp(events: list[LearningEvent]) -> datetime | None:
    """Timestamp of the newest event, used as the replay's "now"."""
    return max((e.timestamp for e in events), default=None)
