"""Pydantic schemas for the Analytics module.

``LearningEvent`` is the versioned ingestion schema. Every bounded numeric
field is clamped into its documented range instead of being rejected; a
value that cannot be read as a number falls back to the field default.
The identifiers are the only required linkage.
"""

from datetime import datetime, timezone
import logging
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from src.shared.constants import (
    EVENT_SCHEMA_VERSION,
    MAX_DAY_OF_WEEK,
    MAX_DIFFICULTY_RATING,
    MAX_HOUR_OF_DAY,
    MAX_SCORE,
    MIN_ATTEMPTS,
    MIN_DAY_OF_WEEK,
    MIN_DIFFICULTY_RATING,
    MIN_HOUR_OF_DAY,
    MIN_SCORE,
)
from src.shared.datetime_utils import ensure_utc, utc_now
from src.shared.models import DeviceType

logger = logging.getLogger(__name__)

_UNIT_INTERVAL_FIELDS = (
    "success_rate",
    "confidence_level",
    "energy_level",
    "focus_level",
    "stress_level",
    "comprehension",
    "retention",
    "satisfaction",
)


def _as_number(value: Any, default: float) -> float:
    """Read a finite number, falling back to ``default``."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _coerce_timestamp(value: Any) -> datetime:
    """Accept aware/naive datetimes, ISO strings, or epoch milliseconds."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            pass
    logger.warning(f"Unreadable event timestamp {value!r}, using current time")
    return utc_now()


class LearningEvent(BaseModel):
    """One learning interaction, immutable once created."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    schema_version: int = EVENT_SCHEMA_VERSION

    # Linkage
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)
    concept_id: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=utc_now)

    # Performance
    time_spent_ms: float = 0.0
    attempts: int = 1
    success_rate: float = 0.0
    confidence_level: float = 0.5
    difficulty_rating: float = 5.0

    # User state
    mood: str = "neutral"
    energy_level: float = 0.5
    focus_level: float = 0.5
    stress_level: float = 0.5

    # Context (derived from the timestamp when omitted)
    hour_of_day: int = 0
    day_of_week: int = 0
    device_type: DeviceType = DeviceType.DESKTOP

    # Outcomes
    completed: bool = False
    comprehension: float = 0.0
    retention: float = 0.0
    satisfaction: float = 0.5

    @model_validator(mode="before")
    @classmethod
    def _fill_time_context(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        timestamp = _coerce_timestamp(data["timestamp"]) if data.get("timestamp") is not None else utc_now()
        data["timestamp"] = timestamp
        if data.get("hour_of_day") is None:
            data["hour_of_day"] = timestamp.hour
        if data.get("day_of_week") is None:
            # Sunday = 0
            data["day_of_week"] = (timestamp.weekday() + 1) % 7
        return data

    @field_validator("schema_version", mode="before")
    @classmethod
    def _known_schema_version(cls, value: Any) -> Any:
        if value is not None and _as_number(value, EVENT_SCHEMA_VERSION) != EVENT_SCHEMA_VERSION:
            logger.warning(
                f"Event schema version {value!r} differs from supported version {EVENT_SCHEMA_VERSION}"
            )
        return value

    @field_validator("user_id", "session_id", "lesson_id", "concept_id", mode="before")
    @classmethod
    def _stringify_identifier(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value).strip()

    @field_validator(*_UNIT_INTERVAL_FIELDS, mode="before")
    @classmethod
    def _clamp_unit_interval(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        return _clamp(_as_number(value, default), MIN_SCORE, MAX_SCORE)

    @field_validator("difficulty_rating", mode="before")
    @classmethod
    def _clamp_difficulty(cls, value: Any) -> float:
        return _clamp(_as_number(value, 5.0), MIN_DIFFICULTY_RATING, MAX_DIFFICULTY_RATING)

    @field_validator("time_spent_ms", mode="before")
    @classmethod
    def _clamp_time_spent(cls, value: Any) -> float:
        return max(0.0, _as_number(value, 0.0))

    @field_validator("attempts", mode="before")
    @classmethod
    def _clamp_attempts(cls, value: Any) -> int:
        return max(MIN_ATTEMPTS, round(_as_number(value, MIN_ATTEMPTS)))

    @field_validator("hour_of_day", mode="before")
    @classmethod
    def _clamp_hour(cls, value: Any) -> int:
        return int(_clamp(round(_as_number(value, 0)), MIN_HOUR_OF_DAY, MAX_HOUR_OF_DAY))

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _clamp_day(cls, value: Any) -> int:
        return int(_clamp(round(_as_number(value, 0)), MIN_DAY_OF_WEEK, MAX_DAY_OF_WEEK))

    @field_validator("device_type", mode="before")
    @classmethod
    def _known_device(cls, value: Any) -> DeviceType:
        if isinstance(value, DeviceType):
            return value
        try:
            return DeviceType(str(value).lower())
        except ValueError:
            return DeviceType.DESKTOP

    @field_validator("mood", mode="before")
    @classmethod
    def _mood_label(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return "neutral"
        return str(value).strip()

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def time_spent_minutes(self) -> float:
        return self.time_spent_ms / 60000

    @property
    def time_spent_hours(self) -> float:
        return self.time_spent_ms / 3600000
