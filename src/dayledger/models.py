"""Data model for the day ledger.

Records are serialized with camelCase keys (``startTime``, ``exertionLevel``,
``foodType``) so stored days keep the same shape across releases.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HOURS_PER_DAY = 24


def new_id() -> str:
    """Generate a fresh activity ID."""
    return str(uuid.uuid4())


class ExertionLevel(str, Enum):
    VERY_LOW = "very-low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


class ActivityType(str, Enum):
    EXERTING = "exerting"
    RESTORATIVE = "restorative"


class ActivityCategory(str, Enum):
    GENERAL = "general"
    SLEEP = "sleep"
    FOOD = "food"


class FoodType(str, Enum):
    MEAL = "meal"
    SNACK = "snack"


class MoodState(str, Enum):
    SAD = "sad"
    MAD = "mad"
    NEUTRAL = "neutral"
    HAPPY = "happy"
    VERY_HAPPY = "very-happy"


def _lower(value: Any) -> Any:
    # Older quick-log records wrote "Restorative" / "Sleep"
    if isinstance(value, str):
        return value.strip().lower()
    return value


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Activity(_Record):
    """One hour-aligned interval of the day.

    ``end_time`` is exclusive. Spans that cross midnight are stored
    unwrapped, so sleep from 22:00 to 06:00 is 22 -> 30.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str
    start_time: int
    end_time: int
    exertion_level: ExertionLevel | None = None
    type: ActivityType = ActivityType.EXERTING
    category: ActivityCategory | None = None
    food_type: FoodType | None = None
    date: str

    @field_validator("exertion_level", mode="before")
    @classmethod
    def _coerce_exertion(cls, value: Any) -> Any:
        # Sleep/food quick logs stored a numeric 0 here; it carries no level.
        if value is None or not isinstance(value, str):
            return None
        return _lower(value)

    @field_validator("type", "category", "food_type", mode="before")
    @classmethod
    def _coerce_enum(cls, value: Any) -> Any:
        return _lower(value)

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_sleep(self) -> bool:
        return self.category == ActivityCategory.SLEEP

    @property
    def is_food(self) -> bool:
        return self.category == ActivityCategory.FOOD

    def covers_hour(self, hour: int) -> bool:
        """Check whether the activity occupies a clock hour (0-23).

        Overnight spans cover their post-midnight hours through ``hour + 24``.
        """
        return (
            self.start_time <= hour < self.end_time
            or self.start_time <= hour + HOURS_PER_DAY < self.end_time
        )

    def normalized(self) -> Activity:
        """Shift a span that starts at or after midnight back onto 0-23."""
        if self.start_time >= HOURS_PER_DAY:
            return self.model_copy(
                update={
                    "start_time": self.start_time - HOURS_PER_DAY,
                    "end_time": self.end_time - HOURS_PER_DAY,
                }
            )
        return self


def _mood_or_neutral(value: Any) -> Any:
    # Very old records stored mood as a number
    if isinstance(value, str):
        return value.strip().lower()
    return MoodState.NEUTRAL


class UserStats(_Record):
    """Aggregate stats for one day, derived from its activities."""

    energy: float = 0.0
    meals: int = 0
    snacks: int = 0
    mood: MoodState = MoodState.NEUTRAL

    @field_validator("mood", mode="before")
    @classmethod
    def _coerce_mood(cls, value: Any) -> Any:
        return _mood_or_neutral(value)


class DailyData(_Record):
    """Persisted record for one ledger day."""

    date: str
    stats: UserStats = Field(default_factory=UserStats)
    activities: list[Activity] = Field(default_factory=list)


class LegacyStats(_Record):
    """Stats from the food-points schema, before meals and snacks were counted."""

    energy: float = 0.0
    food: float = 0.0
    mood: MoodState = MoodState.NEUTRAL

    @field_validator("mood", mode="before")
    @classmethod
    def _coerce_mood(cls, value: Any) -> Any:
        return _mood_or_neutral(value)


class LegacyDailyData(_Record):
    date: str
    stats: LegacyStats
    activities: list[Activity] = Field(default_factory=list)


class LedgerState(_Record):
    """Working set for the day currently open in a ledger."""

    current_date: str
    stats: UserStats = Field(default_factory=UserStats)
    activities: list[Activity] = Field(default_factory=list)


class TimeBlock(BaseModel):
    """One clock hour of the day and the activity occupying it."""

    hour: int
    activity: Activity | None = None


def new_activity(
    name: str,
    start_time: int,
    end_time: int,
    date: str,
    *,
    exertion_level: ExertionLevel = ExertionLevel.MODERATE,
    activity_type: ActivityType = ActivityType.EXERTING,
    category: ActivityCategory | None = ActivityCategory.GENERAL,
    food_type: FoodType | None = None,
) -> Activity:
    """Create an activity with a fresh ID."""
    return Activity(
        name=name,
        start_time=start_time,
        end_time=end_time,
        exertion_level=exertion_level,
        type=activity_type,
        category=category,
        food_type=food_type,
        date=date,
    )


def sleep_activity(bedtime: int, wake_time: int, date: str) -> Activity:
    """Create a sleep activity from bedtime to wake time.

    A wake time at or before bedtime means the sleep crossed midnight, e.g.
    22 -> 6 becomes the unwrapped span 22 -> 30.
    """
    if wake_time > bedtime:
        duration = wake_time - bedtime
    else:
        duration = HOURS_PER_DAY - bedtime + wake_time
    return new_activity(
        "Sleep",
        bedtime,
        bedtime + duration,
        date,
        exertion_level=ExertionLevel.VERY_LOW,
        activity_type=ActivityType.RESTORATIVE,
        category=ActivityCategory.SLEEP,
    )


def food_activity(name: str, hour: int, food_type: FoodType, date: str) -> Activity:
    """Create a one-hour meal or snack starting at ``hour``."""
    return new_activity(
        name,
        hour,
        hour + 1,
        date,
        exertion_level=ExertionLevel.VERY_LOW,
        activity_type=ActivityType.RESTORATIVE,
        category=ActivityCategory.FOOD,
        food_type=food_type,
    )


def work_activity(name: str, start_time: int, end_time: int, date: str) -> Activity:
    """Create a moderate exerting work session."""
    return new_activity(name, start_time, end_time, date)
