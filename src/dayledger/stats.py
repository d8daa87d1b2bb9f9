"""Stats derivation: energy, meal/snack counts and mood from a day's activities."""

from __future__ import annotations

import math
from collections.abc import Iterable

from dayledger.models import (
    Activity,
    ActivityType,
    ExertionLevel,
    FoodType,
    MoodState,
    UserStats,
)

MAX_ENERGY = 100.0
MIN_ENERGY = 0.0
ENERGY_GOAL_THRESHOLD = 20  # Don't dip below this
SLEEP_ENERGY_PER_HOUR = 12.5  # 8 hours of sleep = 100 energy

DAILY_MEAL_GOAL = 3
DAILY_SNACK_GOAL = 1

EXERTION_ENERGY_IMPACT: dict[ExertionLevel, int] = {
    ExertionLevel.VERY_LOW: 1,
    ExertionLevel.LOW: 5,
    ExertionLevel.MODERATE: 10,
    ExertionLevel.HIGH: 15,
    ExertionLevel.VERY_HIGH: 20,
}


def energy_impact(exertion_level: ExertionLevel | None, activity_type: ActivityType) -> float:
    """Energy change per hour for a general activity.

    Negative for exerting activities, positive for restorative ones. An
    unknown exertion level yields NaN.
    """
    if exertion_level is None:
        return math.nan
    base = EXERTION_ENERGY_IMPACT[exertion_level]
    return -base if activity_type == ActivityType.EXERTING else base


def activity_energy(activity: Activity) -> float:
    """Energy contributed by a single activity.

    Food has no energy effect. A non-finite result (bad duration or level)
    counts as zero.
    """
    if activity.is_food:
        return 0.0
    if activity.is_sleep:
        energy = activity.duration * SLEEP_ENERGY_PER_HOUR
    else:
        energy = energy_impact(activity.exertion_level, activity.type) * activity.duration
    if not math.isfinite(energy):
        return 0.0
    return energy


def count_meals_and_snacks(activities: Iterable[Activity]) -> tuple[int, int]:
    meals = 0
    snacks = 0
    for activity in activities:
        if not activity.is_food:
            continue
        if activity.food_type == FoodType.MEAL:
            meals += 1
        elif activity.food_type == FoodType.SNACK:
            snacks += 1
    return meals, snacks


def clamp_energy(energy: float) -> float:
    if math.isnan(energy):
        return MIN_ENERGY
    return max(MIN_ENERGY, min(MAX_ENERGY, energy))


def derive_stats(
    activities: Iterable[Activity],
    mood: MoodState = MoodState.NEUTRAL,
) -> UserStats:
    """Compute a day's stats from scratch.

    Energy starts at zero and is earned, mostly through sleep: each hour of
    sleep adds 12.5, general activities add or subtract their exertion
    impact per hour, and food only counts toward meals/snacks. The total is
    clamped to 0-100. Mood is never inferred and passes through unchanged.

    Args:
        activities: All activities for the day, in any order.
        mood: The day's mood.

    Returns:
        Freshly derived UserStats.
    """
    activities = list(activities)
    energy = math.fsum(activity_energy(activity) for activity in activities)
    meals, snacks = count_meals_and_snacks(activities)
    return UserStats(
        energy=clamp_energy(energy),
        meals=meals,
        snacks=snacks,
        mood=mood,
    )


def is_energy_below_goal(energy: float) -> bool:
    return energy < ENERGY_GOAL_THRESHOLD
