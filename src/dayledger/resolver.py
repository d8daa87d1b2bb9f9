"""Interval overlap resolution for a day's activities."""

from __future__ import annotations

from dayledger.models import HOURS_PER_DAY, Activity, new_id

# An interval also occupies its hours one day earlier/later on the clock,
# since overnight spans are stored unwrapped (22 -> 30).
_CLOCK_SHIFTS = (0, HOURS_PER_DAY, -HOURS_PER_DAY)


def remove_span(activity: Activity, start: int, end: int) -> list[Activity]:
    """Remove the hours [start, end) from an activity.

    Returns what is left of it: the activity unchanged, trimmed, split in
    two (the later piece gets a new ID), or nothing when fully covered.
    """
    if start >= activity.end_time or end <= activity.start_time:
        return [activity]
    if start <= activity.start_time and end >= activity.end_time:
        return []
    if start > activity.start_time and end < activity.end_time:
        return [
            activity.model_copy(update={"end_time": start}),
            activity.model_copy(update={"id": new_id(), "start_time": end}),
        ]
    if start <= activity.start_time:
        return [activity.model_copy(update={"start_time": end})]
    return [activity.model_copy(update={"end_time": start})]


def resolve(new_activity: Activity, existing: list[Activity]) -> list[Activity]:
    """Make room for a new activity among the existing ones.

    Every existing activity is checked independently against the new
    interval and trimmed, split or dropped so that no hour is shared.
    The new activity itself is not included in the result.

    Args:
        new_activity: Activity about to be added.
        existing: Current activities for the day.

    Returns:
        New list of activities, none overlapping ``new_activity``.
    """
    result: list[Activity] = []
    for activity in existing:
        pieces = [activity]
        for shift in _CLOCK_SHIFTS:
            start = new_activity.start_time + shift
            end = new_activity.end_time + shift
            pieces = [rest for piece in pieces for rest in remove_span(piece, start, end)]
        result.extend(piece.normalized() for piece in pieces)
    return result
