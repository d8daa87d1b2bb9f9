"""Ledger store: one open day of activities with always-derived stats."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from dayledger.days import can_navigate_to, is_today, ledger_today, next_day, previous_day
from dayledger.migration import migrate_daily_data
from dayledger.models import (
    HOURS_PER_DAY,
    Activity,
    DailyData,
    LedgerState,
    MoodState,
    TimeBlock,
    UserStats,
)
from dayledger.resolver import remove_span, resolve
from dayledger.stats import derive_stats
from dayledger.storage import KeyValueStore, load_daily_data, save_daily_data

logger = logging.getLogger(__name__)


class LedgerStore:
    """Holds the activities and stats of the current ledger day.

    Every command replaces the activity list, re-derives the stats from it
    and writes the day through to the key-value store. Commands naming an
    unknown activity ID do nothing and return False.

    Not thread-safe, and assumes it is the only writer of its store.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        date: str | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._kv = kv
        self._now = now or datetime.now
        self._state = LedgerState(current_date=date or self._today())

    @classmethod
    def open(
        cls,
        kv: KeyValueStore,
        *,
        date: str | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> LedgerStore:
        """Migrate stored data, then open ``date`` (default: the ledger day)."""
        migrate_daily_data(kv)
        store = cls(kv, date=date, now=now)
        store.open_day(store.current_date())
        return store

    def _today(self) -> str:
        return ledger_today(self._now())

    def _get(self, activity_id: str) -> Activity | None:
        for activity in self._state.activities:
            if activity.id == activity_id:
                return activity
        return None

    def _load(self, daily: DailyData) -> None:
        self._state = LedgerState(
            current_date=daily.date,
            stats=derive_stats(daily.activities, daily.stats.mood),
            activities=list(daily.activities),
        )

    def _replace(self, activities: list[Activity], mood: MoodState | None = None) -> None:
        if mood is None:
            mood = self._state.stats.mood
        self._state = LedgerState(
            current_date=self._state.current_date,
            stats=derive_stats(activities, mood),
            activities=activities,
        )
        self._persist()

    def _persist(self) -> None:
        save_daily_data(self._kv, self.daily_data())

    # Commands

    def add_activity(self, activity: Activity) -> Activity:
        """Add an activity, trimming or splitting whatever it overlaps."""
        activities = resolve(activity, self._state.activities)
        activities.append(activity)
        self._replace(activities)
        return activity

    def update_activity(self, activity: Activity) -> bool:
        """Replace the activity with the same ID.

        Overlaps are not re-resolved; callers keep edits conflict-free.
        """
        if self._get(activity.id) is None:
            logger.debug("update_activity: no activity %s", activity.id)
            return False
        self._replace([activity if a.id == activity.id else a for a in self._state.activities])
        return True

    def delete_activity(self, activity_id: str) -> bool:
        if self._get(activity_id) is None:
            logger.debug("delete_activity: no activity %s", activity_id)
            return False
        self._replace([a for a in self._state.activities if a.id != activity_id])
        return True

    def delete_activity_hour(self, activity_id: str, hour: int) -> bool:
        """Remove a single hour from an activity.

        Deleting the only hour removes the activity, deleting the first or
        last hour trims it, and deleting an interior hour splits it in two
        (the later half gets a new ID).

        Args:
            activity_id: ID of the activity to trim.
            hour: Clock hour to delete (0-23). For an overnight span the
                post-midnight hours are matched as ``hour + 24``.

        Returns:
            True if the activity changed, False if the ID or hour missed.
        """
        target = self._get(activity_id)
        if target is None:
            logger.debug("delete_activity_hour: no activity %s", activity_id)
            return False
        position = hour if hour >= target.start_time else hour + HOURS_PER_DAY
        if not target.start_time <= position < target.end_time:
            logger.debug("delete_activity_hour: hour %d not in %s", hour, activity_id)
            return False

        pieces = [piece.normalized() for piece in remove_span(target, position, position + 1)]
        activities: list[Activity] = []
        for activity in self._state.activities:
            if activity.id == activity_id:
                activities.extend(pieces)
            else:
                activities.append(activity)
        self._replace(activities)
        return True

    def set_mood(self, mood: MoodState) -> None:
        self._replace(list(self._state.activities), mood)

    def load_day(self, daily: DailyData) -> None:
        """Replace the working set with a stored day.

        Stored stats are never trusted; only their mood is kept and the rest
        is re-derived from the activities.
        """
        self._load(daily)
        self._persist()

    def reset_day(self, date: str) -> None:
        """Start ``date`` over with no activities and zeroed stats."""
        self._state = LedgerState(current_date=date)
        self._persist()

    def open_day(self, date: str) -> None:
        """Switch to ``date`` as stored, or an empty day if there is no data.

        Opening only reads; the stored record is rewritten by the next
        command, not by the switch itself.
        """
        daily = load_daily_data(self._kv, date)
        if daily is None:
            daily = DailyData(date=date)
        self._load(daily)

    # Navigation

    def go_to_today(self) -> None:
        self.open_day(self._today())

    def go_to_previous_day(self) -> None:
        self.open_day(previous_day(self._state.current_date))

    def go_to_next_day(self) -> bool:
        """Move one day forward. Refused (returns False) past the ledger day."""
        target = next_day(self._state.current_date, self._today())
        if target is None:
            return False
        self.open_day(target)
        return True

    def go_to_date(self, date: str) -> bool:
        if not can_navigate_to(date, self._today()):
            return False
        self.open_day(date)
        return True

    def is_today(self) -> bool:
        return is_today(self._state.current_date, self._today())

    # Accessors

    def current_date(self) -> str:
        return self._state.current_date

    def current_stats(self) -> UserStats:
        return self._state.stats

    def activities(self) -> list[Activity]:
        return list(self._state.activities)

    def activities_for_hour(self, hour: int) -> list[Activity]:
        return [a for a in self._state.activities if a.covers_hour(hour)]

    def daily_data(self) -> DailyData:
        return DailyData(
            date=self._state.current_date,
            stats=self._state.stats,
            activities=list(self._state.activities),
        )

    def time_blocks(self) -> list[TimeBlock]:
        """The 24 clock hours of the day with the activity in each."""
        blocks = [TimeBlock(hour=hour) for hour in range(HOURS_PER_DAY)]
        for activity in self._state.activities:
            for hour in range(activity.start_time, activity.end_time):
                clock_hour = hour % HOURS_PER_DAY
                blocks[clock_hour] = TimeBlock(hour=clock_hour, activity=activity)
        return blocks

    def find_activity(self, prefix: str) -> Activity | None:
        """Find an activity by ID prefix.

        Returns:
            The activity if exactly one matches, None if none does.

        Raises:
            ValueError: If the prefix matches several activities.
        """
        matches = [a for a in self._state.activities if a.id.startswith(prefix)]
        if not matches:
            return None
        if len(matches) > 1:
            ids = [a.id[:7] for a in matches]
            raise ValueError(f"Ambiguous prefix '{prefix}' matches: {', '.join(ids)}")
        return matches[0]
