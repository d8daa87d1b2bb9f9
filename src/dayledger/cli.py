"""CLI entry point for Day Ledger."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from dayledger.days import (
    can_navigate_to,
    format_day,
    format_hour,
    format_iso_date,
    ledger_hours,
    ledger_today,
    parse_iso_date,
)
from dayledger.ledger import LedgerStore
from dayledger.migration import migrate_daily_data
from dayledger.models import (
    HOURS_PER_DAY,
    Activity,
    ActivityType,
    ExertionLevel,
    FoodType,
    MoodState,
    food_activity,
    new_activity,
    sleep_activity,
    work_activity,
)
from dayledger.stats import (
    DAILY_MEAL_GOAL,
    DAILY_SNACK_GOAL,
    MAX_ENERGY,
    is_energy_below_goal,
)
from dayledger.storage import SQLiteKeyValueStore, dump_daily_data

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "dayledger" / "ledger.db"

MAX_WORK_HOURS = 12

_HOUR = click.IntRange(0, HOURS_PER_DAY - 1)


def make_progress_bar(value: float, max_value: float, width: int = 16) -> str:
    """Create ASCII progress bar.

    Args:
        value: Current value.
        max_value: Maximum value (100%).
        width: Total width of bar (default: 16).

    Returns:
        Progress bar string like '████████░░░░░░░░'.
    """
    if max_value == 0 or value <= 0:
        return "░" * width
    filled = max(1, min(width, round((value / max_value) * width)))
    return "█" * filled + "░" * (width - filled)


def format_span(activity: Activity) -> str:
    return f"{format_hour(activity.start_time)} - {format_hour(activity.end_time)}"


def _describe(activity: Activity) -> str:
    if activity.is_sleep:
        return f"sleep, {activity.duration}h"
    if activity.is_food:
        return activity.food_type.value if activity.food_type else "food"
    level = activity.exertion_level.value if activity.exertion_level else "unknown"
    return f"{level}, {activity.type.value}"


def _validate_date(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        day = format_iso_date(parse_iso_date(value))
    except ValueError:
        raise click.BadParameter(f"Invalid date format: {value}. Use YYYY-MM-DD.") from None
    if not can_navigate_to(day):
        raise click.BadParameter(f"{day} is in the future.")
    return day


def _validate_name(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    name = value.strip()
    if not name:
        raise click.BadParameter("Name cannot be empty.")
    return name


def _end_after(start: int, end: int) -> int:
    """Unwrap an end hour before the start to the next day."""
    if end == start:
        raise click.UsageError("End time must differ from start time")
    return end if end > start else end + HOURS_PER_DAY


def _edited_span(activity: Activity, start: int | None, end: int | None) -> tuple[int, int]:
    """Work out the span of an edited activity.

    With an end hour the span wraps past midnight as for a new activity.
    Without one the current end is kept and the new start must come before
    it; on an overnight span a start before the old start is read as the
    next morning.
    """
    if end is not None:
        new_start = activity.start_time if start is None else start
        return new_start, _end_after(new_start, end)
    if start is None:
        return activity.start_time, activity.end_time
    new_start = start
    if new_start < activity.start_time and new_start + HOURS_PER_DAY < activity.end_time:
        new_start += HOURS_PER_DAY
    if new_start >= activity.end_time:
        raise click.UsageError(
            f"Start time must be before the activity's end ({format_hour(activity.end_time)})"
        )
    return new_start, activity.end_time


db_option = click.option(
    "--db",
    type=click.Path(path_type=Path),
    default=DEFAULT_DB_PATH,
    envvar="DAYLEDGER_DB",
    help="Path to SQLite database",
)

date_option = click.option(
    "--date",
    "day",
    callback=_validate_date,
    help="Ledger day (YYYY-MM-DD, default: today)",
)


def _open_store(db: Path) -> SQLiteKeyValueStore:
    db.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteKeyValueStore.open(db)


def _echo_day(ledger: LedgerStore) -> None:
    stats = ledger.current_stats()
    day = ledger.current_date()
    header = format_day(day)
    if ledger.is_today():
        header += " (today)"
    click.echo(f"Day Ledger: {header}")
    click.echo()

    energy = round(stats.energy)
    line = f"Energy: {energy:>4} / {int(MAX_ENERGY)}  {make_progress_bar(stats.energy, MAX_ENERGY)}"
    if is_energy_below_goal(stats.energy):
        line += "  (below goal)"
    click.echo(line)
    click.echo(f"Meals:  {stats.meals:>4} / {DAILY_MEAL_GOAL}")
    click.echo(f"Snacks: {stats.snacks:>4} / {DAILY_SNACK_GOAL}")
    click.echo(f"Mood:   {stats.mood.value}")
    click.echo()

    activities = sorted(ledger.activities(), key=lambda a: (a.start_time, a.end_time))
    if not activities:
        click.echo("No activities logged for this day.")
        return

    click.echo("Activities:")
    for activity in activities:
        click.echo(
            f"  {activity.id[:7]}  {format_span(activity):<20} "
            f"{activity.name}  ({_describe(activity)})"
        )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose: bool) -> None:
    """Day Ledger CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("show")
@db_option
@date_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def show_command(db: Path, day: str | None, output_json: bool) -> None:
    """Show stats and activities for a day."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        if output_json:
            click.echo(json.dumps(dump_daily_data(ledger.daily_data()), indent=2))
            return
        _echo_day(ledger)


@main.command("blocks")
@db_option
@date_option
def blocks_command(db: Path, day: str | None) -> None:
    """Show the day hour by hour, starting at 5 AM."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        blocks = ledger.time_blocks()

    click.echo(f"Day Ledger: {format_day(ledger.current_date())}")
    click.echo()
    for hour in ledger_hours():
        activity = blocks[hour].activity
        label = activity.name if activity else "-"
        click.echo(f"  {format_hour(hour):>8}  {label}")


@main.command("add")
@click.argument("name", callback=_validate_name)
@click.option("--start", type=_HOUR, required=True, help="Start hour (0-23)")
@click.option(
    "--end",
    type=click.IntRange(0, HOURS_PER_DAY),
    required=True,
    help="End hour, exclusive (wraps past midnight if before --start)",
)
@click.option(
    "--exertion",
    type=click.Choice([level.value for level in ExertionLevel]),
    default=ExertionLevel.MODERATE.value,
    show_default=True,
)
@click.option(
    "--type",
    "activity_type",
    type=click.Choice([kind.value for kind in ActivityType]),
    default=ActivityType.EXERTING.value,
    show_default=True,
)
@db_option
@date_option
def add_command(
    name: str,
    start: int,
    end: int,
    exertion: str,
    activity_type: str,
    db: Path,
    day: str | None,
) -> None:
    """Log an activity. Overlapped activities are trimmed or split."""
    end = _end_after(start, end)
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        activity = ledger.add_activity(
            new_activity(
                name,
                start,
                end,
                ledger.current_date(),
                exertion_level=ExertionLevel(exertion),
                activity_type=ActivityType(activity_type),
            )
        )
        energy = ledger.current_stats().energy
    click.echo(f"Added {activity.id[:7]}: {name} ({format_span(activity)})")
    click.echo(f"Energy: {round(energy)}")


@main.command("sleep")
@click.argument("bedtime", type=_HOUR)
@click.argument("wake", type=_HOUR)
@db_option
@date_option
def sleep_command(bedtime: int, wake: int, db: Path, day: str | None) -> None:
    """Log sleep from BEDTIME to WAKE (hours, may cross midnight)."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        activity = ledger.add_activity(sleep_activity(bedtime, wake, ledger.current_date()))
        energy = ledger.current_stats().energy
    click.echo(f"Logged {activity.duration}h of sleep ({format_span(activity)})")
    click.echo(f"Energy: {round(energy)}")


def _log_food(food_type: FoodType, name: str, hour: int, db: Path, day: str | None) -> None:
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        ledger.add_activity(food_activity(name, hour, food_type, ledger.current_date()))
        stats = ledger.current_stats()
    click.echo(f"Logged {name} as {food_type.value} at {format_hour(hour)}")
    click.echo(f"Meals: {stats.meals}/{DAILY_MEAL_GOAL}  Snacks: {stats.snacks}/{DAILY_SNACK_GOAL}")


@main.command("meal")
@click.argument("name", callback=_validate_name)
@click.option("--hour", type=_HOUR, required=True, help="Hour eaten (0-23)")
@db_option
@date_option
def meal_command(name: str, hour: int, db: Path, day: str | None) -> None:
    """Log a meal."""
    _log_food(FoodType.MEAL, name, hour, db, day)


@main.command("snack")
@click.argument("name", callback=_validate_name)
@click.option("--hour", type=_HOUR, required=True, help="Hour eaten (0-23)")
@db_option
@date_option
def snack_command(name: str, hour: int, db: Path, day: str | None) -> None:
    """Log a snack."""
    _log_food(FoodType.SNACK, name, hour, db, day)


@main.command("work")
@click.argument("name", required=False, default="Work", callback=_validate_name)
@click.option("--start", type=_HOUR, required=True, help="Start hour (0-23)")
@click.option("--end", type=click.IntRange(1, HOURS_PER_DAY), required=True, help="End hour")
@db_option
@date_option
def work_command(name: str, start: int, end: int, db: Path, day: str | None) -> None:
    """Log a moderate work session."""
    hours = end - start
    if hours <= 0:
        raise click.UsageError("End time must be after start time")
    if hours > MAX_WORK_HOURS:
        raise click.UsageError(f"Work session cannot exceed {MAX_WORK_HOURS} hours")

    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        activity = ledger.add_activity(work_activity(name, start, end, ledger.current_date()))
        energy = ledger.current_stats().energy
    click.echo(f"Added {activity.id[:7]}: {name} ({format_span(activity)})")
    click.echo(f"Energy: {round(energy)}")


def _find_or_exit(ledger: LedgerStore, prefix: str) -> Activity:
    try:
        activity = ledger.find_activity(prefix)
    except ValueError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    if activity is None:
        click.echo(f"No activity matching '{prefix}' on {ledger.current_date()}", err=True)
        sys.exit(1)
    return activity


@main.command("edit")
@click.argument("activity_id")
@click.option("--name", callback=_validate_name, help="New name")
@click.option("--start", type=_HOUR, help="New start hour (0-23)")
@click.option("--end", type=click.IntRange(0, HOURS_PER_DAY), help="New end hour")
@click.option("--exertion", type=click.Choice([level.value for level in ExertionLevel]))
@click.option("--type", "activity_type", type=click.Choice([kind.value for kind in ActivityType]))
@db_option
@date_option
def edit_command(
    activity_id: str,
    name: str | None,
    start: int | None,
    end: int | None,
    exertion: str | None,
    activity_type: str | None,
    db: Path,
    day: str | None,
) -> None:
    """Edit an activity by ID prefix.

    Edits are applied in place; they do not trim neighbouring activities.
    """
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        activity = _find_or_exit(ledger, activity_id)

        new_start, new_end = _edited_span(activity, start, end)
        update: dict[str, object] = {"start_time": new_start, "end_time": new_end}
        if name is not None:
            update["name"] = name
        if exertion is not None:
            update["exertion_level"] = ExertionLevel(exertion)
        if activity_type is not None:
            update["type"] = ActivityType(activity_type)

        edited = activity.model_copy(update=update).normalized()
        ledger.update_activity(edited)
        energy = ledger.current_stats().energy
    click.echo(f"Updated {edited.id[:7]}: {edited.name} ({format_span(edited)})")
    click.echo(f"Energy: {round(energy)}")


@main.command("delete")
@click.argument("activity_id")
@click.option("--hour", type=_HOUR, help="Delete only this hour of the activity")
@db_option
@date_option
def delete_command(activity_id: str, hour: int | None, db: Path, day: str | None) -> None:
    """Delete an activity (or one hour of it) by ID prefix."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        activity = _find_or_exit(ledger, activity_id)

        if hour is None:
            ledger.delete_activity(activity.id)
            click.echo(f"Deleted {activity.id[:7]}: {activity.name}")
            return

        if not ledger.delete_activity_hour(activity.id, hour):
            click.echo(
                f"{activity.name} does not cover {format_hour(hour)}",
                err=True,
            )
            sys.exit(1)
        click.echo(f"Deleted {format_hour(hour)} from {activity.name}")


@main.command("mood")
@click.argument("mood", type=click.Choice([state.value for state in MoodState]))
@db_option
@date_option
def mood_command(mood: str, db: Path, day: str | None) -> None:
    """Set the mood for a day."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        ledger.set_mood(MoodState(mood))
    click.echo(f"Mood set to {mood}")


@main.command("reset")
@db_option
@date_option
@click.confirmation_option(prompt="Clear all activities for this day?")
def reset_command(db: Path, day: str | None) -> None:
    """Clear all activities and stats for a day."""
    with _open_store(db) as kv:
        ledger = LedgerStore.open(kv, date=day)
        ledger.reset_day(ledger.current_date())
    click.echo(f"Cleared {ledger.current_date()}")


@main.command("migrate")
@db_option
def migrate_command(db: Path) -> None:
    """Upgrade stored days to the current schema.

    Runs automatically before every other command; safe to repeat.
    """
    if not db.exists():
        click.echo("No database found", err=True)
        sys.exit(1)

    with SQLiteKeyValueStore.open(db) as kv:
        migrated = migrate_daily_data(kv)
    click.echo(f"Migrated {migrated} days")


@main.command("today")
def today_command() -> None:
    """Print the current ledger day (days start at 5 AM)."""
    click.echo(ledger_today())


if __name__ == "__main__":
    main()
