"""Upgrade stored days from the food-points schema to meals/snacks counts."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Union

from pydantic import Discriminator, Tag, TypeAdapter, ValidationError

from dayledger.models import DailyData, LegacyDailyData
from dayledger.stats import derive_stats
from dayledger.storage import (
    SCHEMA_VERSION,
    KeyValueStore,
    dump_daily_data,
    get_schema_version,
    read_daily_records,
    set_schema_version,
    write_daily_records,
)

logger = logging.getLogger(__name__)


def _record_version(raw: Any) -> str:
    if isinstance(raw, dict):
        stats = raw.get("stats")
    else:
        stats = getattr(raw, "stats", None)
    if isinstance(stats, dict) and "food" in stats and "meals" not in stats:
        return "legacy"
    return "current"


StoredRecord = Annotated[
    Union[
        Annotated[LegacyDailyData, Tag("legacy")],
        Annotated[DailyData, Tag("current")],
    ],
    Discriminator(_record_version),
]

_stored_record = TypeAdapter(StoredRecord)


def is_legacy_record(raw: Any) -> bool:
    """Check for a food-points record (``stats.food`` without ``stats.meals``)."""
    return isinstance(raw, dict) and _record_version(raw) == "legacy"


def migrate_record(raw: dict[str, Any], day: str) -> DailyData:
    """Convert one stored record of any schema version to the current one.

    Legacy records have every stat re-derived from their activities; the old
    food score is dropped. Activities are kept as they are.

    Args:
        raw: Stored record as decoded from JSON.
        day: Date key the record was stored under (used if it has no date).

    Returns:
        Record in the current schema.

    Raises:
        ValidationError: If the record cannot be read as any known version.
    """
    data = dict(raw)
    data["date"] = raw.get("date") or day
    record = _stored_record.validate_python(data)
    if isinstance(record, LegacyDailyData):
        return DailyData(
            date=record.date,
            stats=derive_stats(record.activities, record.stats.mood),
            activities=record.activities,
        )
    return record


def migrate_daily_data(kv: KeyValueStore) -> int:
    """Run the one-shot schema migration over all stored days.

    Safe to call on every startup: days already in the current schema are
    left untouched and nothing is written when no day needs upgrading.
    Records that cannot be read are kept as they are.

    Returns:
        Number of days migrated.
    """
    records = read_daily_records(kv)
    migrated = 0

    for day, raw in records.items():
        if not is_legacy_record(raw):
            continue
        try:
            record = migrate_record(raw, day)
        except ValidationError as e:
            logger.warning("Skipping unreadable legacy record for %s: %s", day, e)
            continue
        records[day] = dump_daily_data(record)
        migrated += 1
        logger.info(
            "Migrated data for %s: %s food points -> %d meals, %d snacks",
            day,
            raw["stats"].get("food"),
            record.stats.meals,
            record.stats.snacks,
        )

    if migrated:
        write_daily_records(kv, records)
        logger.info("Migration complete: %d day(s) upgraded", migrated)

    if get_schema_version(kv) != SCHEMA_VERSION:
        set_schema_version(kv)

    return migrated
