"""Key-value persistence for ledger days.

All days live as one JSON object ``{date: DailyData}`` under
``DAILY_DATA_KEY``; the schema version string sits under
``SCHEMA_VERSION_KEY``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from dayledger.models import Activity, DailyData

DAILY_DATA_KEY = "dayledger_daily_data"
SCHEMA_VERSION_KEY = "dayledger_app_version"
SCHEMA_VERSION = "1.0.0"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL
);
"""

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Opaque byte store addressed by key."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed key-value store."""

    def __init__(self, data: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(data or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteKeyValueStore:
    """SQLite-backed key-value store.

    Not thread-safe. Each thread should have its own store instance.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._init_schema()

    def __enter__(self) -> "SQLiteKeyValueStore":
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _init_schema(self) -> None:
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    @classmethod
    def open(cls, path: Path) -> SQLiteKeyValueStore:
        """Open or create a database at the given path."""
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return cls(conn)

    @classmethod
    def open_in_memory(cls) -> SQLiteKeyValueStore:
        """Create an in-memory database for testing."""
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        return cls(conn)

    def get(self, key: str) -> bytes | None:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return bytes(row["value"])

    def set(self, key: str, value: bytes) -> None:
        self._conn.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        self._conn.commit()

    def remove(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()


def read_daily_records(kv: KeyValueStore) -> dict[str, Any]:
    """Load the raw per-day map.

    A missing, unparseable or non-object blob reads as no data.
    """
    blob = kv.get(DAILY_DATA_KEY)
    if blob is None:
        return {}
    try:
        parsed: Any = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Ignoring malformed daily data: %s", e)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Ignoring daily data of type %s", type(parsed).__name__)
        return {}
    return parsed


def write_daily_records(kv: KeyValueStore, records: dict[str, Any]) -> None:
    kv.set(DAILY_DATA_KEY, json.dumps(records).encode("utf-8"))


def dump_daily_data(daily: DailyData) -> dict[str, Any]:
    return daily.model_dump(mode="json", by_alias=True, exclude_none=True)


def _valid_activities(items: list[Any], day: str) -> list[Activity]:
    activities = []
    for index, item in enumerate(items):
        try:
            activities.append(Activity.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping invalid activity %d for %s: %s", index, day, e)
    return activities


def load_daily_data(kv: KeyValueStore, day: str) -> DailyData | None:
    """Load one day's record, or None if absent or malformed.

    Activities are validated one at a time; an invalid activity is dropped
    with a warning and the rest of the day still loads. The stored stats are
    returned as found; callers recompute them.
    """
    raw = read_daily_records(kv).get(day)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed record for %s", day)
        return None
    data = dict(raw)
    data["date"] = raw.get("date") or day
    activities = data.get("activities", [])
    if not isinstance(activities, list):
        logger.warning("Ignoring record for %s: activities is not a list", day)
        return None
    data["activities"] = _valid_activities(activities, day)
    try:
        return DailyData.model_validate(data)
    except ValidationError as e:
        logger.warning("Ignoring invalid record for %s: %s", day, e)
        return None


def save_daily_data(kv: KeyValueStore, daily: DailyData) -> None:
    """Write one day's record back into the full map (read-modify-write)."""
    records = read_daily_records(kv)
    records[daily.date] = dump_daily_data(daily)
    write_daily_records(kv, records)


def get_schema_version(kv: KeyValueStore) -> str | None:
    blob = kv.get(SCHEMA_VERSION_KEY)
    if blob is None:
        return None
    try:
        value = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return value if isinstance(value, str) else None


def set_schema_version(kv: KeyValueStore, version: str = SCHEMA_VERSION) -> None:
    kv.set(SCHEMA_VERSION_KEY, json.dumps(version).encode("utf-8"))


def clear_all_data(kv: KeyValueStore) -> None:
    """Remove every ledger key from the store."""
    for key in (DAILY_DATA_KEY, SCHEMA_VERSION_KEY):
        kv.remove(key)
