"""Per-check event logs: the pass/fail history the threshold engine reads.

A log only exists while a check is "in alert": every event appended is
either a failure counting toward a threshold or a post-failure success
counting toward a clear. Resetting a log returns the check to steady state.

Three backends share one contract:

  - FileEventStore: one JSON file per check (the default)
  - SqliteEventStore: a single SQLite table
  - MemoryEventStore: in-process, for tests and dry runs

At most one evaluator may touch a given check key at a time; none of the
backends lock.
"""
import abc
import json
import logging
import os
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from alerts.exceptions import StorageError
from models.alerts import AlertEvent

logger = logging.getLogger("alertinator.store")


def log_filename(check_key):
    """Check key with non-alphanumerics stripped, lower-cased."""
    name = re.sub(r"[^A-Za-z0-9]", "", check_key).lower()
    if not name:
        raise StorageError(f"Check key {check_key!r} has no usable characters", check_key)
    return f"{name}.json"


class EventStore(abc.ABC):
    @abc.abstractmethod
    def append(self, check_key: str, status: bool, timestamp: datetime) -> None:
        """Add one event to the end of the log for ``check_key``."""

    @abc.abstractmethod
    def read_all(self, check_key: str) -> list:
        """All events in insertion order; empty list if no log exists."""

    @abc.abstractmethod
    def reset(self, check_key: str) -> None:
        """Delete the log. Missing logs are a no-op."""

    @abc.abstractmethod
    def keys(self) -> list:
        """Check keys that currently have a non-empty log."""

    def safe_reset(self, check_key: str) -> bool:
        """Reset that never raises. Returns False if the reset failed."""
        try:
            self.reset(check_key)
            return True
        except StorageError as e:
            logger.warning(f"Reset of {check_key} failed: {e}")
            return False

    def has_failures(self, check_key: str) -> bool:
        return len(self.read_all(check_key)) > 0


class FileEventStore(EventStore):
    """JSON array of ``{ts, status, check}`` records per check file."""

    def __init__(self, directory="data/events"):
        self.directory = Path(directory)

    def path_for(self, check_key):
        return self.directory / log_filename(check_key)

    def _load(self, check_key):
        path = self.path_for(check_key)
        if not path.exists():
            return []
        try:
            with open(path) as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read event log {path}: {e}", check_key) from e
        if not isinstance(records, list):
            raise StorageError(f"Event log {path} is not a list", check_key)
        return records

    def append(self, check_key, status, timestamp):
        records = self._load(check_key)
        records.append(AlertEvent(timestamp, bool(status)).to_record(check_key))
        path = self.path_for(check_key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(records, f)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Cannot write event log {path}: {e}", check_key) from e
        logger.debug(f"{check_key}: appended {'success' if status else 'failure'} ({len(records)} events)")

    def read_all(self, check_key):
        records = self._load(check_key)
        try:
            return [AlertEvent.from_record(r) for r in records]
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise StorageError(
                f"Malformed record in event log {self.path_for(check_key)}: {e!r}", check_key
            ) from e

    def reset(self, check_key):
        path = self.path_for(check_key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Cannot delete event log {path}: {e}", check_key) from e
        logger.debug(f"{check_key}: event log reset")

    def keys(self):
        if not self.directory.is_dir():
            return []
        keys = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                with open(path) as f:
                    records = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable event log {path}: {e}")
                continue
            if not isinstance(records, list):
                logger.warning(f"Skipping event log {path}: not a list")
                continue
            if records:
                first = records[0]
                keys.append(first.get("check", path.stem) if isinstance(first, dict) else path.stem)
        return keys


class SqliteEventStore(EventStore):
    def __init__(self, db_path="data/events.db"):
        self.db_path = db_path
        self.conn = None

    def connect(self):
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()
        return self

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *args):
        self.close()

    def _create_tables(self):
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS alert_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                check_key TEXT NOT NULL,
                ts INTEGER NOT NULL,
                status INTEGER NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_check
                ON alert_events(check_key, id);
        """)
        self.conn.commit()

    def _conn(self, check_key):
        if self.conn is None:
            raise StorageError("Event database is not connected", check_key)
        return self.conn

    def append(self, check_key, status, timestamp):
        conn = self._conn(check_key)
        try:
            conn.execute(
                "INSERT INTO alert_events (check_key, ts, status) VALUES (?, ?, ?)",
                (check_key, int(timestamp.timestamp()), 1 if status else 0),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot append event for {check_key}: {e}", check_key) from e

    def read_all(self, check_key):
        conn = self._conn(check_key)
        try:
            rows = conn.execute(
                "SELECT ts, status FROM alert_events WHERE check_key = ? ORDER BY id",
                (check_key,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read events for {check_key}: {e}", check_key) from e
        return [
            AlertEvent(datetime.fromtimestamp(r["ts"], tz=timezone.utc), bool(r["status"]))
            for r in rows
        ]

    def reset(self, check_key):
        conn = self._conn(check_key)
        try:
            conn.execute("DELETE FROM alert_events WHERE check_key = ?", (check_key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot reset events for {check_key}: {e}", check_key) from e

    def keys(self):
        conn = self._conn(None)
        rows = conn.execute(
            "SELECT check_key FROM alert_events GROUP BY check_key ORDER BY MIN(id)"
        ).fetchall()
        return [r["check_key"] for r in rows]


class MemoryEventStore(EventStore):
    def __init__(self):
        self._logs = {}

    def append(self, check_key, status, timestamp):
        self._logs.setdefault(check_key, []).append(AlertEvent(timestamp, bool(status)))

    def read_all(self, check_key):
        return list(self._logs.get(check_key, []))

    def reset(self, check_key):
        self._logs.pop(check_key, None)

    def keys(self):
        return [k for k, events in self._logs.items() if events]
