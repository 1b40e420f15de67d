"""Tests for the event store backends."""
import json
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from alerts.exceptions import StorageError
from models.event_store import FileEventStore, MemoryEventStore, SqliteEventStore, log_filename

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
KEY = "AlertinatorTest::thresholdChecker"


@pytest.fixture
def sqlite_store(tmp_path):
    with SqliteEventStore(str(tmp_path / "events.db")) as s:
        yield s


@pytest.fixture(params=["file", "sqlite", "memory"])
def any_store(request, tmp_path):
    if request.param == "file":
        yield FileEventStore(tmp_path / "events")
    elif request.param == "sqlite":
        with SqliteEventStore(str(tmp_path / "events.db")) as s:
            yield s
    else:
        yield MemoryEventStore()


# ── Contract shared by every backend ───────────────────

def test_missing_log_reads_empty(any_store):
    assert any_store.read_all(KEY) == []
    assert any_store.has_failures(KEY) is False


def test_append_preserves_order(any_store):
    any_store.append(KEY, False, T0)
    any_store.append(KEY, False, T0 + timedelta(minutes=1))
    any_store.append(KEY, True, T0 + timedelta(minutes=2))

    events = any_store.read_all(KEY)
    assert [e.status for e in events] == [False, False, True]
    assert events[0].timestamp == T0
    assert events[2].timestamp == T0 + timedelta(minutes=2)
    assert any_store.has_failures(KEY) is True


def test_reset_then_read_is_empty_and_idempotent(any_store):
    any_store.append(KEY, False, T0)
    any_store.reset(KEY)
    assert any_store.read_all(KEY) == []
    any_store.reset(KEY)
    assert any_store.safe_reset(KEY) is True
    assert any_store.read_all(KEY) == []


def test_logs_are_per_key(any_store):
    any_store.append("checks.a", False, T0)
    any_store.append("checks.b", False, T0)
    any_store.reset("checks.a")
    assert any_store.read_all("checks.a") == []
    assert len(any_store.read_all("checks.b")) == 1
    assert any_store.keys() == ["checks.b"]


# ── File backend ───────────────────────────────────────

def test_log_filename_strips_and_lowercases():
    assert log_filename(KEY) == "alertinatortestthresholdchecker.json"
    assert log_filename("checks.web.Homepage") == "checkswebhomepage.json"


def test_log_filename_rejects_empty():
    with pytest.raises(StorageError):
        log_filename("::..")


def test_file_format(tmp_path):
    store = FileEventStore(tmp_path)
    store.append(KEY, False, T0)
    store.append(KEY, True, T0 + timedelta(seconds=30))

    with open(tmp_path / "alertinatortestthresholdchecker.json") as f:
        records = json.load(f)
    assert records == [
        {"ts": int(T0.timestamp()), "status": 0, "check": KEY},
        {"ts": int(T0.timestamp()) + 30, "status": 1, "check": KEY},
    ]


def test_reset_removes_file(tmp_path):
    store = FileEventStore(tmp_path)
    store.append(KEY, False, T0)
    store.reset(KEY)
    assert not store.path_for(KEY).exists()


def test_corrupt_file_raises_storage_error(tmp_path):
    store = FileEventStore(tmp_path)
    store.path_for(KEY).write_text("{not json")
    with pytest.raises(StorageError):
        store.read_all(KEY)


@pytest.mark.parametrize("content", [
    '[{"ts": 1}]',
    '[{"status": 0}]',
    '[{"ts": "yesterday", "status": 0}]',
    '[42]',
])
def test_malformed_record_raises_storage_error(tmp_path, content):
    store = FileEventStore(tmp_path)
    store.path_for(KEY).write_text(content)
    with pytest.raises(StorageError, match="Malformed record"):
        store.read_all(KEY)


def test_keys_skip_non_list_logs(tmp_path):
    store = FileEventStore(tmp_path)
    (tmp_path / "stray.json").write_text('{"check": "checks.stray"}')
    (tmp_path / "odd.json").write_text("[42]")
    store.append("checks.ok", False, T0)
    assert store.keys() == ["checks.ok", "odd"]


def test_write_failure_raises_storage_error(tmp_path):
    store = FileEventStore(tmp_path)
    with patch("models.event_store.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(StorageError, match="disk full"):
            store.append(KEY, False, T0)
    assert store.read_all(KEY) == []


def test_delete_failure_raises_but_safe_reset_does_not(tmp_path):
    store = FileEventStore(tmp_path)
    store.append(KEY, False, T0)
    with patch("pathlib.Path.unlink", side_effect=PermissionError("read-only")):
        with pytest.raises(StorageError):
            store.reset(KEY)
        assert store.safe_reset(KEY) is False
    assert len(store.read_all(KEY)) == 1


def test_keys_skip_missing_directory(tmp_path):
    store = FileEventStore(tmp_path / "nope")
    assert store.keys() == []


# ── SQLite backend ─────────────────────────────────────

def test_sqlite_table_creation(sqlite_store):
    tables = sqlite_store.conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    ).fetchall()
    assert "alert_events" in {t["name"] for t in tables}


def test_sqlite_unconnected_raises(tmp_path):
    store = SqliteEventStore(str(tmp_path / "events.db"))
    with pytest.raises(StorageError):
        store.append(KEY, False, T0)
