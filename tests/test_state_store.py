# tests/test_state_store.py

from __future__ import annotations

import json
import os
import stat
from datetime import datetime, timedelta
from pathlib import Path

from rms_reminders.reminders.models import EngineState, PersistedNotification
from rms_reminders.storage.state_store import JsonStateStore


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = JsonStateStore(tmp_path / "nested" / "state.json")
    state = store.load()
    assert state.sent_overdue == {} and state.notifications == []


def test_save_then_load_keeps_everything(tmp_path: Path, now: datetime) -> None:
    store = JsonStateStore(tmp_path / "state.json")
    state = EngineState(
        sent_overdue={"reminder-overdue-task-7": now},
        sent_upcoming={"reminder-upcoming-project-3": now - timedelta(hours=1)},
        dismissed={"reminder-overdue-task-1": now},
        quota_stamps={"email_sent_a@x.io_2024-06-12": now},
        notifications=[
            PersistedNotification(id="n1", title="Hi", message="m", created_at=now, priority="high"),
        ],
    )

    assert store.save(state) is True
    loaded = store.load()

    assert loaded.sent_overdue == state.sent_overdue
    assert loaded.sent_upcoming == state.sent_upcoming
    assert loaded.dismissed == state.dismissed
    assert loaded.quota_stamps == state.quota_stamps
    assert loaded.notifications[0].priority == "high"
    assert not (tmp_path / "state.tmp").exists()


def test_file_layout_uses_camel_case_keys(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "state.json"
    JsonStateStore(path).save(EngineState(sent_overdue={"reminder-overdue-task-7": now}))

    data = json.loads(path.read_text("utf-8"))
    assert set(data) == {"sentLog", "dismissed", "quotaStamps", "notifications"}
    assert list(data["sentLog"]["overdue"]) == ["reminder-overdue-task-7"]


def test_saved_file_is_private(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    JsonStateStore(path).save(EngineState())
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_corrupt_or_wrong_shape_loads_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = JsonStateStore(path)

    path.write_text("{not json", "utf-8")
    assert store.load().sent_overdue == {}

    path.write_text("[1, 2, 3]", "utf-8")
    assert store.load().dismissed == {}


def test_legacy_identifier_lists_are_accepted(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "sentLog": {"overdue": ["reminder-overdue-task-1"], "upcoming": []},
                "dismissed": ["reminder-upcoming-task-2"],
                "notifications": [{"title": "no id"}, {"id": "n1", "title": "ok", "isRead": True}],
            }
        ),
        "utf-8",
    )

    state = JsonStateStore(path).load()

    assert list(state.sent_overdue) == ["reminder-overdue-task-1"]
    assert list(state.dismissed) == ["reminder-upcoming-task-2"]
    assert [n.id for n in state.notifications] == ["n1"]
    assert state.notifications[0].is_read


def test_save_failure_returns_false(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", "utf-8")
    store = JsonStateStore(tmp_path / "state.json")
    # Point the store under a regular file so mkdir/write fails.
    store._path = blocker / "state.json"

    assert store.save(EngineState()) is False


def test_missing_timestamps_are_stamped_once_and_written_back(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "sentLog": {"overdue": ["reminder-overdue-task-1"], "upcoming": {}},
                "notifications": [{"id": "n1", "title": "no date"}],
            }
        ),
        "utf-8",
    )
    clock = {"now": now}
    store = JsonStateStore(path, clock=lambda: clock["now"])

    first = store.load()
    clock["now"] = now + timedelta(hours=3)
    second = store.load()

    assert first.sent_overdue == {"reminder-overdue-task-1": now}
    assert second.sent_overdue == first.sent_overdue
    assert second.notifications[0].created_at == now
    data = json.loads(path.read_text("utf-8"))
    assert data["sentLog"]["overdue"] == {"reminder-overdue-task-1": now.isoformat()}
