# src/rms_reminders/storage/data_source.py

"""
Read-only data source over the RMS JSON snapshot.

The web app stores its collections as one JSON document with camelCase keys:
{"tasks": [...], "projects": [...], "users": [...], "currentUser": {...}}.
The file is re-read on every call so edits are picked up by the next scan.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..reminders.models import NotificationPrefs, Project, Task, User, parse_timestamp

logger = logging.getLogger(__name__)


def task_from_dict(raw: dict[str, Any]) -> Task | None:
    tid = raw.get("id")
    if tid is None or str(tid).strip() == "":
        return None
    return Task(
        id=str(tid),
        title=str(raw.get("title") or ""),
        status=str(raw.get("status") or "todo"),
        due_date=parse_timestamp(raw.get("dueDate")),
    )


def project_from_dict(raw: dict[str, Any]) -> Project | None:
    pid = raw.get("id")
    if pid is None or str(pid).strip() == "":
        return None
    return Project(
        id=str(pid),
        name=str(raw.get("name") or ""),
        status=str(raw.get("status") or "planning"),
        deadline=parse_timestamp(raw.get("deadline")),
    )


def user_from_dict(raw: dict[str, Any]) -> User | None:
    uid = raw.get("id")
    if uid is None or str(uid).strip() == "":
        return None
    prefs = raw.get("notifications")
    if not isinstance(prefs, dict):
        prefs = {}
    return User(
        id=str(uid),
        name=str(raw.get("name") or ""),
        email=str(raw.get("email") or ""),
        phone=str(raw.get("phone") or ""),
        sms_carrier=raw.get("smsCarrier") or None,
        notifications=NotificationPrefs(
            email=bool(prefs.get("email", False)),
            sms=bool(prefs.get("sms", False)),
        ),
    )


class JsonDataSource:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            logger.debug("Data snapshot %s does not exist yet", self._path)
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to read data snapshot %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _items(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
        raw = data.get(key)
        if not isinstance(raw, list):
            return []
        return [r for r in raw if isinstance(r, dict)]

    def list_tasks(self) -> list[Task]:
        out = (task_from_dict(r) for r in self._items(self._read(), "tasks"))
        return [t for t in out if t is not None]

    def list_projects(self) -> list[Project]:
        out = (project_from_dict(r) for r in self._items(self._read(), "projects"))
        return [p for p in out if p is not None]

    def current_user(self) -> User | None:
        data = self._read()
        raw = data.get("currentUser")
        if isinstance(raw, dict):
            return user_from_dict(raw)

        # The web app falls back to the first registered user.
        users = self._items(data, "users")
        return user_from_dict(users[0]) if users else None
