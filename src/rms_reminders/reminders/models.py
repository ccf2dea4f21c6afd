# src/rms_reminders/reminders/models.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

TASK_TERMINAL_STATUSES = frozenset({"completed", "cancelled"})
PROJECT_TERMINAL_STATUSES = frozenset({"completed"})


class AlertKind(StrEnum):
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


class SourceType(StrEnum):
    TASK = "task"
    PROJECT = "project"


class FeedItemType(StrEnum):
    NOTIFICATION = "notification"
    REMINDER = "reminder"  # overdue
    WARNING = "warning"  # upcoming


class Channel(StrEnum):
    EMAIL = "email"
    SMS = "sms"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(raw: Any) -> datetime | None:
    """
    Parse an ISO-8601 string (or datetime) into an aware datetime.

    Naive values are treated as UTC, the same way the web app parses
    date-only strings ("2024-05-01" -> midnight UTC).
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = datetime.fromisoformat(str(raw).strip())
        except ValueError:
            logger.warning("Unparseable timestamp %r; ignoring", raw)
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    status: str
    due_date: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return (self.status or "").strip().lower() in TASK_TERMINAL_STATUSES


@dataclass(slots=True, frozen=True)
class Project:
    id: str
    name: str
    status: str
    deadline: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        # Only "completed" ends project reminders; case variants ("Completed") exist in stored data.
        return (self.status or "").strip().lower() in PROJECT_TERMINAL_STATUSES


@dataclass(slots=True, frozen=True)
class NotificationPrefs:
    email: bool = False
    sms: bool = False

    @property
    def any_enabled(self) -> bool:
        return self.email or self.sms


@dataclass(slots=True, frozen=True)
class User:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    sms_carrier: str | None = None
    notifications: NotificationPrefs = field(default_factory=NotificationPrefs)


@dataclass(slots=True, frozen=True)
class DerivedAlert:
    """
    One overdue/upcoming condition for one task or project.

    Recomputed on every scan and never persisted; only `identifier` is stored
    (in the sent log or the dismissed set).
    """

    kind: AlertKind
    source_type: SourceType
    source_id: str
    title: str
    due_at: datetime
    days_left: int | None = None

    @property
    def identifier(self) -> str:
        return alert_identifier(self.kind, self.source_type, self.source_id)


def alert_identifier(kind: AlertKind | str, source_type: SourceType | str, source_id: str) -> str:
    return f"reminder-{AlertKind(kind).value}-{SourceType(source_type).value}-{source_id}"


@dataclass(slots=True)
class PersistedNotification:
    id: str
    title: str
    message: str
    created_at: datetime
    is_read: bool = False
    priority: str = "normal"  # low, normal, medium, high
    type: str = "info"
    read_at: datetime | None = None

    @classmethod
    def new(cls, title: str, message: str, *, priority: str = "normal", type: str = "info") -> PersistedNotification:
        return cls(
            id=f"notif_{uuid.uuid4().hex[:12]}",
            title=title,
            message=message,
            created_at=utcnow(),
            priority=priority,
            type=type,
        )

    def mark_read(self, when: datetime | None = None) -> bool:
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = when or utcnow()
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "createdAt": format_timestamp(self.created_at),
            "isRead": self.is_read,
            "priority": self.priority,
            "type": self.type,
            "readAt": format_timestamp(self.read_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, fallback: datetime | None = None) -> PersistedNotification | None:
        """`fallback` stands in for a missing or unparseable createdAt."""
        nid = str(data.get("id") or "").strip()
        if not nid:
            return None
        return cls(
            id=nid,
            title=str(data.get("title") or ""),
            message=str(data.get("message") or ""),
            created_at=parse_timestamp(data.get("createdAt")) or fallback or utcnow(),
            is_read=bool(data.get("isRead", False)),
            priority=str(data.get("priority") or "normal"),
            type=str(data.get("type") or "info"),
            read_at=parse_timestamp(data.get("readAt")),
        )


@dataclass(slots=True, frozen=True)
class FeedItem:
    id: str
    item_type: FeedItemType
    title: str
    message: str
    timestamp: datetime
    sort_priority: int
    is_read: bool = False
    priority: str = "high"
    source_type: SourceType | None = None
    source_id: str | None = None


@dataclass(slots=True)
class EngineState:
    """
    Everything the engine persists between runs.

    The maps go identifier/key -> time the entry was added, so that old
    entries can be evicted after a retention window.
    """

    sent_overdue: dict[str, datetime] = field(default_factory=dict)
    sent_upcoming: dict[str, datetime] = field(default_factory=dict)
    dismissed: dict[str, datetime] = field(default_factory=dict)
    quota_stamps: dict[str, datetime] = field(default_factory=dict)
    notifications: list[PersistedNotification] = field(default_factory=list)

    def sent_log(self, kind: AlertKind) -> dict[str, datetime]:
        return self.sent_overdue if kind == AlertKind.OVERDUE else self.sent_upcoming

    def find_notification(self, notification_id: str) -> PersistedNotification | None:
        for n in self.notifications:
            if n.id == notification_id:
                return n
        return None

    def to_dict(self) -> dict[str, Any]:
        def stamps(m: dict[str, datetime]) -> dict[str, str | None]:
            return {k: format_timestamp(v) for k, v in m.items()}

        return {
            "sentLog": {
                "overdue": stamps(self.sent_overdue),
                "upcoming": stamps(self.sent_upcoming),
            },
            "dismissed": stamps(self.dismissed),
            "quotaStamps": stamps(self.quota_stamps),
            "notifications": [n.to_dict() for n in self.notifications],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, now: datetime | None = None) -> EngineState:
        return cls.parse(data, now=now)[0]

    @classmethod
    def parse(cls, data: dict[str, Any], *, now: datetime | None = None) -> tuple[EngineState, bool]:
        """
        Build state from its JSON form.

        Entries without a usable timestamp (including older files that stored plain
        identifier lists) get `now`. The flag is True when that happened, so the
        caller can persist the filled-in values once instead of re-stamping on
        every load.
        """
        fallback = now or utcnow()
        filled = 0

        def stamp(v: Any) -> datetime:
            nonlocal filled
            ts = parse_timestamp(v)
            if ts is None:
                filled += 1
                return fallback
            return ts

        def stamps(raw: Any) -> dict[str, datetime]:
            if isinstance(raw, list):
                return {str(k): stamp(None) for k in raw if k}
            if not isinstance(raw, dict):
                return {}
            return {str(k): stamp(v) for k, v in raw.items() if k}

        sent = data.get("sentLog") or {}
        if not isinstance(sent, dict):
            sent = {}

        notifications: list[PersistedNotification] = []
        for raw in data.get("notifications") or []:
            if not isinstance(raw, dict):
                continue
            n = PersistedNotification.from_dict(raw, fallback=fallback)
            if n is None:
                continue
            if parse_timestamp(raw.get("createdAt")) is None:
                filled += 1
            notifications.append(n)

        state = cls(
            sent_overdue=stamps(sent.get("overdue")),
            sent_upcoming=stamps(sent.get("upcoming")),
            dismissed=stamps(data.get("dismissed")),
            quota_stamps=stamps(data.get("quotaStamps")),
            notifications=notifications,
        )
        return state, filled > 0


@dataclass(slots=True, frozen=True)
class ChannelMessage:
    channel: Channel
    bucket: AlertKind
    address: str
    subject: str
    body: str


@dataclass(slots=True, frozen=True)
class SendResult:
    channel: Channel
    bucket: AlertKind
    address: str
    attempted: bool
    succeeded: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class DispatchReport:
    results: tuple[SendResult, ...] = ()

    @property
    def attempted(self) -> int:
        return sum(1 for r in self.results if r.attempted)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    def attempts_for(self, channel: Channel) -> int:
        return sum(1 for r in self.results if r.attempted and r.channel == channel)


@dataclass(slots=True, frozen=True)
class ScanCycleReport:
    """What one scan cycle did; `skipped` names the reason when nothing ran."""

    new_overdue: tuple[str, ...] = ()
    new_upcoming: tuple[str, ...] = ()
    email_allowed: bool = False
    sms_allowed: bool = False
    dispatch: DispatchReport = field(default_factory=DispatchReport)
    saved: bool = False
    skipped: str | None = None
