# src/rms_reminders/reminders/feed.py

"""
Feed builder: persisted notifications + live overdue/upcoming alerts, merged into
one dismissal-filtered list ordered by (sort priority, newest first).
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from .models import AlertKind, DerivedAlert, FeedItem, FeedItemType, PersistedNotification, SourceType

NOTIFICATION_PREFIX = "notification-"
DISMISSABLE_PREFIXES = ("reminder-", "warning-")

PRIORITY_NOTIFICATION = 1
PRIORITY_OVERDUE = 2
PRIORITY_UPCOMING = 3

BADGE_CAP = 99


def notification_feed_id(notification_id: str) -> str:
    return f"{NOTIFICATION_PREFIX}{notification_id}"


def _days_text(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def notification_item(n: PersistedNotification) -> FeedItem:
    return FeedItem(
        id=notification_feed_id(n.id),
        item_type=FeedItemType.NOTIFICATION,
        title=n.title,
        message=n.message,
        timestamp=n.created_at,
        sort_priority=PRIORITY_NOTIFICATION,
        is_read=n.is_read,
        priority=n.priority or "normal",
    )


def alert_item(alert: DerivedAlert) -> FeedItem:
    is_task = alert.source_type == SourceType.TASK
    label = "Task" if is_task else "Project"

    if alert.kind == AlertKind.OVERDUE:
        title = f"Overdue {label}"
        if is_task:
            message = f'Task "{alert.title}" is overdue'
        else:
            message = f'Project "{alert.title}" deadline has passed'
        item_type = FeedItemType.REMINDER
        sort_priority = PRIORITY_OVERDUE
    else:
        title = f"{label} Deadline Approaching"
        message = f'{label} "{alert.title}" is due in {_days_text(alert.days_left or 0)}'
        item_type = FeedItemType.WARNING
        sort_priority = PRIORITY_UPCOMING

    return FeedItem(
        id=alert.identifier,
        item_type=item_type,
        title=title,
        message=message,
        timestamp=alert.due_at,
        sort_priority=sort_priority,
        source_type=alert.source_type,
        source_id=alert.source_id,
    )


def build_feed(
    notifications: Iterable[PersistedNotification],
    overdue: Iterable[DerivedAlert],
    upcoming: Iterable[DerivedAlert],
    dismissed: Collection[str],
) -> list[FeedItem]:
    items = [notification_item(n) for n in notifications]
    items += [alert_item(a) for a in overdue]
    items += [alert_item(a) for a in upcoming]

    items = [it for it in items if it.id not in dismissed]

    # Two stable passes: newest first, then by priority.
    items.sort(key=lambda it: it.timestamp, reverse=True)
    items.sort(key=lambda it: it.sort_priority)
    return items


def _not_dismissed(alerts: Iterable[DerivedAlert], dismissed: Collection[str]) -> int:
    return sum(1 for a in alerts if a.identifier not in dismissed)


def badge_count(
    notifications: Iterable[PersistedNotification],
    overdue: Sequence[DerivedAlert],
    upcoming: Sequence[DerivedAlert],
    dismissed: Collection[str],
) -> int:
    unread = sum(1 for n in notifications if not n.is_read)
    return unread + _not_dismissed(overdue, dismissed) + _not_dismissed(upcoming, dismissed)


def format_badge(count: int) -> str | None:
    """Badge text; None means the badge is hidden."""
    if count <= 0:
        return None
    return f"{BADGE_CAP}+" if count > BADGE_CAP else str(count)


def is_dismissable(item_id: str) -> bool:
    return item_id.startswith(DISMISSABLE_PREFIXES)
