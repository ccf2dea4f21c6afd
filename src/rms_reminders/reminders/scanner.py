# src/rms_reminders/reminders/scanner.py

"""
Deadline scanner.

Pure function of (now, tasks, projects): which items are overdue and which fall
inside the upcoming lookahead window. Nothing here touches persisted state.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .models import AlertKind, DerivedAlert, Project, SourceType, Task

DAY = timedelta(days=1)
DEFAULT_WINDOW_DAYS = 3


@dataclass(slots=True, frozen=True)
class ScanResult:
    overdue: tuple[DerivedAlert, ...] = ()
    upcoming: tuple[DerivedAlert, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.overdue and not self.upcoming


def days_left(deadline: datetime, now: datetime) -> int:
    """ceil((deadline - now) / 1 day); a deadline exactly at `now` is 0."""
    return math.ceil((deadline - now) / DAY)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _classify(
    *,
    source_type: SourceType,
    source_id: str,
    title: str,
    due: datetime | None,
    terminal: bool,
    now: datetime,
    horizon: datetime,
) -> DerivedAlert | None:
    if due is None or terminal:
        return None
    due = _aware(due)

    if due < now:
        return DerivedAlert(
            kind=AlertKind.OVERDUE,
            source_type=source_type,
            source_id=source_id,
            title=title,
            due_at=due,
        )

    # Closed interval [now, now + window].
    if due <= horizon:
        return DerivedAlert(
            kind=AlertKind.UPCOMING,
            source_type=source_type,
            source_id=source_id,
            title=title,
            due_at=due,
            days_left=days_left(due, now),
        )

    return None


def scan_deadlines(
    now: datetime,
    tasks: Iterable[Task],
    projects: Iterable[Project],
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> ScanResult:
    now = _aware(now)
    horizon = now + timedelta(days=window_days)

    overdue: list[DerivedAlert] = []
    upcoming: list[DerivedAlert] = []

    def put(alert: DerivedAlert | None) -> None:
        if alert is None:
            return
        (overdue if alert.kind == AlertKind.OVERDUE else upcoming).append(alert)

    for task in tasks:
        put(
            _classify(
                source_type=SourceType.TASK,
                source_id=str(task.id),
                title=task.title,
                due=task.due_date,
                terminal=task.is_terminal,
                now=now,
                horizon=horizon,
            )
        )

    for project in projects:
        put(
            _classify(
                source_type=SourceType.PROJECT,
                source_id=str(project.id),
                title=project.name,
                due=project.deadline,
                terminal=project.is_terminal,
                now=now,
                horizon=horizon,
            )
        )

    return ScanResult(overdue=tuple(overdue), upcoming=tuple(upcoming))
