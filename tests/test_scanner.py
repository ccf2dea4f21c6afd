# tests/test_scanner.py

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from rms_reminders.reminders.models import AlertKind, Project, SourceType, Task
from rms_reminders.reminders.scanner import days_left, scan_deadlines


def test_overdue_task_until_it_reaches_a_terminal_status(now: datetime) -> None:
    task = Task(id="42", title="Write report", status="todo", due_date=now - timedelta(hours=1))

    scan = scan_deadlines(now, [task], [])
    assert [a.identifier for a in scan.overdue] == ["reminder-overdue-task-42"]
    assert scan.upcoming == ()

    for status in ("completed", "cancelled", "Completed"):
        assert scan_deadlines(now, [replace(task, status=status)], []).overdue == ()


def test_project_status_is_case_insensitive_and_only_completed_is_terminal(now: datetime) -> None:
    past = now - timedelta(days=2)
    projects = [
        Project(id="1", name="Done", status="Completed", deadline=past),
        Project(id="2", name="Dropped", status="cancelled", deadline=past),
        Project(id="3", name="Running", status="In-Progress", deadline=past),
    ]

    scan = scan_deadlines(now, [], projects)
    assert [a.source_id for a in scan.overdue] == ["2", "3"]
    assert all(a.source_type == SourceType.PROJECT for a in scan.overdue)


def test_missing_dates_never_alert(now: datetime) -> None:
    scan = scan_deadlines(
        now,
        [Task(id="1", title="No date", status="todo")],
        [Project(id="2", name="No deadline", status="planning")],
    )
    assert scan.empty


def test_upcoming_window_is_closed_and_days_left_rounds_up(now: datetime) -> None:
    tasks = [
        Task(id="at-now", title="a", status="todo", due_date=now),
        Task(id="36h", title="b", status="in-progress", due_date=now + timedelta(hours=36)),
        Task(id="edge", title="c", status="review", due_date=now + timedelta(days=3)),
        Task(id="beyond", title="d", status="todo", due_date=now + timedelta(days=3, seconds=1)),
    ]

    scan = scan_deadlines(now, tasks, [])
    by_id = {a.source_id: a for a in scan.upcoming}

    assert set(by_id) == {"at-now", "36h", "edge"}
    assert by_id["at-now"].days_left == 0
    assert by_id["36h"].days_left == 2
    assert by_id["edge"].days_left == 3
    assert all(a.kind == AlertKind.UPCOMING for a in scan.upcoming)
    assert scan.overdue == ()


def test_project_two_days_out_is_upcoming(now: datetime) -> None:
    project = Project(id="3", name="Launch", status="Planning", deadline=now + timedelta(days=2))

    scan = scan_deadlines(now, [], [project])
    assert len(scan.upcoming) == 1
    alert = scan.upcoming[0]
    assert alert.identifier == "reminder-upcoming-project-3"
    assert alert.days_left == 2


def test_identifiers_are_stable_across_scans(now: datetime) -> None:
    task = Task(id="7", title="x", status="todo", due_date=now - timedelta(days=1))
    first = scan_deadlines(now, [task], []).overdue[0].identifier
    later = scan_deadlines(now + timedelta(hours=5), [task], []).overdue[0].identifier
    assert first == later == "reminder-overdue-task-7"


def test_naive_due_dates_are_read_as_utc(now: datetime) -> None:
    naive = (now - timedelta(minutes=1)).replace(tzinfo=None)
    scan = scan_deadlines(now, [Task(id="1", title="t", status="todo", due_date=naive)], [])
    assert len(scan.overdue) == 1


def test_days_left_helper(now: datetime) -> None:
    assert days_left(now, now) == 0
    assert days_left(now + timedelta(seconds=1), now) == 1
    assert days_left(now + timedelta(days=2), now) == 2
