# tests/test_gate.py

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from rms_reminders.reminders.gate import (
    channels_enabled,
    decide_channels,
    filter_new,
    prune_expired,
    quota_key,
    record_dispatch,
)
from rms_reminders.reminders.models import EngineState, NotificationPrefs, Project, Task, User
from rms_reminders.reminders.scanner import scan_deadlines


def _scan(now: datetime):
    return scan_deadlines(
        now,
        [
            Task(id="1", title="late", status="todo", due_date=now - timedelta(days=1)),
            Task(id="2", title="soon", status="todo", due_date=now + timedelta(days=1)),
        ],
        [Project(id="9", name="P", status="planning", deadline=now - timedelta(hours=3))],
    )


def test_filter_new_skips_identifiers_already_sent(now: datetime) -> None:
    state = EngineState(sent_overdue={"reminder-overdue-task-1": now})

    decision = filter_new(_scan(now), state)

    assert [a.identifier for a in decision.new_overdue] == ["reminder-overdue-project-9"]
    assert [a.identifier for a in decision.new_upcoming] == ["reminder-upcoming-task-2"]
    assert decision.has_work


def test_sent_logs_are_per_kind(now: datetime) -> None:
    # An upcoming entry does not suppress the overdue alert for the same task.
    state = EngineState(sent_upcoming={"reminder-overdue-task-1": now})
    decision = filter_new(_scan(now), state)
    assert "reminder-overdue-task-1" in decision.identifiers


def test_nothing_to_dispatch_when_everything_was_sent(now: datetime) -> None:
    state = EngineState()
    first = filter_new(_scan(now), state)
    record_dispatch(state, first, User(id="u", name="U", email="u@x.io"), now, email_attempted=False)

    assert not filter_new(_scan(now), state).has_work


def test_channels_enabled(user: User) -> None:
    assert channels_enabled(user)
    assert not channels_enabled(None)
    assert not channels_enabled(replace(user, notifications=NotificationPrefs(email=False, sms=False)))


def test_email_quota_is_once_per_user_per_day_and_sms_is_unmetered(user: User, now: datetime) -> None:
    user = replace(user, notifications=NotificationPrefs(email=True, sms=True))
    state = EngineState()

    assert decide_channels(user, state, now.date()) == (True, True)

    state.quota_stamps[quota_key(user.email, now.date())] = now
    assert decide_channels(user, state, now.date()) == (False, True)

    tomorrow = (now + timedelta(days=1)).date()
    assert decide_channels(user, state, tomorrow) == (True, True)


def test_quota_key_ignores_email_case(now: datetime) -> None:
    assert quota_key("Alice@Example.com", now.date()) == quota_key("alice@example.com", now.date())


def test_record_dispatch_stamps_quota_only_for_email_attempts(user: User, now: datetime) -> None:
    state = EngineState()
    decision = filter_new(_scan(now), state)

    record_dispatch(state, decision, user, now, email_attempted=False)
    assert set(state.sent_overdue) == {"reminder-overdue-task-1", "reminder-overdue-project-9"}
    assert set(state.sent_upcoming) == {"reminder-upcoming-task-2"}
    assert state.quota_stamps == {}

    record_dispatch(state, decision, user, now, email_attempted=True)
    assert quota_key(user.email, now.date()) in state.quota_stamps


def test_prune_expired_evicts_old_sent_entries_and_stale_quota(now: datetime) -> None:
    yesterday = now - timedelta(days=1)
    state = EngineState(
        sent_overdue={"old": now - timedelta(days=8), "fresh": now - timedelta(days=2)},
        sent_upcoming={"old-up": now - timedelta(days=30)},
        dismissed={"reminder-overdue-task-1": now - timedelta(days=365)},
        quota_stamps={
            quota_key("a@x.io", yesterday.date()): yesterday,
            quota_key("a@x.io", now.date()): now,
        },
    )

    removed = prune_expired(state, now, sent_retention=timedelta(days=7))

    assert removed == 3
    assert set(state.sent_overdue) == {"fresh"}
    assert state.sent_upcoming == {}
    assert list(state.quota_stamps) == [quota_key("a@x.io", now.date())]
    # Dismissals are permanent unless a retention is configured.
    assert "reminder-overdue-task-1" in state.dismissed

    prune_expired(state, now, dismissed_retention=timedelta(days=90))
    assert state.dismissed == {}
