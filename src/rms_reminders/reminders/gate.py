# src/rms_reminders/reminders/gate.py

"""
Dedup & quota gate.

Decides which alerts are new (not yet in the sent log), which channels may be
used this cycle, and records what was attempted. All functions operate on an
explicit EngineState; loading and saving it is the engine's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .models import AlertKind, DerivedAlert, EngineState, User
from .scanner import ScanResult

logger = logging.getLogger(__name__)

DEFAULT_SENT_RETENTION = timedelta(days=7)


@dataclass(slots=True, frozen=True)
class GateDecision:
    new_overdue: tuple[DerivedAlert, ...] = ()
    new_upcoming: tuple[DerivedAlert, ...] = ()

    @property
    def has_work(self) -> bool:
        return bool(self.new_overdue or self.new_upcoming)

    @property
    def identifiers(self) -> tuple[str, ...]:
        return tuple(a.identifier for a in (*self.new_overdue, *self.new_upcoming))


def channels_enabled(user: User | None) -> bool:
    """False when there is nobody to notify; the cycle should not even scan."""
    return user is not None and user.notifications.any_enabled


def filter_new(scan: ScanResult, state: EngineState) -> GateDecision:
    sent_overdue = state.sent_log(AlertKind.OVERDUE)
    sent_upcoming = state.sent_log(AlertKind.UPCOMING)

    return GateDecision(
        new_overdue=tuple(a for a in scan.overdue if a.identifier not in sent_overdue),
        new_upcoming=tuple(a for a in scan.upcoming if a.identifier not in sent_upcoming),
    )


def quota_key(email: str, day: date) -> str:
    return f"email_sent_{(email or '').strip().lower()}_{day.isoformat()}"


def email_quota_available(state: EngineState, user: User, day: date) -> bool:
    return quota_key(user.email, day) not in state.quota_stamps


def decide_channels(user: User, state: EngineState, day: date) -> tuple[bool, bool]:
    """
    (should_send_email, should_send_sms).

    Email is capped at one send per user per calendar day; SMS is unmetered.
    """
    prefs = user.notifications
    should_send_email = prefs.email and email_quota_available(state, user, day)
    if prefs.email and not should_send_email:
        logger.info("Email already sent today to %s; skipping email channel", user.email)
    return should_send_email, prefs.sms


def record_dispatch(
    state: EngineState,
    decision: GateDecision,
    user: User,
    now: datetime,
    *,
    email_attempted: bool,
) -> None:
    """
    Mark every new alert as sent, whatever the transport outcome.

    This is at-most-once attempt semantics: a failed send is not retried.
    """
    for alert in decision.new_overdue:
        state.sent_overdue.setdefault(alert.identifier, now)
    for alert in decision.new_upcoming:
        state.sent_upcoming.setdefault(alert.identifier, now)

    if email_attempted:
        key = quota_key(user.email, now.date())
        if key not in state.quota_stamps:
            state.quota_stamps[key] = now
            logger.info("Daily email quota used for %s", user.email)


def prune_expired(
    state: EngineState,
    now: datetime,
    *,
    sent_retention: timedelta = DEFAULT_SENT_RETENTION,
    dismissed_retention: timedelta | None = None,
) -> int:
    """
    Drop sent-log entries older than `sent_retention` and quota stamps from past days.

    Dismissals only expire when `dismissed_retention` is given. Returns the number
    of evicted entries.
    """
    removed = 0

    def evict(m: dict[str, datetime], cutoff: datetime) -> int:
        stale = [k for k, added in m.items() if added < cutoff]
        for k in stale:
            del m[k]
        return len(stale)

    sent_cutoff = now - sent_retention
    removed += evict(state.sent_overdue, sent_cutoff)
    removed += evict(state.sent_upcoming, sent_cutoff)

    if dismissed_retention is not None:
        removed += evict(state.dismissed, now - dismissed_retention)

    today_suffix = f"_{now.date().isoformat()}"
    stale_stamps = [k for k in state.quota_stamps if not k.endswith(today_suffix)]
    for k in stale_stamps:
        del state.quota_stamps[k]
    removed += len(stale_stamps)

    if removed:
        logger.debug("Pruned %d expired reminder state entries", removed)
    return removed
