# src/rms_reminders/reminders/engine.py

from __future__ import annotations

"""
Reminder engine.

The single owner of persisted reminder state. Every public operation is a short
load -> mutate -> save round-trip on the StateRepo, guarded by one lock, so the
console thread and the scheduler never interleave writes.

Scan cycle:
- skip entirely when there is no current user or both channels are disabled,
- scan tasks/projects for overdue/upcoming alerts,
- drop alerts already in the sent log,
- decide channels (email quota: once per user per day; SMS unmetered),
- issue sends, record the alerts as sent and save state,
- then wait for the sends to settle (for the report only).
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from ..core.ports import ChannelSender, DataSource, StateRepo
from . import feed
from .gate import (
    DEFAULT_SENT_RETENTION,
    channels_enabled,
    decide_channels,
    filter_new,
    prune_expired,
    record_dispatch,
)
from .models import Channel, FeedItem, PersistedNotification, ScanCycleReport, parse_timestamp, utcnow
from .notifier import Notifier
from .scanner import DEFAULT_WINDOW_DAYS, ScanResult, scan_deadlines

logger = logging.getLogger(__name__)


class ReminderEngine:
    def __init__(
        self,
        source: DataSource,
        store: StateRepo,
        sender: ChannelSender,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        sent_retention: timedelta = DEFAULT_SENT_RETENTION,
        dismissed_retention: timedelta | None = None,
        default_carrier: str = "verizon",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._source = source
        self._store = store
        self._notifier = Notifier(sender, default_carrier=default_carrier)
        self._window_days = int(window_days)
        self._sent_retention = sent_retention
        self._dismissed_retention = dismissed_retention
        self._clock = clock

        self._lock = threading.Lock()
        self._scan_in_flight = False

    @classmethod
    def from_settings(cls, settings, *, source: DataSource, store: StateRepo, sender: ChannelSender) -> ReminderEngine:
        dismissed_days = int(getattr(settings, "dismissed_retention_days", 0) or 0)
        return cls(
            source,
            store,
            sender,
            window_days=settings.upcoming_window_days,
            sent_retention=timedelta(days=settings.sent_retention_days),
            dismissed_retention=timedelta(days=dismissed_days) if dismissed_days > 0 else None,
            default_carrier=settings.sms_default_carrier,
        )

    # ---- scan cycle ----

    def _now(self, now: datetime | None) -> datetime:
        # Naive values are UTC, the same as stored timestamps.
        return parse_timestamp(now) or parse_timestamp(self._clock())

    def scan(self, now: datetime | None = None) -> ScanResult:
        """Live overdue/upcoming alerts from the current data."""
        now = self._now(now)
        return scan_deadlines(
            now,
            self._source.list_tasks(),
            self._source.list_projects(),
            window_days=self._window_days,
        )

    async def run_scan_cycle(self, now: datetime | None = None) -> ScanCycleReport:
        now = self._now(now)

        with self._lock:
            if self._scan_in_flight:
                logger.info("Scan already in progress; skipping overlapping run")
                return ScanCycleReport(skipped="in_flight")
            self._scan_in_flight = True

        try:
            user = self._source.current_user()
            if user is None:
                logger.info("No current user; skipping deadline checks")
                return ScanCycleReport(skipped="no_user")
            if not channels_enabled(user):
                logger.info("User %s has disabled all notifications; skipping", user.id)
                return ScanCycleReport(skipped="channels_disabled")

            scan = self.scan(now)

            with self._lock:
                state = self._store.load()
                pruned = prune_expired(
                    state,
                    now,
                    sent_retention=self._sent_retention,
                    dismissed_retention=self._dismissed_retention,
                )
                decision = filter_new(scan, state)
                logger.info(
                    "Found %d new overdue, %d new upcoming items for %s",
                    len(decision.new_overdue),
                    len(decision.new_upcoming),
                    user.id,
                )

                if not decision.has_work:
                    saved = self._store.save(state) if pruned else False
                    return ScanCycleReport(skipped="nothing_new", saved=saved)

                send_email, send_sms = decide_channels(user, state, now.date())
                messages = self._notifier.compose(
                    user,
                    decision.new_overdue,
                    decision.new_upcoming,
                    send_email=send_email,
                    send_sms=send_sms,
                )
                pending = self._notifier.start(messages)

                # Recorded on attempt, before the sends resolve.
                record_dispatch(
                    state,
                    decision,
                    user,
                    now,
                    email_attempted=pending.attempted(Channel.EMAIL),
                )
                saved = self._store.save(state)
                if not saved:
                    logger.warning("Reminder state was not saved; alerts may be sent again")

            dispatch = await pending.settle()
            return ScanCycleReport(
                new_overdue=tuple(a.identifier for a in decision.new_overdue),
                new_upcoming=tuple(a.identifier for a in decision.new_upcoming),
                email_allowed=send_email,
                sms_allowed=send_sms,
                dispatch=dispatch,
                saved=saved,
            )
        finally:
            with self._lock:
                self._scan_in_flight = False

    # ---- feed (read side) ----

    def build_feed(self, now: datetime | None = None) -> list[FeedItem]:
        scan = self.scan(now)
        with self._lock:
            state = self._store.load()
        return feed.build_feed(state.notifications, scan.overdue, scan.upcoming, state.dismissed)

    def badge_count(self, now: datetime | None = None) -> int:
        scan = self.scan(now)
        with self._lock:
            state = self._store.load()
        return feed.badge_count(state.notifications, scan.overdue, scan.upcoming, state.dismissed)

    def badge_label(self, now: datetime | None = None) -> str | None:
        return feed.format_badge(self.badge_count(now))

    # ---- feed (write side) ----

    def dismiss(self, identifier: str) -> bool:
        """Permanently hide a reminder/warning. Returns False if it was already dismissed."""
        identifier = (identifier or "").strip()
        if not identifier:
            raise ValueError("identifier is required")

        with self._lock:
            state = self._store.load()
            if identifier in state.dismissed:
                return False
            state.dismissed[identifier] = self._now(None)
            self._store.save(state)
        logger.info("Reminder dismissed: %s", identifier)
        return True

    def mark_read(self, notification_id: str) -> bool:
        with self._lock:
            state = self._store.load()
            n = state.find_notification(notification_id)
            if n is None or not n.mark_read(self._now(None)):
                return False
            self._store.save(state)
        return True

    def mark_all_read(self) -> int:
        with self._lock:
            state = self._store.load()
            now = self._now(None)
            marked = sum(1 for n in state.notifications if n.mark_read(now))
            if marked:
                self._store.save(state)
        return marked

    def remove_notification(self, notification_id: str) -> bool:
        with self._lock:
            state = self._store.load()
            before = len(state.notifications)
            state.notifications = [n for n in state.notifications if n.id != notification_id]
            if len(state.notifications) == before:
                return False
            self._store.save(state)
        logger.info("Notification removed: %s", notification_id)
        return True

    def remove_item(self, item_id: str) -> bool:
        """
        Remove a feed item by its feed id.

        notification-<id>     -> deleted from the notification store
        reminder-* / warning-* -> dismissed
        """
        item_id = (item_id or "").strip()
        if not item_id:
            raise ValueError("item_id is required")

        if item_id.startswith(feed.NOTIFICATION_PREFIX):
            return self.remove_notification(item_id[len(feed.NOTIFICATION_PREFIX):])
        if feed.is_dismissable(item_id):
            return self.dismiss(item_id)

        logger.warning("Unknown feed item id %r; nothing removed", item_id)
        return False

    def clear_notifications(self) -> int:
        with self._lock:
            state = self._store.load()
            count = len(state.notifications)
            if count:
                state.notifications = []
                self._store.save(state)
        return count

    def add_notification(
        self,
        title: str,
        message: str,
        *,
        priority: str = "normal",
        type: str = "info",
    ) -> PersistedNotification:
        if not title or not title.strip():
            raise ValueError("title is required")

        n = PersistedNotification.new(title.strip(), message, priority=priority, type=type)
        with self._lock:
            state = self._store.load()
            state.notifications.append(n)
            self._store.save(state)
        return n
