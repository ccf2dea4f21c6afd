# src/rms_reminders/cli/commands.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..core.state import AppState
from ..reminders.models import FeedItem, FeedItemType, ScanCycleReport

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

T = TypeVar("T")

logger = logging.getLogger(__name__)

SCAN_TIMEOUT_SECONDS = 120.0


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /feed, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def run_on_engine_loop(state: AppState, coro: Awaitable[T]) -> T:
    """
    Run an engine coroutine from the (synchronous) console thread.

    If the background scheduler is running, the coroutine goes to its loop;
    otherwise a private loop is used.
    """
    loop = state.loop
    if loop is not None and loop.is_running():
        fut = asyncio.run_coroutine_threadsafe(coro, loop)  # type: ignore[arg-type]
        return fut.result(timeout=SCAN_TIMEOUT_SECONDS)
    return asyncio.run(coro)  # type: ignore[arg-type]


def format_feed_item(index: int, item: FeedItem) -> str:
    marker = ""
    if item.item_type == FeedItemType.NOTIFICATION and not item.is_read:
        marker = " (unread)"
    when = item.timestamp.strftime("%Y-%m-%d %H:%M")
    return f"{index}. [{item.id}]{marker} {item.title}: {item.message} ({when})"


def format_scan_report(report: ScanCycleReport) -> str:
    if report.skipped:
        reasons = {
            "in_flight": "a scan is already running",
            "no_user": "no current user",
            "channels_disabled": "email and SMS notifications are disabled",
            "nothing_new": "nothing new to send",
        }
        return f"Scan skipped: {reasons.get(report.skipped, report.skipped)}."

    return (
        "Scan finished:\n"
        f"  New overdue: {', '.join(report.new_overdue) or '-'}\n"
        f"  New upcoming: {', '.join(report.new_upcoming) or '-'}\n"
        f"  Email allowed: {'yes' if report.email_allowed else 'no'}, "
        f"SMS allowed: {'yes' if report.sms_allowed else 'no'}\n"
        f"  Sent: {report.dispatch.succeeded}/{report.dispatch.attempted}"
    )


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    s = state.settings
    emailjs = "configured" if getattr(s, "emailjs_configured", False) else "offline (log only)"
    scheduler = "running" if state.loop is not None and state.loop.is_running() else "stopped"
    return (
        "Status:\n"
        f"  Scheduler: {scheduler} (every {s.scan_interval_seconds:.0f}s)\n"
        f"  Upcoming window: {s.upcoming_window_days} days\n"
        f"  Email transport: {emailjs}\n"
        f"  Data: {s.data_path}\n"
        f"  State: {s.state_path}"
    )


def cmd_scan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[SCAN] Checking deadlines...")
    report = run_on_engine_loop(state, state.engine.run_scan_cycle())
    return format_scan_report(report)


def cmd_feed(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    items = state.engine.build_feed()
    if not items:
        return "No notifications or reminders. You're all caught up!"
    lines = ["Notifications:"]
    lines += [format_feed_item(i, it) for i, it in enumerate(items, start=1)]
    return "\n".join(lines)


def cmd_badge(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    label = state.engine.badge_label()
    return f"Badge: {label}" if label else "Badge: hidden (nothing pending)"


def cmd_dismiss(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /dismiss <reminder-id>"
    if state.engine.dismiss(args[0]):
        return "Reminder dismissed!"
    return "Reminder was already dismissed."


def cmd_read(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /read all            -> mark every notification as read
    /read <id>           -> mark one notification as read (plain id or notification-<id>)
    """
    if not args:
        return "Usage: /read <notification-id> | /read all"

    arg = args[0]
    if arg.lower() == "all":
        n = state.engine.mark_all_read()
        return f"Marked {n} notification{'s' if n != 1 else ''} as read." if n else "No new notifications to mark as read."

    notification_id = arg.removeprefix("notification-")
    if state.engine.mark_read(notification_id):
        return "Notification marked as read."
    return f"No unread notification with id {notification_id}."


def cmd_remove(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /remove <feed-item-id>"
    item_id = args[0]
    if not state.engine.remove_item(item_id):
        return f"Nothing removed for {item_id}."
    if item_id.startswith("notification-"):
        return "Notification removed!"
    return "Reminder dismissed!"


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    n = state.engine.clear_notifications()
    return f"Cleared {n} notification{'s' if n != 1 else ''}!"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show scheduler and transport settings.")
registry.register("scan", cmd_scan, help_text="Run one deadline scan cycle now.")
registry.register("feed", cmd_feed, help_text="Show notifications and reminders.", aliases=["n"])
registry.register("badge", cmd_badge, help_text="Show the notification badge count.")
registry.register("dismiss", cmd_dismiss, help_text="Dismiss a reminder: /dismiss <reminder-id>.")
registry.register("read", cmd_read, help_text="Mark as read: /read <id> | /read all.")
registry.register("remove", cmd_remove, help_text="Remove a feed item: /remove <feed-item-id>.")
registry.register("clear", cmd_clear, help_text="Delete all stored notifications.")
