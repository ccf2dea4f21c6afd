# src/rms_reminders/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (data source, state store, sender) into the engine.
"""

from __future__ import annotations

import logging

from ..channels.emailjs import EmailJSSender
from ..channels.offline import LoggingSender
from ..config import get_settings
from ..core.ports import ChannelSender
from ..core.state import AppState
from ..reminders.engine import ReminderEngine
from ..storage.data_source import JsonDataSource
from ..storage.state_store import JsonStateStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_path.parent.mkdir(parents=True, exist_ok=True)


def create_sender(settings) -> ChannelSender:
    if not getattr(settings, "emailjs_configured", False):
        logger.warning("EmailJS is not configured; notifications will only be logged.")
        return LoggingSender()
    return EmailJSSender.from_settings(settings)


def create_initial_state(*, settings=None, sender: ChannelSender | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if sender is None:
        sender = create_sender(settings)

    engine = ReminderEngine.from_settings(
        settings,
        source=JsonDataSource(settings.data_path),
        store=JsonStateStore(settings.state_path),
        sender=sender,
    )
    return AppState(settings=settings, engine=engine, sender=sender)
