# src/rms_reminders/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from ..reminders.engine import ReminderEngine
from .ports import ChannelSender


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    engine: ReminderEngine
    sender: ChannelSender

    # Event loop of the background scheduler thread, when it is running.
    # Async engine calls from the console are submitted to it so that the
    # HTTP client stays on a single loop.
    loop: asyncio.AbstractEventLoop | None = None
